from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

import httpx

from app.core.config import Settings
from app.core.exceptions import (
    ProviderConfigurationError,
    ProviderError,
    ProviderResponseError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)
from app.core.logging import get_logger
from app.services.providers.http_client import CircuitBreaker, post_json
from app.services.shipping.types import DeliveryRange, RateOption, RateRequest

logger = get_logger(__name__)

CALCULATE_PATH = "/me/shipment/calculate"


def to_cents(value: Any) -> int:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ProviderResponseError(details=f"invalid price {value!r}") from exc
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _slug(value: str) -> str:
    return "-".join(value.lower().split())


class MelhorEnvioRateProvider:
    name = "melhor_envio"
    estimated = False

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
        breaker: CircuitBreaker | None = None,
    ) -> None:
        if not settings.melhor_envio_token:
            raise ProviderConfigurationError(details="MELHOR_ENVIO_TOKEN is not set")
        self.settings = settings
        self.transport = transport
        self.breaker = breaker or CircuitBreaker()

    @property
    def url(self) -> str:
        return self.settings.melhor_envio_api_url.rstrip("/") + CALCULATE_PATH

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.settings.melhor_envio_token}",
            "User-Agent": self.settings.melhor_envio_user_agent,
        }

    def build_payload(self, request: RateRequest) -> dict[str, Any]:
        return {
            "from": {"postal_code": request.from_zip},
            "to": {"postal_code": request.to_zip},
            "products": [package.to_payload() for package in request.packages],
            "services": self.settings.melhor_envio_services,
            "options": {
                "insurance_value": 0,
                "receipt": False,
                "own_hand": False,
                "reverse": False,
                "non_commercial": False,
                "platform": self.settings.melhor_envio_platform,
            },
        }

    async def quote(self, request: RateRequest) -> list[RateOption]:
        if not self.breaker.allow():
            raise ProviderUnavailableError(details="circuit open")

        try:
            payload = await post_json(
                self.url,
                self.build_payload(request),
                headers=self._headers(),
                timeout=self.settings.melhor_envio_timeout_seconds,
                transport=self.transport,
            )
        except httpx.TimeoutException as exc:
            self.breaker.record_failure()
            logger.warning("melhor_envio_timeout", to_zip=request.to_zip)
            raise ProviderTimeoutError(details=str(exc)) from exc
        except httpx.HTTPStatusError as exc:
            raise self._status_error(exc, request) from exc
        except httpx.TransportError as exc:
            self.breaker.record_failure()
            logger.warning("melhor_envio_unreachable", error=str(exc))
            raise ProviderUnavailableError(details=str(exc)) from exc
        except ValueError as exc:
            logger.error("melhor_envio_invalid_json", to_zip=request.to_zip)
            raise ProviderResponseError(details="response body is not JSON") from exc

        self.breaker.record_success()
        if not isinstance(payload, list):
            logger.error("melhor_envio_unexpected_body", body_type=type(payload).__name__)
            raise ProviderResponseError(details="expected a list of services")

        options = []
        for item in payload:
            option = self._parse_option(item)
            if option is not None:
                options.append(option)
        return options

    def _status_error(self, exc: httpx.HTTPStatusError, request: RateRequest) -> ProviderError:
        status_code = exc.response.status_code
        if status_code in (401, 403):
            logger.error("melhor_envio_auth_failed", status=status_code)
            return ProviderConfigurationError(details=f"upstream status {status_code}")
        if status_code >= 500:
            self.breaker.record_failure()
            logger.warning("melhor_envio_server_error", status=status_code, to_zip=request.to_zip)
            return ProviderUnavailableError(details=f"upstream status {status_code}")
        logger.error("melhor_envio_request_rejected", status=status_code, to_zip=request.to_zip)
        return ProviderError(details=f"upstream status {status_code}")

    def _parse_option(self, item: Any) -> RateOption | None:
        if not isinstance(item, dict):
            raise ProviderResponseError(details="service entry is not an object")
        if item.get("error"):
            logger.info("melhor_envio_service_unavailable", service=item.get("name"), reason=item.get("error"))
            return None

        try:
            company = item["company"]
            company_name = company["name"]
            name = item["name"]
            delivery_time = int(item["delivery_time"])
            final_price = item.get("final_price", item.get("price"))
            original_price = item.get("price", final_price)
        except (KeyError, TypeError, ValueError) as exc:
            raise ProviderResponseError(details=f"malformed service entry: {exc}") from exc
        if final_price is None:
            raise ProviderResponseError(details=f"service {name} has no price")

        delivery_range = item.get("delivery_range")
        if isinstance(delivery_range, dict) and "min" in delivery_range and "max" in delivery_range:
            window = DeliveryRange(min=int(delivery_range["min"]), max=int(delivery_range["max"]))
        else:
            window = DeliveryRange(min=max(delivery_time - 2, 1), max=delivery_time + 2)

        return RateOption(
            id=f"{_slug(company_name)}-{_slug(name)}",
            name=name,
            company=company_name,
            company_id=company.get("id"),
            price=to_cents(final_price),
            original_price=to_cents(original_price),
            delivery_time=delivery_time,
            delivery_range=window,
            logo=company.get("picture") or "",
            currency=item.get("currency") or "BRL",
        )
