from __future__ import annotations


class ShippingError(Exception):
    status_code = 500
    retryable = False

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ShippingValidationError(ShippingError):
    status_code = 400


class InvalidPostalCodeError(ShippingValidationError):
    def __init__(self, postal_code: str | None) -> None:
        super().__init__(
            "Invalid postal code. Use a valid CEP in the format 00000-000",
            details=f"postal_code={postal_code!r}",
        )
        self.postal_code = postal_code


class EmptyCartError(ShippingValidationError):
    def __init__(self) -> None:
        super().__init__("Cart is empty")


class MissingDimensionsError(ShippingValidationError):
    def __init__(self, product_id: str) -> None:
        super().__init__(
            f'Product "{product_id}" has no weight or dimensions. '
            "Configure them before calculating shipping."
        )
        self.product_id = product_id


class InvalidDimensionsError(ShippingValidationError):
    def __init__(self, value: str) -> None:
        super().__init__(
            "Invalid dimensions format. Use: width x height x length",
            details=f"dimensions={value!r}",
        )


class ProviderError(ShippingError):
    def __init__(self, message: str = "Shipping service failed. Please try again later.", details: str | None = None) -> None:
        super().__init__(message, details)


class ProviderConfigurationError(ProviderError):
    def __init__(self, details: str | None = None) -> None:
        super().__init__("Shipping service is not available at the moment.", details)


class ProviderTimeoutError(ProviderError):
    status_code = 503
    retryable = True

    def __init__(self, details: str | None = None) -> None:
        super().__init__("Shipping quote timed out. Please try again.", details)


class ProviderUnavailableError(ProviderError):
    status_code = 503
    retryable = True

    def __init__(self, details: str | None = None) -> None:
        super().__init__("Shipping service is temporarily unavailable. Please try again.", details)


class ProviderResponseError(ProviderError):
    pass


class RateLimitExceeded(Exception):
    status_code = 429

    def __init__(self, key: str, retry_after: int) -> None:
        super().__init__("Too many requests. Wait a moment and try again.")
        self.key = key
        self.retry_after = retry_after


class PixError(Exception):
    pass


class PixValidationError(PixError):
    pass


class PixFieldTooLongError(PixValidationError):
    def __init__(self, tag: str, length: int) -> None:
        super().__init__(f"PIX field {tag} is {length} characters long; the limit is 99")
        self.tag = tag
        self.length = length
