from __future__ import annotations

import asyncio
import contextlib
import traceback
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import get_settings
from app.core.deps import get_rate_engine, get_rate_limiter
from app.core.exceptions import ProviderConfigurationError, RateLimitExceeded, ShippingError, ShippingValidationError
from app.core.logging import configure_logging, get_logger
from app.routers import pix, shipping
from app.schemas.common import ErrorResponse
from app.schemas.pix import PixErrorResponse
from app.services.shipping.cache import sweep_periodically

settings = get_settings()

configure_logging()
logger = get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    engine = get_rate_engine()
    sweeper = asyncio.create_task(
        sweep_periodically(engine.cache, settings.shipping_cache_sweep_seconds, get_rate_limiter())
    )
    try:
        yield
    finally:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper


app = FastAPI(
    title=settings.app_name,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(shipping.router, prefix=settings.api_prefix)
app.include_router(pix.router, prefix=settings.api_prefix)


@app.get("/")
async def root():
    return {"service": settings.app_name}


@app.exception_handler(ShippingError)
async def shipping_error_handler(request: Request, exc: ShippingError):
    if isinstance(exc, ShippingValidationError):
        logger.info("shipping_rejected", path=str(request.url.path), error=exc.message)
    elif isinstance(exc, ProviderConfigurationError):
        logger.error("shipping_provider_misconfigured", path=str(request.url.path), details=exc.details)
    else:
        logger.warning(
            "shipping_failed",
            path=str(request.url.path),
            error=type(exc).__name__,
            retryable=exc.retryable,
            details=exc.details,
        )

    body = ErrorResponse(error=exc.message)
    if isinstance(exc, ShippingValidationError):
        body.details = exc.details
    elif settings.environment == "development":
        body.details = exc.details
        body.stack = "".join(traceback.format_exception(exc))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    logger.info("request_rejected", path=str(request.url.path), problems=problems)
    if request.url.path.startswith(f"{settings.api_prefix}/pix"):
        content = PixErrorResponse(error=f"Invalid request: {problems}").model_dump()
    else:
        content = ErrorResponse(error="Invalid request body", details=problems).model_dump(exclude_none=True)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.info("rate_limited", path=str(request.url.path), client=exc.key)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc)).model_dump(exclude_none=True),
        headers={"Retry-After": str(exc.retry_after)},
    )


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    logger.info("request", path=str(request.url.path), method=request.method, request_id=request_id)
    response.headers["X-Request-ID"] = request_id
    return response
