import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .custom import (
    ClientInputError,
    MalformedResponseError,
    RateLimitError,
    UpstreamError,
    format_validation_errors,
)

logger = logging.getLogger(__name__)


async def client_input_error_handler(_request: Request, exc: ClientInputError) -> JSONResponse:
    logger.info("Client input error: %s (details=%s)", exc.message, exc.details)
    return JSONResponse(
        status_code=400,
        content={"error": exc.message, "details": exc.details},
    )


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    # Same 400 envelope as ClientInputError; locations drop the leading "body"
    errors = [
        {**err, "loc": tuple(err["loc"])[1:] if tuple(err["loc"])[:1] == ("body",) else err["loc"]}
        for err in exc.errors()
    ]
    return await client_input_error_handler(
        request,
        ClientInputError("Invalid request body", details={"errors": format_validation_errors(errors)}),
    )


async def upstream_error_handler(_request: Request, exc: UpstreamError) -> JSONResponse:
    logger.error("%s error: %s (status=%s)", exc.service, exc.message, exc.status_code)
    return JSONResponse(
        status_code=502,
        content={"error": f"{exc.service} error: {exc.message}"},
    )


async def rate_limit_error_handler(_request: Request, exc: RateLimitError) -> JSONResponse:
    logger.warning("Rate limit hit for %s", exc.service)
    return JSONResponse(
        status_code=429,
        content={"error": f"Rate limit exceeded for {exc.service}"},
    )


async def malformed_response_error_handler(
    _request: Request, exc: MalformedResponseError
) -> JSONResponse:
    logger.error("Malformed response from %s: %s", exc.service, exc.message)
    return JSONResponse(
        status_code=502,
        content={"error": f"Malformed response from {exc.service}: {exc.message}"},
    )


async def internal_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal Server Error"},
    )
