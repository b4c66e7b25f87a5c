import logging
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse

from app.config import Settings
from app.exceptions.custom import (
    ClientInputError,
    MalformedResponseError,
    RateLimitError,
    UpstreamError,
)
from app.exceptions.handlers import (
    client_input_error_handler,
    internal_error_handler,
    malformed_response_error_handler,
    rate_limit_error_handler,
    request_validation_error_handler,
    upstream_error_handler,
)
from app.routers.search import router as search_router
from app.services.claude import ClaudeService
from app.services.interpreter import ClaudeInterpreter, RequirementInterpreter
from app.services.listing_source import HttpListingSource, ListingSource, MockListingSource
from app.services.safety import SafetyEvaluator
from app.services.search import SearchListingsUseCase

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
        listing_source: ListingSource
        if settings.listing_provider == "http":
            if not settings.listing_api_url:
                raise RuntimeError("LISTING_API_URL is required when LISTING_PROVIDER=http")
            listing_source = HttpListingSource(
                client, settings.listing_api_url, settings.listing_api_key
            )
        else:
            listing_source = MockListingSource()
        logger.info("Using %s", type(listing_source).__name__)

        interpreter: RequirementInterpreter | None = None
        if settings.anthropic_api_key:
            claude = ClaudeService(settings.anthropic_api_key, model=settings.anthropic_model)
            interpreter = ClaudeInterpreter(claude)
        else:
            logger.warning("ANTHROPIC_API_KEY not set, natural-language search and safety disabled")

        app.state.listing_source = listing_source
        app.state.search_use_case = SearchListingsUseCase(listing_source, interpreter)
        app.state.safety_evaluator = SafetyEvaluator(interpreter) if interpreter else None

        yield


app = FastAPI(title="Hacker House Booking Agent", lifespan=lifespan)

app.add_exception_handler(ClientInputError, client_input_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_error_handler)
app.add_exception_handler(UpstreamError, upstream_error_handler)
app.add_exception_handler(RateLimitError, rate_limit_error_handler)
app.add_exception_handler(MalformedResponseError, malformed_response_error_handler)
app.add_exception_handler(Exception, internal_error_handler)

app.include_router(search_router)


@app.get("/", response_class=PlainTextResponse)
async def root() -> str:
    return "Hacker House Booking Agent API is running"
