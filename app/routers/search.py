import logging
from typing import Any

from fastapi import APIRouter, Body, HTTPException
from pydantic import ValidationError

from app.dependencies import ListingSourceDep, SafetyDep, SearchDep
from app.exceptions.custom import ClientInputError
from app.schemas.booking import BookingDetails, BookingResult
from app.schemas.listing import Listing
from app.schemas.responses import (
    ListingResponse,
    LlmSearchRequest,
    LlmSearchResponse,
    SafetyRequest,
)
from app.schemas.safety import SafetyEvaluation

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.post("/search", response_model=ListingResponse)
async def search(
    use_case: SearchDep,
    payload: Any = Body(default=None),
) -> ListingResponse:
    result = await use_case.search_from_criteria(payload)
    return ListingResponse(
        message="Listings found",
        count=len(result.listings),
        listings=result.listings,
    )


@router.post("/llm-search", response_model=LlmSearchResponse)
async def llm_search(
    use_case: SearchDep,
    request: LlmSearchRequest | None = None,
) -> LlmSearchResponse:
    if not use_case.has_interpreter:
        raise HTTPException(status_code=503, detail="Anthropic not configured")

    result = await use_case.search_from_message(request.message if request else None)
    return LlmSearchResponse(
        message="Listings found",
        derived_criteria=result.derived_criteria,
        count=len(result.listings),
        listings=result.listings,
    )


@router.post("/safety", response_model=SafetyEvaluation)
async def check_safety(
    evaluator: SafetyDep,
    request: SafetyRequest | None = None,
) -> SafetyEvaluation:
    if evaluator is None:
        raise HTTPException(status_code=503, detail="Anthropic not configured")
    if request is None or not request.listing:
        raise ClientInputError("Listing context is required", details={"field": "listing"})

    try:
        listing = Listing.model_validate(request.listing)
    except ValidationError as exc:
        raise ClientInputError.from_validation("Invalid listing", exc, field="listing") from exc

    return await evaluator.evaluate(listing)


@router.post("/bookings", response_model=BookingResult)
async def create_booking(
    source: ListingSourceDep,
    payload: dict[str, Any] | None = Body(default=None),
) -> BookingResult:
    try:
        details = BookingDetails.model_validate(payload or {})
    except ValidationError as exc:
        raise ClientInputError.from_validation("Invalid booking details", exc) from exc

    return await source.create_booking(details)
