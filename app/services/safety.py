import logging
from collections.abc import Mapping
from typing import Any

from app.exceptions.custom import MalformedResponseError
from app.schemas.listing import Listing
from app.schemas.safety import SafetyEvaluation
from app.services.claude import SERVICE_NAME
from app.services.interpreter import RequirementInterpreter

logger = logging.getLogger(__name__)

MIN_SCORE = 0
MAX_SCORE = 100


def build_listing_context(listing: Listing) -> dict[str, Any]:
    context: dict[str, Any] = {
        "name": listing.name,
        "city": listing.city,
        "amenities": list(listing.amenities),
    }
    if listing.neighborhood:
        context["neighborhood"] = listing.neighborhood
    if listing.coordinates is not None:
        context["coordinates"] = {"lat": listing.coordinates.lat, "lng": listing.coordinates.lng}
    if listing.description:
        context["description"] = listing.description
    if listing.insights is not None:
        context["areaSafety"] = listing.insights.area_safety
    return context


def validate_safety_payload(payload: Any) -> SafetyEvaluation:
    """Check shape and bounds of an upstream safety score. Never clamps."""
    if not isinstance(payload, Mapping):
        raise MalformedResponseError(SERVICE_NAME, "safety response is not an object")

    score = payload.get("safety_score")
    # bool is an int subclass
    if isinstance(score, bool) or not isinstance(score, int):
        raise MalformedResponseError(SERVICE_NAME, f"safety_score is not an integer: {score!r}")
    if not MIN_SCORE <= score <= MAX_SCORE:
        raise MalformedResponseError(
            SERVICE_NAME, f"safety_score {score} outside [{MIN_SCORE}, {MAX_SCORE}]"
        )

    reason = payload.get("reason")
    if not isinstance(reason, str) or not reason.strip():
        raise MalformedResponseError(SERVICE_NAME, "reason is empty")

    return SafetyEvaluation(safety_score=score, reason=reason)


class SafetyEvaluator:
    def __init__(self, interpreter: RequirementInterpreter):
        self._interpreter = interpreter

    async def evaluate(self, listing: Listing) -> SafetyEvaluation:
        context = build_listing_context(listing)
        payload = await self._interpreter.score_safety(context)
        evaluation = validate_safety_payload(payload)
        logger.info("Safety score for listing %s: %d", listing.id, evaluation.safety_score)
        return evaluation
