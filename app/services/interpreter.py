import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import date
from typing import Any

from pydantic import ValidationError

from app.exceptions.custom import MalformedResponseError
from app.schemas.requirements import TravelRequirements
from app.services.claude import SERVICE_NAME, ClaudeService

logger = logging.getLogger(__name__)

_REQUIREMENTS_PROMPT = (
    "You turn a group travel request for a hacker house into structured requirements. "
    "Today is {today}.\n"
    "Return ONLY valid JSON, no markdown, with exactly this shape:\n"
    "{{\n"
    '  "destination": {{"city": string|null, "country": string|null, "region": string|null, '
    '"rawText": string}},\n'
    '  "dates": {{"startDate": "YYYY-MM-DD"|null, "endDate": "YYYY-MM-DD"|null, '
    '"roughWindow": string|null, "durationDays": integer|null, "isFlexible": boolean}},\n'
    '  "travelers": {{"count": integer|null, "roomPreferences": string|null}},\n'
    '  "budget": {{"amount": number|null, "currency": string|null, "perPerson": boolean|null}}|null,\n'
    '  "workspace": {{"needs": [string], "wifi": boolean|null, "coworking": boolean|null}},\n'
    '  "vibe": [string],\n'
    '  "constraints": [{{"description": string, "type": "HARD"|"SOFT"|"COMMONSENSE"}}]\n'
    "}}\n"
    "rawText is the destination exactly as the user wrote it. "
    "Only fill city when the user names or clearly implies a single city; never guess one. "
    "Budget amounts are per night. Use null for anything the request does not say."
)

_SAFETY_PROMPT = (
    "You assess how safe the area around a short-term rental is for a group of travellers "
    "working late and walking at night. Consider the neighborhood, city, coordinates and "
    "amenities you are given.\n"
    "Return ONLY valid JSON, no markdown: "
    '{"safety_score": integer from 0 (unsafe) to 100 (very safe), '
    '"reason": one or two sentences explaining the score}'
)


class RequirementInterpreter(ABC):
    """Language-understanding capability behind the search pipeline."""

    @abstractmethod
    async def parse_requirements(self, message: str) -> TravelRequirements:
        ...

    @abstractmethod
    async def score_safety(self, listing_context: dict[str, Any]) -> Any:
        """Return the raw, unvalidated ``{"safety_score", "reason"}`` payload."""


class ClaudeInterpreter(RequirementInterpreter):
    def __init__(self, claude: ClaudeService, today: Callable[[], date] = date.today):
        self._claude = claude
        self._today = today

    async def parse_requirements(self, message: str) -> TravelRequirements:
        system_prompt = _REQUIREMENTS_PROMPT.format(today=self._today().isoformat())
        data = await self._claude.analyze(system_prompt, message)
        try:
            return TravelRequirements.model_validate(data)
        except ValidationError as exc:
            logger.warning("Requirements from Claude failed validation: %s", exc)
            raise MalformedResponseError(
                SERVICE_NAME,
                f"travel requirements did not match the expected shape ({exc.error_count()} errors)",
            ) from exc

    async def score_safety(self, listing_context: dict[str, Any]) -> Any:
        return await self._claude.analyze(_SAFETY_PROMPT, json.dumps(listing_context))
