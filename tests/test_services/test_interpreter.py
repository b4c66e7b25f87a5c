from datetime import date
from unittest.mock import AsyncMock

import pytest

from app.exceptions.custom import MalformedResponseError, UpstreamError
from app.schemas.requirements import ConstraintSeverity
from app.services.claude import ClaudeService
from app.services.interpreter import ClaudeInterpreter

REQUIREMENTS_JSON = {
    "destination": {"city": "Lisbon", "country": "Portugal", "rawText": "Lisbon"},
    "dates": {"roughWindow": "mid-May", "durationDays": 7, "isFlexible": True},
    "travelers": {"count": 12, "roomPreferences": "single rooms"},
    "budget": {"amount": 150, "currency": "USD", "perPerson": True},
    "workspace": {"needs": ["strong wifi"], "wifi": True},
    "vibe": ["beach", "chill"],
    "constraints": [{"description": "Must have strong wifi", "type": "HARD"}],
}


def _interpreter(analyze: AsyncMock) -> ClaudeInterpreter:
    claude = ClaudeService(api_key="test-key")
    claude.analyze = analyze
    return ClaudeInterpreter(claude, today=lambda: date(2026, 3, 10))


async def test_parse_requirements_success():
    analyze = AsyncMock(return_value=REQUIREMENTS_JSON)
    requirements = await _interpreter(analyze).parse_requirements("12 of us to Lisbon mid-May")

    assert requirements.destination.city == "Lisbon"
    assert requirements.dates.duration_days == 7
    assert requirements.travelers.room_preferences == "single rooms"
    assert requirements.constraints[0].type == ConstraintSeverity.HARD

    system_prompt, user_prompt = analyze.call_args.args
    assert "2026-03-10" in system_prompt
    assert user_prompt == "12 of us to Lisbon mid-May"


async def test_parse_requirements_shape_mismatch():
    analyze = AsyncMock(return_value={"destination": {"city": "Lisbon"}})
    with pytest.raises(MalformedResponseError):
        await _interpreter(analyze).parse_requirements("Lisbon")


async def test_parse_requirements_bad_constraint_type():
    bad = {**REQUIREMENTS_JSON, "constraints": [{"description": "x", "type": "MAYBE"}]}
    with pytest.raises(MalformedResponseError):
        await _interpreter(AsyncMock(return_value=bad)).parse_requirements("Lisbon")


async def test_parse_requirements_upstream_error_propagates():
    analyze = AsyncMock(side_effect=UpstreamError("Anthropic", "down"))
    with pytest.raises(UpstreamError):
        await _interpreter(analyze).parse_requirements("Lisbon")


async def test_score_safety_returns_raw_payload():
    payload = {"safety_score": 150, "reason": "fine"}
    analyze = AsyncMock(return_value=payload)
    result = await _interpreter(analyze).score_safety({"name": "Hacker Haven", "city": "Lisbon"})

    assert result == payload
    _, user_prompt = analyze.call_args.args
    assert "Hacker Haven" in user_prompt
