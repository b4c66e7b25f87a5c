import json
import logging
import re

import anthropic
from anthropic import AsyncAnthropic

from app.exceptions.custom import RateLimitError, UpstreamError

logger = logging.getLogger(__name__)

MODEL = "claude-sonnet-4-20250514"
SERVICE_NAME = "Anthropic"


class ClaudeService:
    def __init__(self, api_key: str, model: str = MODEL, max_tokens: int = 1024):
        self._client = AsyncAnthropic(api_key=api_key)
        self._model = model
        self._max_tokens = max_tokens

    async def analyze(self, system_prompt: str, user_prompt: str) -> dict:
        """Send one prompt and return the JSON object in the reply.

        Raises UpstreamError when the API fails or the reply holds no JSON object.
        """
        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
            )
        except anthropic.RateLimitError as exc:
            raise RateLimitError(SERVICE_NAME) from exc
        except anthropic.APIStatusError as exc:
            logger.exception("Claude API call failed")
            raise UpstreamError(SERVICE_NAME, exc.message, status_code=exc.status_code) from exc
        except anthropic.APIError as exc:
            logger.exception("Claude API call failed")
            raise UpstreamError(SERVICE_NAME, str(exc)) from exc

        text = next(
            (block.text for block in response.content if getattr(block, "type", None) == "text"),
            None,
        )
        if text is None:
            raise UpstreamError(SERVICE_NAME, "response contained no text")

        parsed = self._try_parse_json(text)
        if parsed is None:
            logger.warning("No JSON object in Claude reply: %.200s", text)
            raise UpstreamError(SERVICE_NAME, "response did not contain a JSON object")
        return parsed

    @staticmethod
    def _try_parse_json(text: str) -> dict | None:
        # Strip markdown fences
        stripped = re.sub(r"```(?:json)?\s*", "", text).strip().rstrip("`")

        # Try direct parse
        try:
            obj = json.loads(stripped)
            if isinstance(obj, dict):
                return obj
        except (json.JSONDecodeError, ValueError):
            pass

        # Fallback: outermost braces in the text (objects may be nested)
        start, end = text.find("{"), text.rfind("}")
        if start != -1 and end > start:
            try:
                obj = json.loads(text[start:end + 1])
                if isinstance(obj, dict):
                    return obj
            except (json.JSONDecodeError, ValueError):
                pass

        return None
