from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError


def format_validation_errors(errors: Sequence[Mapping[str, Any]]) -> list[dict[str, str]]:
    return [
        {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
        for err in errors
    ]


class ClientInputError(Exception):
    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details
        super().__init__(message)

    @classmethod
    def from_validation(
        cls, message: str, exc: ValidationError, **extra: Any
    ) -> "ClientInputError":
        return cls(message, details={**extra, "errors": format_validation_errors(exc.errors())})


class UpstreamError(Exception):
    def __init__(self, service: str, message: str, status_code: int | None = None):
        self.service = service
        self.message = message
        self.status_code = status_code
        super().__init__(f"{service}: {message}")


class RateLimitError(UpstreamError):
    def __init__(self, service: str):
        super().__init__(service, f"Rate limit exceeded for {service}", status_code=429)


class MalformedResponseError(Exception):
    def __init__(self, service: str, message: str):
        self.service = service
        self.message = message
        super().__init__(f"{service}: {message}")
