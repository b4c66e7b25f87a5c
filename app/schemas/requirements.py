from datetime import date
from enum import StrEnum

from app.schemas.base import ValueModel


class ConstraintSeverity(StrEnum):
    HARD = "HARD"
    SOFT = "SOFT"
    COMMONSENSE = "COMMONSENSE"


class Destination(ValueModel):
    city: str | None = None
    country: str | None = None
    region: str | None = None
    raw_text: str  # kept so an unresolved destination stays traceable


class TravelDates(ValueModel):
    start_date: date | None = None
    end_date: date | None = None
    rough_window: str | None = None
    duration_days: int | None = None
    is_flexible: bool


class Travelers(ValueModel):
    count: int | None = None
    room_preferences: str | None = None


class Budget(ValueModel):
    amount: float | None = None
    currency: str | None = None
    per_person: bool | None = None


class WorkspaceNeeds(ValueModel):
    needs: tuple[str, ...]
    wifi: bool | None = None
    coworking: bool | None = None


class Constraint(ValueModel):
    description: str
    type: ConstraintSeverity


class TravelRequirements(ValueModel):
    destination: Destination
    dates: TravelDates
    travelers: Travelers
    budget: Budget | None = None
    workspace: WorkspaceNeeds
    vibe: tuple[str, ...] = ()
    constraints: tuple[Constraint, ...] = ()
