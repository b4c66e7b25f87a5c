"""Pure functions mapping interpreted travel requirements to search criteria.

No I/O, no side effects. The reference date for rough windows is passed in
so the same requirements always derive the same criteria.
"""

import math
import re
from datetime import date, timedelta

from pydantic import ValidationError

from app.exceptions.custom import ClientInputError
from app.schemas.listing import SearchCriteria, SearchFilters
from app.schemas.requirements import ConstraintSeverity, TravelDates, TravelRequirements

TRAVELERS_PER_BEDROOM = 2
WORKSPACE_SCORE_THRESHOLD = 7.0

GAP_DESTINATION = "unresolvable destination"
GAP_DATES = "unresolvable dates"
GAP_TRAVELERS = "unresolvable traveler count"

_SINGLE_OCCUPANCY_RE = re.compile(
    r"\b(single|private|own room|own rooms|separate|individual)\b", re.IGNORECASE
)
_WORKSPACE_RE = re.compile(
    r"\b(wi-?fi|internet|workspace|desk|co-?working)\b", re.IGNORECASE
)
_ISO_DATE_RE = re.compile(r"\b(\d{4})-(\d{2})-(\d{2})\b")

MONTHS: dict[str, int] = {
    "january": 1, "february": 2, "march": 3, "april": 4,
    "may": 5, "june": 6, "july": 7, "august": 8,
    "september": 9, "october": 10, "november": 11, "december": 12,
}

# Qualifier → anchor day within the month
WINDOW_QUALIFIERS: dict[str, int] = {
    "early": 1,
    "beginning": 1,
    "start": 1,
    "mid": 15,
    "middle": 15,
    "late": 22,
    "end": 22,
}

_MONTH_NAMES = sorted(
    set(MONTHS) | {name[:3] for name in MONTHS} | {"sept"}, key=len, reverse=True
)

_MONTH_RE = re.compile(
    r"\b(?:(?P<qualifier>" + "|".join(WINDOW_QUALIFIERS) + r")[\s-]+(?:of\s+)?)?"
    r"(?P<month>" + "|".join(_MONTH_NAMES) + r")\.?\b",
    re.IGNORECASE,
)

# Lowercase and unqualified, these are usually words, not months ("we may go")
_AMBIGUOUS_MONTH_WORDS = {"may", "mar"}

def derive_bedrooms(count: int | None, room_preferences: str | None = None) -> int:
    """Bedrooms needed for a group.

    Two travelers share a bedroom unless the room preference asks for
    single occupancy, in which case every traveler gets one.
    """
    if count is None or count <= 0:
        raise ClientInputError(
            "Could not determine how many people are travelling",
            details={"gap": GAP_TRAVELERS, "count": count},
        )
    if room_preferences and _SINGLE_OCCUPANCY_RE.search(room_preferences):
        return count
    return math.ceil(count / TRAVELERS_PER_BEDROOM)


def _pick_month_match(window: str) -> re.Match | None:
    """Pick the month mention a window refers to.

    Qualified mentions ("late June") win over bare ones. A bare lowercase
    "may" or "mar" only counts when no other month is named.
    """
    matches = list(_MONTH_RE.finditer(window))
    clear = [
        m for m in matches
        if m.group("qualifier") or m.group("month") not in _AMBIGUOUS_MONTH_WORDS
    ]
    candidates = clear or matches
    if not candidates:
        return None
    return next((m for m in candidates if m.group("qualifier")), candidates[0])


def resolve_rough_window(window: str | None, today: date) -> date | None:
    """Resolve text like "mid-May" to the next date on or after ``today``.

    Returns None when the text names no recognisable period.
    """
    if not window:
        return None

    iso = _ISO_DATE_RE.search(window)
    if iso:
        try:
            return date(int(iso.group(1)), int(iso.group(2)), int(iso.group(3)))
        except ValueError:
            return None

    match = _pick_month_match(window)
    if match is None:
        return None

    prefix = match.group("month").lower()[:3]
    month = next(num for name, num in MONTHS.items() if name.startswith(prefix))
    qualifier = (match.group("qualifier") or "early").lower()
    day = WINDOW_QUALIFIERS[qualifier]

    anchor = date(today.year, month, day)
    if anchor < today:
        anchor = date(today.year + 1, month, day)
    return anchor


def derive_dates(dates: TravelDates, today: date) -> tuple[date, date]:
    """Resolve a check-in/check-out pair.

    Priority:
      1. explicit start and end dates
      2. explicit start date + duration
      3. rough window + duration
    """
    start, end = dates.start_date, dates.end_date
    duration = dates.duration_days if dates.duration_days and dates.duration_days > 0 else None

    if start is None:
        start = resolve_rough_window(dates.rough_window, today)
    if end is None and start is not None and duration:
        end = start + timedelta(days=duration)

    if start is None or end is None:
        raise ClientInputError(
            "Could not resolve travel dates",
            details={
                "gap": GAP_DATES,
                "roughWindow": dates.rough_window,
                "durationDays": dates.duration_days,
            },
        )
    if end <= start:
        raise ClientInputError(
            "Check-out date must be after check-in date",
            details={"gap": GAP_DATES, "startDate": start.isoformat(), "endDate": end.isoformat()},
        )
    return start, end


def derive_filters(requirements: TravelRequirements) -> SearchFilters | None:
    max_price = None
    budget = requirements.budget
    if budget is not None and budget.amount is not None:
        max_price = budget.amount
        count = requirements.travelers.count
        if budget.per_person and count:
            max_price = budget.amount * count

    min_workspace_score = None
    for constraint in requirements.constraints:
        if constraint.type == ConstraintSeverity.HARD and _WORKSPACE_RE.search(constraint.description):
            min_workspace_score = WORKSPACE_SCORE_THRESHOLD
            break

    if max_price is None and min_workspace_score is None:
        return None
    return SearchFilters(max_price=max_price, min_workspace_score=min_workspace_score)


def derive_search_criteria(requirements: TravelRequirements, today: date) -> SearchCriteria:
    """Map interpreted requirements to listing-source criteria.

    Raises ClientInputError naming the gap when the destination city,
    the dates or the traveler count cannot be resolved.
    """
    destination = requirements.destination
    city = (destination.city or "").strip()
    if not city:
        raise ClientInputError(
            "Could not resolve a destination city",
            details={"gap": GAP_DESTINATION, "rawText": destination.raw_text},
        )

    check_in, check_out = derive_dates(requirements.dates, today)
    bedrooms = derive_bedrooms(
        requirements.travelers.count, requirements.travelers.room_preferences
    )

    try:
        filters = derive_filters(requirements)
    except ValidationError as exc:
        raise ClientInputError.from_validation(
            "Budget cannot be turned into a price filter", exc, gap="invalid budget"
        ) from exc

    return SearchCriteria(
        city=city,
        check_in_date=check_in,
        check_out_date=check_out,
        bedrooms=bedrooms,
        filters=filters,
    )
