from datetime import date

from pydantic import Field, field_validator, model_validator

from app.schemas.base import ValueModel


class Coordinates(ValueModel):
    lat: float
    lng: float


class EventLocation(ValueModel):
    name: str
    coordinates: Coordinates


class Proximity(ValueModel):
    description: str
    distance_km: float | None = None


class CoworkingProximity(Proximity):
    name: str | None = None


class ListingInsights(ValueModel):
    listing_id: str
    area_safety: str
    event_proximity: Proximity
    coworking_proximity: CoworkingProximity
    caveats: str | None = None


class Listing(ValueModel):
    id: str
    name: str
    city: str
    price: float = Field(ge=0)
    bedrooms: int = Field(ge=0)
    safety_score: float  # conventionally 0-10
    distance_to_event: float = Field(ge=0)
    workspace_score: float
    amenities: tuple[str, ...] = ()
    description: str | None = None
    link: str | None = None
    neighborhood: str | None = None
    coordinates: Coordinates | None = None
    rating: float | None = None
    reviews_count: int | None = None
    images: tuple[str, ...] = ()
    insights: ListingInsights | None = None


class SearchFilters(ValueModel):
    min_price: float | None = Field(default=None, ge=0)
    max_price: float | None = Field(default=None, ge=0)
    min_safety_score: float | None = Field(default=None, ge=0)
    min_workspace_score: float | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_price_range(self) -> "SearchFilters":
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.min_price > self.max_price
        ):
            raise ValueError("minPrice must not exceed maxPrice")
        return self


class SearchCriteria(ValueModel):
    """Query sent to a listing source. Invalid criteria cannot be constructed."""

    city: str
    check_in_date: date
    check_out_date: date
    bedrooms: int = Field(gt=0)
    events: tuple[EventLocation, ...] | None = None
    filters: SearchFilters | None = None

    @field_validator("city")
    @classmethod
    def _city_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("city must not be empty")
        return value

    @model_validator(mode="after")
    def _check_dates(self) -> "SearchCriteria":
        if self.check_out_date <= self.check_in_date:
            raise ValueError("checkOutDate must be after checkInDate")
        return self

    @property
    def nights(self) -> int:
        return (self.check_out_date - self.check_in_date).days
