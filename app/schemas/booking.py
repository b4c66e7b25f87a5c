from datetime import date
from typing import Literal

from pydantic import Field, model_validator

from app.schemas.base import ValueModel


class BookingDetails(ValueModel):
    listing_id: str
    start_date: date
    end_date: date
    nights: int = Field(ge=1)
    payers: tuple[str, ...]
    bps: tuple[int, ...]  # payer shares in basis points

    @model_validator(mode="after")
    def _check_consistency(self) -> "BookingDetails":
        if self.end_date <= self.start_date:
            raise ValueError("endDate must be after startDate")
        if len(self.payers) != len(self.bps):
            raise ValueError("payers and bps must have the same length")
        return self


class BookingResult(ValueModel):
    booking_id: str
    status: Literal["confirmed", "pending", "failed"]
    details: BookingDetails
