from pydantic import BaseModel

from app.schemas.base import ValueModel
from app.schemas.listing import Listing, SearchCriteria


class MessageSearchResult(ValueModel):
    derived_criteria: SearchCriteria
    listings: tuple[Listing, ...]


class CriteriaSearchResult(ValueModel):
    listings: tuple[Listing, ...]


class ListingResponse(ValueModel):
    message: str
    count: int
    listings: tuple[Listing, ...]


class LlmSearchResponse(ListingResponse):
    derived_criteria: SearchCriteria


class LlmSearchRequest(BaseModel):
    message: str | None = None


class SafetyRequest(BaseModel):
    listing: dict | None = None
