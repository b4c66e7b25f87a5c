import logging
from collections.abc import Callable, Mapping
from datetime import date
from typing import Any

from pydantic import ValidationError

from app.exceptions.custom import ClientInputError, UpstreamError
from app.mappers.criteria_deriver import derive_search_criteria
from app.mappers.ranking import rank_listings
from app.schemas.listing import SearchCriteria
from app.schemas.responses import CriteriaSearchResult, MessageSearchResult
from app.services.claude import SERVICE_NAME
from app.services.interpreter import RequirementInterpreter
from app.services.listing_source import ListingSource

logger = logging.getLogger(__name__)


class SearchListingsUseCase:
    """Interpret, derive, fetch and rank, one awaited stage at a time."""

    def __init__(
        self,
        listing_source: ListingSource,
        interpreter: RequirementInterpreter | None = None,
        today: Callable[[], date] = date.today,
    ):
        self._listing_source = listing_source
        self._interpreter = interpreter
        self._today = today

    @property
    def has_interpreter(self) -> bool:
        return self._interpreter is not None

    async def search_from_message(self, message: str | None) -> MessageSearchResult:
        if not message or not message.strip():
            raise ClientInputError("Message is required", details={"field": "message"})
        if self._interpreter is None:
            raise UpstreamError(SERVICE_NAME, "requirement interpreter not configured")

        requirements = await self._interpreter.parse_requirements(message)
        logger.info(
            "Interpreted request: destination=%r travelers=%s",
            requirements.destination.raw_text,
            requirements.travelers.count,
        )

        criteria = derive_search_criteria(requirements, self._today())
        logger.info(
            "Derived criteria: city=%s %s..%s bedrooms=%d",
            criteria.city,
            criteria.check_in_date,
            criteria.check_out_date,
            criteria.bedrooms,
        )

        listings = await self._listing_source.search_listings(criteria)
        ranked = rank_listings(listings, criteria)
        return MessageSearchResult(derived_criteria=criteria, listings=tuple(ranked))

    async def search_from_criteria(
        self, criteria: SearchCriteria | Mapping[str, Any] | None
    ) -> CriteriaSearchResult:
        if criteria is None:
            raise ClientInputError(
                "Missing required backend fields: city, dates, bedrooms",
                details={"field": "criteria"},
            )
        if not isinstance(criteria, SearchCriteria):
            try:
                criteria = SearchCriteria.model_validate(criteria)
            except ValidationError as exc:
                raise ClientInputError.from_validation("Invalid search criteria", exc) from exc

        listings = await self._listing_source.search_listings(criteria)
        ranked = rank_listings(listings, criteria)
        logger.info("Ranked %d of %d listings in %s", len(ranked), len(listings), criteria.city)
        return CriteriaSearchResult(listings=tuple(ranked))
