from typing import Annotated

from fastapi import Depends, Request

from app.services.listing_source import ListingSource
from app.services.safety import SafetyEvaluator
from app.services.search import SearchListingsUseCase


def get_search_use_case(request: Request) -> SearchListingsUseCase:
    return request.app.state.search_use_case


def get_listing_source(request: Request) -> ListingSource:
    return request.app.state.listing_source


def get_safety_evaluator(request: Request) -> SafetyEvaluator | None:
    return getattr(request.app.state, "safety_evaluator", None)


SearchDep = Annotated[SearchListingsUseCase, Depends(get_search_use_case)]
ListingSourceDep = Annotated[ListingSource, Depends(get_listing_source)]
SafetyDep = Annotated[SafetyEvaluator | None, Depends(get_safety_evaluator)]
