"""Filter and order listings for a search.

Ordering keys, each consulted only when all previous keys are equal:
  1. safety score, highest first
  2. distance to event, closest first
  3. bedrooms, most first
  4. price, cheapest first
  5. workspace score, highest first
Listings equal on every key keep their input order.
"""

from collections.abc import Iterable

from app.schemas.listing import Listing, SearchCriteria, SearchFilters


def matches_criteria(listing: Listing, criteria: SearchCriteria) -> bool:
    if listing.bedrooms < criteria.bedrooms:
        return False

    filters = criteria.filters or SearchFilters()
    if filters.min_price is not None and listing.price < filters.min_price:
        return False
    if filters.max_price is not None and listing.price > filters.max_price:
        return False
    if filters.min_safety_score is not None and listing.safety_score < filters.min_safety_score:
        return False
    if (
        filters.min_workspace_score is not None
        and listing.workspace_score < filters.min_workspace_score
    ):
        return False
    return True


def _rank_key(listing: Listing) -> tuple[float, float, int, float, float]:
    return (
        -listing.safety_score,
        listing.distance_to_event,
        -listing.bedrooms,
        listing.price,
        -listing.workspace_score,
    )


def rank_listings(listings: Iterable[Listing], criteria: SearchCriteria) -> list[Listing]:
    candidates = [listing for listing in listings if matches_criteria(listing, criteria)]
    # sorted() is stable
    return sorted(candidates, key=_rank_key)
