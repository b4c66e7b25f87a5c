import logging
import time
from abc import ABC, abstractmethod

import httpx
from pydantic import ValidationError

from app.exceptions.custom import MalformedResponseError, RateLimitError, UpstreamError
from app.schemas.booking import BookingDetails, BookingResult
from app.schemas.listing import Listing, SearchCriteria

logger = logging.getLogger(__name__)

SEARCH_PATH = "/listings/search"
BOOKINGS_PATH = "/bookings"


class ListingSource(ABC):
    """Booking provider that can search and book lodging."""

    @abstractmethod
    async def search_listings(self, criteria: SearchCriteria) -> list[Listing]:
        ...

    @abstractmethod
    async def create_booking(self, details: BookingDetails) -> BookingResult:
        ...


class MockListingSource(ListingSource):
    """Canned hacker houses in whatever city is asked for."""

    async def search_listings(self, criteria: SearchCriteria) -> list[Listing]:
        logger.info("Mock search in %s for %d bedrooms", criteria.city, criteria.bedrooms)
        listings = [
            Listing(
                id="1",
                name="Hacker Haven Downtown",
                city=criteria.city,
                price=150,
                bedrooms=3,
                safety_score=9.5,
                distance_to_event=0.5,
                workspace_score=10,
                amenities=("High-speed Wifi", "Coworking Space", "Coffee Machine"),
            ),
            Listing(
                id="2",
                name="Coder's Retreat",
                city=criteria.city,
                price=120,
                bedrooms=2,
                safety_score=8.8,
                distance_to_event=2.0,
                workspace_score=9,
                amenities=("Wifi", "Desk", "Monitor"),
            ),
            Listing(
                id="3",
                name="Budget Dev Dorm",
                city=criteria.city,
                price=80,
                bedrooms=4,
                safety_score=7.5,
                distance_to_event=5.0,
                workspace_score=7,
                amenities=("Wifi", "Shared Workspace"),
            ),
        ]
        return [listing for listing in listings if listing.bedrooms >= criteria.bedrooms]

    async def create_booking(self, details: BookingDetails) -> BookingResult:
        logger.info("Mock booking for listing %s", details.listing_id)
        return BookingResult(
            booking_id=f"mock-booking-id-{int(time.time() * 1000)}",
            status="confirmed",
            details=details,
        )


class HttpListingSource(ListingSource):
    """Listing provider reached over a JSON HTTP API."""

    SERVICE_NAME = "Listing provider"

    def __init__(self, client: httpx.AsyncClient, base_url: str, api_key: str = ""):
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def _post(self, path: str, payload: dict) -> httpx.Response:
        try:
            resp = await self._client.post(
                f"{self._base_url}{path}", json=payload, headers=self._headers()
            )
        except httpx.HTTPError as exc:
            logger.exception("Listing provider request to %s failed", path)
            raise UpstreamError(self.SERVICE_NAME, str(exc) or type(exc).__name__) from exc

        if resp.status_code == 429:
            raise RateLimitError(self.SERVICE_NAME)
        if resp.status_code >= 400:
            raise UpstreamError(self.SERVICE_NAME, resp.text, status_code=resp.status_code)
        return resp

    async def search_listings(self, criteria: SearchCriteria) -> list[Listing]:
        resp = await self._post(
            SEARCH_PATH, criteria.model_dump(mode="json", by_alias=True, exclude_none=True)
        )
        try:
            data = resp.json()
        except ValueError as exc:
            raise MalformedResponseError(self.SERVICE_NAME, "search response is not JSON") from exc

        # Accept either a bare array or {"listings": [...]}
        items = data.get("listings") if isinstance(data, dict) else data
        if not isinstance(items, list):
            raise MalformedResponseError(self.SERVICE_NAME, "search response has no listings array")

        try:
            listings = [Listing.model_validate(item) for item in items]
        except ValidationError as exc:
            raise MalformedResponseError(
                self.SERVICE_NAME, f"invalid listing in search response ({exc.error_count()} errors)"
            ) from exc

        logger.info("Listing provider returned %d listings for %s", len(listings), criteria.city)
        return listings

    async def create_booking(self, details: BookingDetails) -> BookingResult:
        resp = await self._post(BOOKINGS_PATH, details.model_dump(mode="json", by_alias=True))
        try:
            return BookingResult.model_validate(resp.json())
        except (ValueError, ValidationError) as exc:
            raise MalformedResponseError(self.SERVICE_NAME, "invalid booking response") from exc
