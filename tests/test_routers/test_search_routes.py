from unittest.mock import AsyncMock, patch

from app.exceptions.custom import MalformedResponseError, UpstreamError

CRITERIA_JSON = {
    "city": "Lisbon",
    "checkInDate": "2026-05-01",
    "checkOutDate": "2026-05-07",
    "bedrooms": 2,
}

LISTING_JSON = {
    "id": "1",
    "name": "Hacker Haven Downtown",
    "city": "Lisbon",
    "price": 150,
    "bedrooms": 3,
    "safetyScore": 9.5,
    "distanceToEvent": 0.5,
    "workspaceScore": 10,
    "amenities": ["Wifi"],
}

REQUIREMENTS_JSON = {
    "destination": {"city": "Lisbon", "country": "Portugal", "rawText": "Lisbon"},
    "dates": {"startDate": "2026-05-01", "endDate": "2026-05-07", "isFlexible": False},
    "travelers": {"count": 4},
    "budget": {"amount": 130},
    "workspace": {"needs": []},
    "vibe": [],
    "constraints": [],
}


async def test_root(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert "running" in resp.text


# --- /api/search ---


async def test_search_ranks_mock_listings(client):
    resp = await client.post("/api/search", json=CRITERIA_JSON)
    assert resp.status_code == 200
    data = resp.json()
    assert data["message"] == "Listings found"
    assert data["count"] == 3
    assert [listing["id"] for listing in data["listings"]] == ["1", "2", "3"]
    assert data["listings"][0]["safetyScore"] == 9.5


async def test_search_applies_filters(client):
    resp = await client.post("/api/search", json={**CRITERIA_JSON, "filters": {"maxPrice": 130}})
    assert resp.status_code == 200
    assert [listing["id"] for listing in resp.json()["listings"]] == ["2", "3"]


async def test_search_missing_city(client):
    payload = {k: v for k, v in CRITERIA_JSON.items() if k != "city"}
    with patch(
        "app.services.listing_source.MockListingSource.search_listings",
        new_callable=AsyncMock,
    ) as search:
        resp = await client.post("/api/search", json=payload)

    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "Invalid search criteria"
    assert body["details"]["errors"][0]["field"] == "city"
    search.assert_not_awaited()


async def test_search_empty_body(client):
    resp = await client.post("/api/search")
    assert resp.status_code == 400


async def test_search_array_body(client):
    resp = await client.post("/api/search", json=[1, 2])
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid search criteria"


async def test_search_upstream_failure(client):
    with patch(
        "app.services.listing_source.MockListingSource.search_listings",
        new_callable=AsyncMock,
        side_effect=UpstreamError("Listing provider", "timeout", status_code=504),
    ):
        resp = await client.post("/api/search", json=CRITERIA_JSON)

    assert resp.status_code == 502
    assert "Listing provider" in resp.json()["error"]


async def test_unexpected_error_is_generic_500(client):
    with patch(
        "app.services.listing_source.MockListingSource.search_listings",
        new_callable=AsyncMock,
        side_effect=KeyError("secret internals"),
    ):
        resp = await client.post("/api/search", json=CRITERIA_JSON)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal Server Error"}


# --- /api/llm-search ---


async def test_llm_search_full_flow(client):
    with patch(
        "app.services.claude.ClaudeService.analyze",
        new_callable=AsyncMock,
        return_value=REQUIREMENTS_JSON,
    ):
        resp = await client.post("/api/llm-search", json={"message": "4 of us, Lisbon, first week of May"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["derivedCriteria"]["city"] == "Lisbon"
    assert data["derivedCriteria"]["bedrooms"] == 2
    assert data["derivedCriteria"]["filters"]["maxPrice"] == 130
    assert data["count"] == 2
    assert [listing["id"] for listing in data["listings"]] == ["2", "3"]


async def test_llm_search_requires_message(client):
    resp = await client.post("/api/llm-search", json={"message": ""})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Message is required"


async def test_llm_search_non_string_message(client):
    resp = await client.post("/api/llm-search", json={"message": 123})
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "Invalid request body"
    assert body["details"]["errors"][0]["field"] == "message"


async def test_malformed_json_body(client):
    resp = await client.post(
        "/api/llm-search",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid request body"


async def test_llm_search_unresolved_destination(client):
    requirements = {**REQUIREMENTS_JSON, "destination": {"rawText": "Unknown Place"}}
    with patch(
        "app.services.claude.ClaudeService.analyze",
        new_callable=AsyncMock,
        return_value=requirements,
    ):
        resp = await client.post("/api/llm-search", json={"message": "somewhere"})

    assert resp.status_code == 400
    assert resp.json()["details"]["gap"] == "unresolvable destination"


async def test_llm_search_malformed_requirements(client):
    with patch(
        "app.services.claude.ClaudeService.analyze",
        new_callable=AsyncMock,
        return_value={"nonsense": True},
    ):
        resp = await client.post("/api/llm-search", json={"message": "Lisbon"})

    assert resp.status_code == 502
    assert "Malformed" in resp.json()["error"]


async def test_llm_search_503_without_config(client):
    from app.main import app
    from app.services.search import SearchListingsUseCase

    original = app.state.search_use_case
    app.state.search_use_case = SearchListingsUseCase(app.state.listing_source, None)

    resp = await client.post("/api/llm-search", json={"message": "Lisbon"})
    assert resp.status_code == 503
    assert "Anthropic not configured" in resp.json()["detail"]

    app.state.search_use_case = original


# --- /api/safety ---


async def test_safety_success(client):
    with patch(
        "app.services.claude.ClaudeService.analyze",
        new_callable=AsyncMock,
        return_value={"safety_score": 85, "reason": "well-lit street"},
    ):
        resp = await client.post("/api/safety", json={"listing": LISTING_JSON})

    assert resp.status_code == 200
    assert resp.json() == {"safety_score": 85, "reason": "well-lit street"}


async def test_safety_out_of_bounds(client):
    with patch(
        "app.services.claude.ClaudeService.analyze",
        new_callable=AsyncMock,
        return_value={"safety_score": 150, "reason": "fine"},
    ):
        resp = await client.post("/api/safety", json={"listing": LISTING_JSON})

    assert resp.status_code == 502


async def test_safety_missing_listing(client):
    resp = await client.post("/api/safety", json={})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Listing context is required"


async def test_safety_invalid_listing(client):
    resp = await client.post("/api/safety", json={"listing": {"name": "no id"}})
    assert resp.status_code == 400
    assert resp.json()["details"]["field"] == "listing"


async def test_safety_listing_not_an_object(client):
    resp = await client.post("/api/safety", json={"listing": "villa"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "Invalid request body"
    assert body["details"]["errors"][0]["field"] == "listing"


async def test_safety_rate_limited(client):
    from app.exceptions.custom import RateLimitError

    with patch(
        "app.services.claude.ClaudeService.analyze",
        new_callable=AsyncMock,
        side_effect=RateLimitError("Anthropic"),
    ):
        resp = await client.post("/api/safety", json={"listing": LISTING_JSON})

    assert resp.status_code == 429


# --- /api/bookings ---


async def test_booking_delegated(client):
    details = {
        "listingId": "1",
        "startDate": "2026-05-01",
        "endDate": "2026-05-07",
        "nights": 6,
        "payers": ["alice", "bob"],
        "bps": [5000, 5000],
    }
    resp = await client.post("/api/bookings", json=details)
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "confirmed"
    assert data["bookingId"].startswith("mock-booking-id-")
    assert data["details"]["listingId"] == "1"


async def test_booking_invalid(client):
    resp = await client.post("/api/bookings", json={"listingId": "1", "payers": ["a"], "bps": []})
    assert resp.status_code == 400


async def test_booking_provider_malformed(client):
    with patch(
        "app.services.listing_source.MockListingSource.create_booking",
        new_callable=AsyncMock,
        side_effect=MalformedResponseError("Listing provider", "invalid booking response"),
    ):
        resp = await client.post("/api/bookings", json={
            "listingId": "1",
            "startDate": "2026-05-01",
            "endDate": "2026-05-07",
            "nights": 6,
            "payers": ["alice"],
            "bps": [10000],
        })
    assert resp.status_code == 502
