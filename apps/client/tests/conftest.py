"""Shared fixtures and payload builders for client tests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx
import pytest

from sky_search_client.config import ClientSettings
from sky_search_client.flight_client import FlightDataClient
from sky_search_client.gateway import HttpGateway
from sky_search_client.session import SearchSession

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

    from sky_search_client.gateway import Endpoint

TEST_API_KEY = "test-rapidapi-key-0123456789"


# ---------------------------------------------------------------------------
# Payload builders (camelCase, as the provider sends them)
# ---------------------------------------------------------------------------


def envelope(data: Any = None, *, status: bool = True, omit_data: bool = False) -> dict:
    body: dict[str, Any] = {"status": status, "timestamp": 1_700_000_000_000}
    if not omit_data:
        body["data"] = data
    return body


def make_airport(sky_id: str, entity_id: str, title: str = "", subtitle: str = "") -> dict:
    return {
        "skyId": sky_id,
        "entityId": entity_id,
        "presentation": {
            "title": title or sky_id,
            "suggestionTitle": f"{title or sky_id} ({sky_id})",
            "subtitle": subtitle,
        },
        "navigation": {
            "entityId": entity_id,
            "entityType": "AIRPORT",
            "localizedName": title or sky_id,
            "relevantFlightParams": {
                "skyId": sky_id,
                "entityId": entity_id,
                "flightPlaceType": "AIRPORT",
                "localizedName": title or sky_id,
            },
        },
    }


def make_leg(
    leg_id: str,
    origin: str,
    destination: str,
    departure: str = "2025-12-25T08:00:00",
    arrival: str = "2025-12-25T11:30:00",
) -> dict:
    def place(code: str) -> dict:
        return {
            "id": code,
            "entityId": f"9{len(code)}{code}",
            "name": code,
            "displayCode": code,
            "city": code,
            "country": "Somewhere",
            "isHighlighted": False,
        }

    return {
        "id": leg_id,
        "origin": place(origin),
        "destination": place(destination),
        "durationInMinutes": 210,
        "stopCount": 0,
        "isSmallestStops": True,
        "departure": departure,
        "arrival": arrival,
        "timeDeltaInDays": 0,
        "carriers": {
            "marketing": [{"id": -32222, "logoUrl": "", "name": "Test Air"}],
            "operationType": "fully_operated",
        },
        "segments": [
            {
                "id": f"{leg_id}-seg",
                "origin": {
                    "flightPlaceId": origin,
                    "displayCode": origin,
                    "name": origin,
                    "type": "Airport",
                    "country": "Somewhere",
                },
                "destination": {
                    "flightPlaceId": destination,
                    "displayCode": destination,
                    "name": destination,
                    "type": "Airport",
                    "country": "Somewhere",
                },
                "departure": departure,
                "arrival": arrival,
                "durationInMinutes": 210,
                "flightNumber": "123",
                "marketingCarrier": {
                    "id": -32222,
                    "name": "Test Air",
                    "alternateId": "TA",
                    "allianceId": 0,
                },
                "operatingCarrier": {
                    "id": -32222,
                    "name": "Test Air",
                    "alternateId": "TA",
                    "allianceId": 0,
                },
                "transportMode": "TRANSPORT_MODE_FLIGHT",
            }
        ],
    }


def make_itinerary(itinerary_id: str, price: float, legs: list[dict]) -> dict:
    return {
        "id": itinerary_id,
        "price": {"raw": price, "formatted": f"${price:.0f}"},
        "legs": legs,
        "isSelfTransfer": False,
        "isProtectedSelfTransfer": False,
        "farePolicy": {
            "isChangeAllowed": False,
            "isPartiallyChangeable": False,
            "isCancellationAllowed": False,
            "isPartiallyRefundable": False,
        },
        "tags": ["cheapest"],
        "isMashUp": False,
        "hasFlexibleOptions": False,
        "score": 0.99,
    }


def make_search_data(
    itineraries: list[dict], *, status: str = "complete", total: int | None = None
) -> dict:
    return {
        "context": {
            "status": status,
            "totalResults": len(itineraries) if total is None else total,
        },
        "itineraries": itineraries,
        "messages": [],
        "filterStats": {
            "duration": {"min": 210, "max": 600, "multiCityMin": 210, "multiCityMax": 600},
            "total": len(itineraries),
            "hasCityOpenJaw": False,
            "multipleCarriers": {"minPrice": "", "rawMinPrice": None},
            "airports": [],
            "carriers": [{"id": -32222, "logoUrl": "", "name": "Test Air"}],
            "stopPrices": {
                "direct": {"isPresent": True, "formattedPrice": "$100", "rawPrice": 100},
                "one": {"isPresent": False},
                "twoOrMore": {"isPresent": False},
            },
            "alliances": [],
        },
    }


def make_details_data(legs: list[dict] | None = None) -> dict:
    return {
        "itinerary": {
            "legs": legs or [make_leg("leg-1", "LHR", "JFK")],
            "pricingOptions": [
                {
                    "agents": [
                        {
                            "id": "baba",
                            "name": "British Airways",
                            "isCarrier": True,
                            "bookingProposition": "PBOOK",
                            "url": "https://example.com/book/ba",
                            "price": 410.5,
                            "rating": {"value": 4.2, "count": 1200},
                            "updateStatus": "current",
                            "segments": [],
                            "isDirectDBookUrl": False,
                            "quoteAge": 3,
                        },
                        {
                            "id": "agnt",
                            "name": "Cheap Agent",
                            "price": 399.0,
                            "url": "https://example.com/book/agent",
                        },
                    ],
                    "totalPrice": 399.0,
                }
            ],
            "isTransferRequired": False,
            "destinationImage": "",
            "operatingCarrierSafetyAttributes": [],
            "flexibleTicketPolicies": [],
        },
        "pollingCompleted": True,
    }


def make_calendar_data() -> dict:
    return {
        "flights": {
            "noPriceLabel": "N/A",
            "groups": [
                {"id": "low", "label": "Low"},
                {"id": "medium", "label": "Medium"},
                {"id": "high", "label": "High"},
            ],
            "days": [
                {"day": "2025-12-25", "group": "low", "price": 120.0},
                {"day": "2025-12-26", "group": "high", "price": 480.5},
                {"day": "2025-12-27", "group": "medium", "price": 250.0},
            ],
            "currency": "USD",
        }
    }


# ---------------------------------------------------------------------------
# Fake provider
# ---------------------------------------------------------------------------


@dataclass
class Reply:
    """A canned non-default HTTP response (built fresh for every request)."""

    status: int
    body: Any = None
    text: str | None = None

    def build(self) -> httpx.Response:
        if self.text is not None:
            return httpx.Response(self.status, text=self.text)
        return httpx.Response(self.status, json=self.body)


type Responder = (
    dict[str, Any]
    | Reply
    | Exception
    | Callable[[httpx.Request], Awaitable[httpx.Response]]
)


class FakeProvider:
    """Records outgoing requests and answers them per endpoint path.

    ``respond(endpoint, a, b)`` answers the first call with *a* and every later
    call with *b* (the last responder is sticky).  A dict is sent as a 200 JSON
    body, an exception is raised from the transport, a coroutine function is
    awaited with the request.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[str, list[Responder]] = {}

    def respond(self, endpoint: Endpoint, *responders: Responder) -> None:
        self._routes[endpoint.value] = list(responders)

    def requests_to(self, endpoint: Endpoint) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(endpoint.value)]

    def params(self, index: int = -1) -> dict[str, str]:
        return dict(self.requests[index].url.params)

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")
        queue = self._routes.get(path)
        if not queue:
            return httpx.Response(404, json={"message": f"No route for {path}"})
        responder = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(responder, Exception):
            raise responder
        if isinstance(responder, Reply):
            return responder.build()
        if isinstance(responder, dict):
            return httpx.Response(200, json=responder)
        return await responder(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def cfg() -> ClientSettings:
    """Settings isolated from the developer's environment and .env file."""
    return ClientSettings(_env_file=None, rapidapi_key=TEST_API_KEY)


@pytest.fixture
async def gateway(provider: FakeProvider, cfg: ClientSettings) -> AsyncIterator[HttpGateway]:
    gw = HttpGateway.from_settings(cfg, transport=provider.transport)
    try:
        yield gw
    finally:
        await gw.close()


@pytest.fixture
def client(gateway: HttpGateway, cfg: ClientSettings) -> FlightDataClient:
    return FlightDataClient(gateway, cfg=cfg)


@pytest.fixture
def session(client: FlightDataClient) -> SearchSession:
    return SearchSession(client)
