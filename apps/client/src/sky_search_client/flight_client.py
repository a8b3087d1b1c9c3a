"""Typed operations on top of :class:`~sky_search_client.gateway.HttpGateway`.

Every provider response is wrapped in an envelope::

    {"status": true, "timestamp": 1700000000000, "data": {...}}

``status`` false (or missing) raises :class:`ProviderReportedFailure`,
``status`` true without ``data`` raises :class:`EmptyPayload`, and a payload
that does not fit the documented shape raises :class:`MalformedPayload`.
Operation-specific defaults are injected here, not in the gateway.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, TypeAdapter, ValidationError

from sky_search_client.config import ClientSettings, settings
from sky_search_client.errors import (
    EmptyPayload,
    InvalidArgument,
    MalformedPayload,
    ProviderReportedFailure,
)
from sky_search_client.gateway import Endpoint
from sky_search_core.schemas import (
    Airport,
    CabinClass,
    DetailLeg,
    FlightDetailsResult,
    FlightSearchQuery,
    FlightSearchResult,
    Itinerary,
    PriceCalendarResult,
    SearchStatus,
)

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from sky_search_client.gateway import HttpGateway, QueryValue

logger = logging.getLogger(__name__)

_AIRPORTS = TypeAdapter(list[Airport])

# Endpoint -> (human-readable operation name, failure message)
_OPERATIONS: dict[Endpoint, tuple[str, str]] = {
    Endpoint.SEARCH_AIRPORT: ("airport search", "Airport search failed"),
    Endpoint.SEARCH_FLIGHTS: ("flight search", "Flight search failed"),
    Endpoint.FLIGHT_DETAILS: ("flight details", "Flight details lookup failed"),
    Endpoint.PRICE_CALENDAR: ("price calendar", "Price calendar lookup failed"),
}


def detail_legs_for(itinerary: Itinerary) -> list[DetailLeg]:
    """Build the ``legs`` argument of the details endpoint from an itinerary.

    One entry per leg, in itinerary order.  ``date`` is the calendar date of
    the leg's departure; the time of day is dropped.
    """
    return [
        DetailLeg(
            origin=leg.origin.id,
            destination=leg.destination.id,
            date=leg.departure.date(),
        )
        for leg in itinerary.legs
    ]


def encode_legs(legs: Sequence[DetailLeg]) -> str:
    """Serialize legs into the compact JSON array the provider expects."""
    return json.dumps(
        [
            {
                "origin": leg.origin,
                "destination": leg.destination,
                "date": leg.date.isoformat(),
            }
            for leg in legs
        ],
        separators=(",", ":"),
    )


def _unwrap(raw: Any, endpoint: Endpoint) -> Any:
    """Validate the response envelope and return its ``data`` payload."""
    name, failure_message = _OPERATIONS[endpoint]
    if not isinstance(raw, dict):
        msg = f"Unexpected {name} response: expected a JSON object"
        raise MalformedPayload(msg)
    if not raw.get("status"):
        raise ProviderReportedFailure(failure_message)
    data = raw.get("data")
    if data is None:
        msg = f"No data returned for {name}"
        raise EmptyPayload(msg)
    return data


def _validate[M: BaseModel](model: type[M], data: Any, endpoint: Endpoint) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        name = _OPERATIONS[endpoint][0]
        msg = f"Unexpected {name} response: {exc.error_count()} validation error(s)"
        raise MalformedPayload(msg) from exc


class FlightDataClient:
    """Airport search, flight search, flight details and price calendar."""

    def __init__(self, gateway: HttpGateway, *, cfg: ClientSettings | None = None) -> None:
        cfg = cfg or settings
        self._gateway = gateway
        self._locale = cfg.default_locale
        self._market = cfg.default_market
        self._country_code = cfg.default_country_code
        self._currency = cfg.default_currency
        self._fallback_date = cfg.fallback_date

    async def search_airports(
        self, query: str, locale: str | None = None
    ) -> list[Airport]:
        """Return airports matching *query* in the provider's relevance order."""
        if not query or not query.strip():
            msg = "Search query must not be empty"
            raise InvalidArgument(msg)

        raw = await self._gateway.request(
            Endpoint.SEARCH_AIRPORT,
            {"query": query, "locale": locale or self._locale},
        )
        data = _unwrap(raw, Endpoint.SEARCH_AIRPORT)
        try:
            airports = _AIRPORTS.validate_python(data)
        except ValidationError as exc:
            msg = (
                "Unexpected airport search response: "
                f"{exc.error_count()} validation error(s)"
            )
            raise MalformedPayload(msg) from exc

        logger.debug("Airport search %r returned %d places", query, len(airports))
        return airports

    def flight_search_params(self, query: FlightSearchQuery) -> dict[str, QueryValue]:
        """Outbound parameters for *query* with every default filled in."""
        return {
            "originSkyId": query.origin_sky_id,
            "destinationSkyId": query.destination_sky_id,
            "originEntityId": query.origin_entity_id,
            "destinationEntityId": query.destination_entity_id,
            "date": (query.date or self._fallback_date).isoformat(),
            "cabinClass": (query.cabin_class or CabinClass.ECONOMY).value,
            "adults": query.adults or "1",
            "sortBy": query.sort_by or "best",
            "currency": query.currency or self._currency,
            "market": query.market or self._market,
            "countryCode": query.country_code or self._country_code,
        }

    async def search_flights(self, query: FlightSearchQuery) -> FlightSearchResult:
        """Search one-way flights between two places."""
        params = self.flight_search_params(query)
        logger.debug("Searching flights with params: %s", params)

        raw = await self._gateway.request(Endpoint.SEARCH_FLIGHTS, params)
        data = _unwrap(raw, Endpoint.SEARCH_FLIGHTS)
        result = _validate(FlightSearchResult, data, Endpoint.SEARCH_FLIGHTS)
        if result.context.status == SearchStatus.FAILURE:
            raise ProviderReportedFailure(_OPERATIONS[Endpoint.SEARCH_FLIGHTS][1])

        logger.debug(
            "Flight search %s->%s: %d itineraries (context %s, total %d)",
            query.origin_sky_id,
            query.destination_sky_id,
            len(result.itineraries),
            result.context.status,
            result.context.total_results,
        )
        return result

    async def get_flight_details(
        self,
        legs: Sequence[DetailLeg | Mapping[str, Any]],
        adults: str = "1",
        currency: str | None = None,
    ) -> FlightDetailsResult:
        """Expand an itinerary, given as its legs, into pricing options."""
        if not legs:
            msg = "legs must not be empty"
            raise InvalidArgument(msg)
        try:
            parsed = [
                leg if isinstance(leg, DetailLeg) else DetailLeg.model_validate(leg)
                for leg in legs
            ]
        except ValidationError as exc:
            msg = f"Invalid legs: {exc.error_count()} validation error(s)"
            raise InvalidArgument(msg) from exc

        raw = await self._gateway.request(
            Endpoint.FLIGHT_DETAILS,
            {
                "legs": encode_legs(parsed),
                "adults": adults,
                "currency": currency or self._currency,
                "locale": self._locale,
                "market": self._market,
                "cabinClass": CabinClass.ECONOMY.value,
                "countryCode": self._country_code,
            },
        )
        data = _unwrap(raw, Endpoint.FLIGHT_DETAILS)
        result = _validate(FlightDetailsResult, data, Endpoint.FLIGHT_DETAILS)
        logger.debug(
            "Flight details for %d leg(s): %d pricing options",
            len(parsed),
            len(result.itinerary.pricing_options),
        )
        return result

    async def get_itinerary_details(
        self,
        itinerary: Itinerary,
        adults: str = "1",
        currency: str | None = None,
    ) -> FlightDetailsResult:
        return await self.get_flight_details(
            detail_legs_for(itinerary), adults=adults, currency=currency
        )

    async def get_price_calendar(
        self,
        origin_sky_id: str,
        destination_sky_id: str,
        from_date: date | str,
        currency: str | None = None,
    ) -> PriceCalendarResult:
        """Cheapest-price-per-day calendar for a route starting at *from_date*."""
        if not origin_sky_id or not destination_sky_id:
            msg = "origin and destination sky ids are required"
            raise InvalidArgument(msg)
        if isinstance(from_date, str):
            try:
                from_date = date.fromisoformat(from_date)
            except ValueError:
                msg = f"fromDate must be an ISO date (YYYY-MM-DD), got {from_date!r}"
                raise InvalidArgument(msg) from None

        raw = await self._gateway.request(
            Endpoint.PRICE_CALENDAR,
            {
                "originSkyId": origin_sky_id,
                "destinationSkyId": destination_sky_id,
                "fromDate": from_date.isoformat(),
                "currency": currency or self._currency,
            },
        )
        data = _unwrap(raw, Endpoint.PRICE_CALENDAR)
        result = _validate(PriceCalendarResult, data, Endpoint.PRICE_CALENDAR)
        logger.debug(
            "Price calendar %s->%s: %d days",
            origin_sky_id,
            destination_sky_id,
            len(result.flights.days),
        )
        return result
