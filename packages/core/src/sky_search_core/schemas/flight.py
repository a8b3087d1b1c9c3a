"""Flight search result schemas (itineraries, legs, segments)."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field, computed_field

from .base import CamelModel
from .enums import SearchStatus


class Location(CamelModel):
    """Origin or destination of a leg."""

    id: str = Field(description="Provider place code, e.g. LHR")
    entity_id: str = ""
    name: str = ""
    display_code: str = ""
    city: str = ""
    country: str = ""
    is_highlighted: bool = False


class Carrier(CamelModel):
    id: int
    name: str = ""
    logo_url: str = ""
    alternate_id: str | None = None


class LegCarriers(CamelModel):
    marketing: list[Carrier] = Field(default_factory=list)
    operating: list[Carrier] | None = None
    operation_type: str = ""


class SegmentPlaceParent(CamelModel):
    flight_place_id: str = ""
    display_code: str = ""
    name: str = ""
    type: str = ""


class SegmentPlace(CamelModel):
    flight_place_id: str = ""
    display_code: str = ""
    parent: SegmentPlaceParent | None = None
    name: str = ""
    type: str = ""
    country: str = ""


class SegmentCarrier(CamelModel):
    id: int
    name: str = ""
    alternate_id: str = ""
    alliance_id: int | None = None


class Segment(CamelModel):
    """A single physical flight within a leg."""

    id: str
    origin: SegmentPlace
    destination: SegmentPlace
    departure: datetime
    arrival: datetime
    duration_in_minutes: int = 0
    flight_number: str = ""
    marketing_carrier: SegmentCarrier | None = None
    operating_carrier: SegmentCarrier | None = None
    transport_mode: str = ""


class Leg(CamelModel):
    """One directional origin -> destination trip, possibly with connections."""

    id: str
    origin: Location
    destination: Location
    departure: datetime
    arrival: datetime
    duration_in_minutes: int = 0
    stop_count: int = 0
    is_smallest_stops: bool = False
    time_delta_in_days: int = 0
    carriers: LegCarriers | None = None
    segments: list[Segment] = Field(default_factory=list)


class Price(CamelModel):
    raw: float
    formatted: str = ""


class FarePolicy(CamelModel):
    is_change_allowed: bool = False
    is_partially_changeable: bool = False
    is_cancellation_allowed: bool = False
    is_partially_refundable: bool = False


class EcoInfo(CamelModel):
    eco_contender_delta: float = 0.0


class Itinerary(CamelModel):
    """One priced flight offer made of one (one-way) or two (return) legs."""

    id: str
    price: Price
    legs: list[Leg] = Field(min_length=1)
    is_self_transfer: bool = False
    is_protected_self_transfer: bool = False
    fare_policy: FarePolicy = Field(default_factory=FarePolicy)
    eco: EcoInfo | None = None
    tags: list[str] = Field(default_factory=list)
    is_mash_up: bool = False
    has_flexible_options: bool = False
    score: float = 0.0


# ---------------------------------------------------------------------------
# Filter statistics
# ---------------------------------------------------------------------------


class DurationStats(CamelModel):
    min: int = 0
    max: int = 0
    multi_city_min: int = 0
    multi_city_max: int = 0


class MultipleCarriers(CamelModel):
    min_price: str = ""
    raw_min_price: float | None = None


class FilterAirport(CamelModel):
    id: str
    entity_id: str = ""
    name: str = ""


class FilterAirportGroup(CamelModel):
    city: str = ""
    airports: list[FilterAirport] = Field(default_factory=list)


class StopPrice(CamelModel):
    is_present: bool = False
    formatted_price: str | None = None
    raw_price: float | None = None


class StopPrices(CamelModel):
    direct: StopPrice = Field(default_factory=StopPrice)
    one: StopPrice = Field(default_factory=StopPrice)
    two_or_more: StopPrice = Field(default_factory=StopPrice)


class Alliance(CamelModel):
    id: int
    name: str = ""


class FilterStats(CamelModel):
    """Aggregates the provider computes over the whole result set."""

    duration: DurationStats | None = None
    total: int = 0
    has_city_open_jaw: bool = False
    multiple_carriers: MultipleCarriers | None = None
    airports: list[FilterAirportGroup] = Field(default_factory=list)
    carriers: list[Carrier] = Field(default_factory=list)
    stop_prices: StopPrices | None = None
    alliances: list[Alliance] = Field(default_factory=list)


class SearchContext(CamelModel):
    status: str = SearchStatus.COMPLETE
    total_results: int = 0


class FlightSearchResult(CamelModel):
    """Unwrapped payload of the flight search endpoint."""

    context: SearchContext = Field(default_factory=SearchContext)
    itineraries: list[Itinerary] = Field(default_factory=list)
    messages: list[Any] = Field(default_factory=list)
    filter_stats: FilterStats | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def lowest_price(self) -> float | None:
        """Lowest raw itinerary price in the result set."""
        if not self.itineraries:
            return None
        return min(it.price.raw for it in self.itineraries)
