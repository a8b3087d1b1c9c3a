"""Core schemas for sky-search."""

from .airport import Airport, AirportNavigation, AirportPresentation
from .auth import AuthResponse, LoginParams, RegisterParams, User
from .base import CamelModel
from .calendar import (
    CalendarDay,
    CalendarGroup,
    PriceCalendar,
    PriceCalendarEntry,
    PriceCalendarResult,
)
from .details import (
    Agent,
    AgentRating,
    DetailedItinerary,
    DetailLeg,
    FlightDetailsResult,
    PricingOption,
)
from .enums import CabinClass, SearchStatus
from .flight import (
    Carrier,
    FilterStats,
    FlightSearchResult,
    Itinerary,
    Leg,
    Location,
    Price,
    SearchContext,
    Segment,
)
from .search import FlightSearchQuery

__all__ = [
    "Agent",
    "AgentRating",
    "Airport",
    "AirportNavigation",
    "AirportPresentation",
    "AuthResponse",
    "CabinClass",
    "CalendarDay",
    "CalendarGroup",
    "CamelModel",
    "Carrier",
    "DetailLeg",
    "DetailedItinerary",
    "FilterStats",
    "FlightDetailsResult",
    "FlightSearchQuery",
    "FlightSearchResult",
    "Itinerary",
    "Leg",
    "Location",
    "LoginParams",
    "Price",
    "PriceCalendar",
    "PriceCalendarEntry",
    "PriceCalendarResult",
    "PricingOption",
    "RegisterParams",
    "SearchContext",
    "SearchStatus",
    "Segment",
    "User",
]
