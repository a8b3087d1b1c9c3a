"""Provider-facing enums."""

from enum import StrEnum


class CabinClass(StrEnum):
    """Cabin class accepted by the flight search endpoint."""

    ECONOMY = "economy"
    PREMIUM_ECONOMY = "premium_economy"
    BUSINESS = "business"
    FIRST = "first"


class SearchStatus(StrEnum):
    """Values of ``context.status`` in a flight search response."""

    COMPLETE = "complete"
    INCOMPLETE = "incomplete"
    FAILURE = "failure"
