"""Flight details schemas (pricing options and booking agents)."""

from __future__ import annotations

import datetime as dt
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .base import CamelModel
from .flight import Leg, Segment


class DetailLeg(BaseModel):
    """One entry of the ``legs`` parameter sent to the details endpoint."""

    model_config = ConfigDict(frozen=True)

    origin: str = Field(min_length=1)
    destination: str = Field(min_length=1)
    date: dt.date


class AgentRating(CamelModel):
    value: float = 0.0
    count: int = 0


class Agent(CamelModel):
    """A booking channel (airline or online travel agent) for an itinerary."""

    id: str
    name: str = ""
    is_carrier: bool = False
    booking_proposition: str = ""
    url: str = ""
    price: float
    rating: AgentRating | None = None
    update_status: str = ""
    segments: list[Segment] = Field(default_factory=list)
    is_direct_d_book_url: bool = False
    quote_age: int = 0


class PricingOption(CamelModel):
    agents: list[Agent] = Field(default_factory=list)
    total_price: float = 0.0


class DetailedItinerary(CamelModel):
    legs: list[Leg] = Field(default_factory=list)
    pricing_options: list[PricingOption] = Field(default_factory=list)
    is_transfer_required: bool = False
    destination_image: str = ""
    operating_carrier_safety_attributes: list[dict[str, Any]] = Field(
        default_factory=list
    )
    flexible_ticket_policies: list[Any] = Field(default_factory=list)


class FlightDetailsResult(CamelModel):
    """Unwrapped payload of the flight details endpoint."""

    itinerary: DetailedItinerary
    polling_completed: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def lowest_price(self) -> float | None:
        """Cheapest total price across all pricing options."""
        if not self.itinerary.pricing_options:
            return None
        return min(opt.total_price for opt in self.itinerary.pricing_options)
