"""Flight search query schema."""

from __future__ import annotations

import datetime as dt

from pydantic import Field

from .base import CamelModel
from .enums import CabinClass


class FlightSearchQuery(CamelModel):
    """Flight search parameters.

    The four identifiers are required.  Every other field is optional and
    left as ``None`` here; defaults are applied by the client right before
    the request is sent.  Origin and destination are not checked against
    each other -- that is up to the caller.
    """

    origin_sky_id: str = Field(min_length=1)
    destination_sky_id: str = Field(min_length=1)
    origin_entity_id: str = Field(min_length=1)
    destination_entity_id: str = Field(min_length=1)

    date: dt.date | None = None
    cabin_class: CabinClass | None = None
    adults: str | None = Field(default=None, pattern=r"^[1-9][0-9]*$")
    sort_by: str | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    market: str | None = None
    country_code: str | None = None
