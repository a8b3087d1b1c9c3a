"""Airport search result schemas."""

from __future__ import annotations

from pydantic import Field, computed_field

from .base import CamelModel


class AirportPresentation(CamelModel):
    """Display strings for an airport suggestion."""

    title: str = ""
    suggestion_title: str = ""
    subtitle: str = ""


class RelevantFlightParams(CamelModel):
    sky_id: str = ""
    entity_id: str = ""
    flight_place_type: str = ""
    localized_name: str = ""


class AirportNavigation(CamelModel):
    entity_id: str = ""
    entity_type: str = ""
    localized_name: str = ""
    relevant_flight_params: RelevantFlightParams | None = None


class Airport(CamelModel):
    """A place returned by the airport search endpoint.

    ``sky_id`` is the provider's short code (unique within one result set),
    ``entity_id`` its stable identifier.  Both are needed to search flights.
    """

    sky_id: str = Field(min_length=1)
    entity_id: str = Field(min_length=1)
    presentation: AirportPresentation = Field(default_factory=AirportPresentation)
    navigation: AirportNavigation = Field(default_factory=AirportNavigation)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def display_title(self) -> str:
        return self.presentation.title

    @computed_field  # type: ignore[prop-decorator]
    @property
    def display_subtitle(self) -> str:
        return self.presentation.subtitle

    @computed_field  # type: ignore[prop-decorator]
    @property
    def localized_name(self) -> str:
        """Localized place name, falling back to the display title."""
        return self.navigation.localized_name or self.presentation.title
