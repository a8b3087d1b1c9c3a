"""Price calendar schemas."""

from __future__ import annotations

import datetime as dt

from pydantic import Field

from .base import CamelModel


class CalendarGroup(CamelModel):
    id: str
    label: str = ""


class CalendarDay(CamelModel):
    day: dt.date
    group: str = ""
    price: float


class PriceCalendarEntry(CamelModel):
    """A single (date, price, group label) point of the calendar."""

    date: dt.date
    price: float
    group_label: str


class PriceCalendar(CamelModel):
    no_price_label: str = ""
    groups: list[CalendarGroup] = Field(default_factory=list)
    days: list[CalendarDay] = Field(default_factory=list)
    currency: str = ""


class PriceCalendarResult(CamelModel):
    """Unwrapped payload of the price calendar endpoint."""

    flights: PriceCalendar

    @property
    def currency(self) -> str:
        return self.flights.currency

    def entries(self) -> list[PriceCalendarEntry]:
        """Return the calendar days in provider order with resolved group labels."""
        labels = {g.id: g.label for g in self.flights.groups}
        return [
            PriceCalendarEntry(
                date=day.day,
                price=day.price,
                group_label=labels.get(day.group, day.group),
            )
            for day in self.flights.days
        ]
