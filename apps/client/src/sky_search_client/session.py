"""Observable per-operation state for UI consumers.

:class:`SearchSession` fronts :class:`FlightDataClient` and keeps one
:class:`OperationState` per operation kind (airports, flights, details,
calendar).  Triggers never raise client errors: the outcome is returned as
:class:`~sky_search_client.result.Ok` / :class:`~sky_search_client.result.Err`
and mirrored into the operation's state.

Each trigger takes a request token.  Only the completion carrying the latest
token of its operation may write state; older completions are dropped, so a
slow response to ``"SF"`` cannot overwrite the result for ``"SFO"``.
``clear_*`` also advances the token, which drops whatever is in flight.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from sky_search_client.errors import ConfigurationMissing, ErrorKind, SkySearchError
from sky_search_client.result import Err, Ok
from sky_search_core.schemas import Itinerary

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping, Sequence
    from datetime import date

    from sky_search_client.flight_client import FlightDataClient
    from sky_search_client.result import Result
    from sky_search_core.schemas import (
        Airport,
        DetailLeg,
        FlightDetailsResult,
        FlightSearchQuery,
        FlightSearchResult,
        PriceCalendarResult,
    )

logger = logging.getLogger(__name__)


class OperationKind(StrEnum):
    AIRPORTS = "airports"
    FLIGHTS = "flights"
    DETAILS = "details"
    CALENDAR = "calendar"


@dataclass(frozen=True, slots=True)
class OperationState[T]:
    """Read-only snapshot of one operation: result, loading flag, error."""

    result: T | None = None
    is_loading: bool = False
    error: str | None = None
    error_kind: ErrorKind | None = None

    @classmethod
    def idle(cls) -> OperationState[T]:
        return cls()


type Listener = Callable[[OperationKind, OperationState[Any]], None]


class _Tracker[T]:
    """Owns the state of one operation kind and its latest request token."""

    def __init__(
        self,
        kind: OperationKind,
        emit: Callable[[OperationKind, OperationState[Any]], None],
    ) -> None:
        self.kind = kind
        self.state: OperationState[T] = OperationState()
        self._latest = 0
        self._emit = emit

    def _set(self, state: OperationState[T]) -> None:
        if state == self.state:
            return
        self.state = state
        self._emit(self.kind, state)

    def begin(self) -> int:
        self._latest += 1
        self._set(replace(self.state, is_loading=True, error=None, error_kind=None))
        return self._latest

    def succeed(self, token: int, value: T) -> bool:
        if token != self._latest:
            return False
        self._set(OperationState(result=value))
        return True

    def fail(self, token: int, err: Err) -> bool:
        # The previous result stays visible; only the error changes.
        if token != self._latest:
            return False
        self._set(
            replace(self.state, is_loading=False, error=err.message, error_kind=err.kind)
        )
        return True

    def abandon(self, token: int) -> None:
        if token == self._latest:
            self._set(replace(self.state, is_loading=False))

    def clear(self) -> None:
        self._latest += 1
        self._set(OperationState())

    def clear_error(self) -> None:
        self._set(replace(self.state, error=None, error_kind=None))


class SearchSession:
    """Stateful façade between UI triggers and :class:`FlightDataClient`."""

    def __init__(self, client: FlightDataClient) -> None:
        self._client = client
        self._listeners: list[Listener] = []
        self._airports: _Tracker[list[Airport]] = _Tracker(
            OperationKind.AIRPORTS, self._emit
        )
        self._flights: _Tracker[FlightSearchResult] = _Tracker(
            OperationKind.FLIGHTS, self._emit
        )
        self._details: _Tracker[FlightDetailsResult] = _Tracker(
            OperationKind.DETAILS, self._emit
        )
        self._calendar: _Tracker[PriceCalendarResult] = _Tracker(
            OperationKind.CALENDAR, self._emit
        )
        self._trackers: dict[OperationKind, _Tracker[Any]] = {
            t.kind: t
            for t in (self._airports, self._flights, self._details, self._calendar)
        }

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def airports(self) -> OperationState[list[Airport]]:
        return self._airports.state

    @property
    def flights(self) -> OperationState[FlightSearchResult]:
        return self._flights.state

    @property
    def details(self) -> OperationState[FlightDetailsResult]:
        return self._details.state

    @property
    def calendar(self) -> OperationState[PriceCalendarResult]:
        return self._calendar.state

    def state(self, kind: OperationKind) -> OperationState[Any]:
        return self._trackers[kind].state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener(kind, state)* after every state change.

        Returns a callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, kind: OperationKind, state: OperationState[Any]) -> None:
        for listener in list(self._listeners):
            listener(kind, state)

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    async def search_airports(
        self, query: str, locale: str | None = None
    ) -> Result[list[Airport]]:
        return await self._run(
            self._airports,
            functools.partial(self._client.search_airports, query, locale),
        )

    async def search_flights(
        self, query: FlightSearchQuery
    ) -> Result[FlightSearchResult]:
        return await self._run(
            self._flights,
            functools.partial(self._client.search_flights, query),
        )

    async def load_flight_details(
        self,
        target: Itinerary | Sequence[DetailLeg | Mapping[str, Any]],
        adults: str = "1",
        currency: str | None = None,
    ) -> Result[FlightDetailsResult]:
        """Load details for an itinerary, or for an explicit list of legs."""
        if isinstance(target, Itinerary):
            call = functools.partial(
                self._client.get_itinerary_details, target, adults, currency
            )
        else:
            call = functools.partial(
                self._client.get_flight_details, target, adults, currency
            )
        return await self._run(self._details, call)

    async def load_price_calendar(
        self,
        origin_sky_id: str,
        destination_sky_id: str,
        from_date: date | str,
        currency: str | None = None,
    ) -> Result[PriceCalendarResult]:
        return await self._run(
            self._calendar,
            functools.partial(
                self._client.get_price_calendar,
                origin_sky_id,
                destination_sky_id,
                from_date,
                currency,
            ),
        )

    async def _run[T](
        self, tracker: _Tracker[T], call: Callable[[], Awaitable[T]]
    ) -> Result[T]:
        token = tracker.begin()
        try:
            value = await call()
        except ConfigurationMissing:
            tracker.abandon(token)
            raise
        except SkySearchError as exc:
            err = Err.from_exception(exc)
            if tracker.fail(token, err):
                logger.warning("%s request failed: %s", tracker.kind, exc.message)
            else:
                logger.debug("Dropping stale %s failure (request %d)", tracker.kind, token)
            return err
        except BaseException:
            tracker.abandon(token)
            raise

        if not tracker.succeed(token, value):
            logger.debug("Dropping stale %s result (request %d)", tracker.kind, token)
        return Ok(value)

    # ------------------------------------------------------------------
    # Clearing
    # ------------------------------------------------------------------

    def clear_airports(self) -> None:
        self._airports.clear()

    def clear_flights(self) -> None:
        self._flights.clear()

    def clear_details(self) -> None:
        self._details.clear()

    def clear_calendar(self) -> None:
        self._calendar.clear()

    def clear_errors(self) -> None:
        """Drop error messages on every operation, keeping results."""
        for tracker in self._trackers.values():
            tracker.clear_error()
