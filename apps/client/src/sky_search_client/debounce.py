"""Debounced airport typeahead.

Keystroke-driven airport searches are delayed until input pauses
(``debounce_seconds``, 0.5 s by default) and input shorter than
``min_query_length`` (2 by default) clears the suggestions instead of
searching.  This bounds the request volume sent to the provider.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import TYPE_CHECKING, Any, Self

from sky_search_client.config import settings

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine
    from types import TracebackType

    from sky_search_client.session import SearchSession

logger = logging.getLogger(__name__)


class Debouncer:
    """Cancellable delayed call owned by whoever issues repeated triggers.

    ``call()`` replaces any call still waiting for its delay.  Once a call
    has fired it runs to completion; ``cancel()`` only drops the waiting one.
    """

    def __init__(self, delay: float) -> None:
        self._delay = delay
        self._handle: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task[Any]] = set()
        self._closed = False

    @property
    def pending(self) -> bool:
        """True while a call is waiting for its delay to elapse."""
        return self._handle is not None

    def call(self, factory: Callable[[], Coroutine[Any, Any, Any]]) -> None:
        if self._closed:
            msg = "Debouncer is closed"
            raise RuntimeError(msg)
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self._delay, self._fire, factory)

    def _fire(self, factory: Callable[[], Coroutine[Any, Any, Any]]) -> None:
        self._handle = None
        task = asyncio.get_running_loop().create_task(factory())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    async def flush(self) -> None:
        """Wait for every call that has already fired."""
        if self._tasks:
            await asyncio.gather(*self._tasks)

    async def aclose(self) -> None:
        """Drop the waiting call, refuse new ones and wait for fired work."""
        self._closed = True
        self.cancel()
        await self.flush()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


class AirportTypeahead:
    """Feeds raw text input into :meth:`SearchSession.search_airports`."""

    def __init__(
        self,
        session: SearchSession,
        *,
        delay: float | None = None,
        min_length: int | None = None,
        locale: str | None = None,
    ) -> None:
        self._session = session
        self._min_length = (
            settings.min_query_length if min_length is None else min_length
        )
        self._locale = locale
        self._debouncer = Debouncer(
            settings.debounce_seconds if delay is None else delay
        )
        self.query = ""

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def on_input(self, text: str) -> None:
        """Handle one change of the search box (must run inside the event loop)."""
        self.query = text
        if len(text.strip()) < self._min_length:
            self._debouncer.cancel()
            self._session.clear_airports()
            return
        logger.debug("Scheduling airport search for %r", text)
        self._debouncer.call(
            functools.partial(self._session.search_airports, text, self._locale)
        )

    def reset(self) -> None:
        """Forget the query and suggestions (picker opened, closed or used)."""
        self.query = ""
        self._debouncer.cancel()
        self._session.clear_airports()

    async def flush(self) -> None:
        await self._debouncer.flush()

    async def aclose(self) -> None:
        await self._debouncer.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
