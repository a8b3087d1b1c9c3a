"""HTTP gateway for the Sky Scrapper flight-data API on RapidAPI.

Every request is a ``GET`` under one base URL and carries two fixed headers::

    X-RapidAPI-Key:  <api key>
    X-RapidAPI-Host: sky-scrapper.p.rapidapi.com

Endpoints::

    /v1/flights/searchAirport
    /v2/flights/searchFlights
    /v1/flights/getFlightDetails
    /v1/flights/getPriceCalendar

Successful (2xx) bodies are returned decoded but otherwise untouched; the
``{status, timestamp, data}`` envelope is unwrapped by
:class:`~sky_search_client.flight_client.FlightDataClient`.  Failures are
mapped to :class:`~sky_search_client.errors.GatewayError` with a fixed,
human-readable message per kind.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Self

import httpx

from sky_search_client.config import ClientSettings, settings
from sky_search_client.errors import (
    ConfigurationMissing,
    ErrorKind,
    GatewayError,
    InvalidArgument,
)
from sky_search_client.retry import async_retry

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

logger = logging.getLogger(__name__)

type QueryValue = str | int | float | bool


class Endpoint(StrEnum):
    """The four provider paths this client is allowed to call."""

    SEARCH_AIRPORT = "/v1/flights/searchAirport"
    SEARCH_FLIGHTS = "/v2/flights/searchFlights"
    FLIGHT_DETAILS = "/v1/flights/getFlightDetails"
    PRICE_CALENDAR = "/v1/flights/getPriceCalendar"


RATE_LIMITED_MESSAGE = "Too many requests. Please try again later."
UNAUTHORIZED_MESSAGE = "Unauthorized. Please check your API key."
FORBIDDEN_MESSAGE = "Access forbidden. Please check your API subscription."
NETWORK_MESSAGE = "Network error. Please check your connection."
UNREADABLE_MESSAGE = "Unreadable provider response"

_TRANSIENT_KINDS = frozenset({ErrorKind.RATE_LIMITED, ErrorKind.NETWORK_UNAVAILABLE})


def _provider_detail(resp: httpx.Response) -> str | None:
    """Return the provider's ``message`` field from an error body, if any."""
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
    return None


def _error_for_response(resp: httpx.Response) -> GatewayError:
    """Map a non-2xx response to a :class:`GatewayError`."""
    status = resp.status_code
    detail = _provider_detail(resp)

    if status == 429:
        return GatewayError(ErrorKind.RATE_LIMITED, RATE_LIMITED_MESSAGE, status_code=status)
    if status == 401:
        return GatewayError(ErrorKind.UNAUTHORIZED, UNAUTHORIZED_MESSAGE, status_code=status)
    if status == 403:
        return GatewayError(ErrorKind.FORBIDDEN, FORBIDDEN_MESSAGE, status_code=status)
    if status == 400:
        return GatewayError(
            ErrorKind.BAD_REQUEST,
            f"Bad request: {detail or 'Invalid parameters'}",
            status_code=status,
        )
    return GatewayError(
        ErrorKind.PROVIDER_ERROR,
        detail or f"API Error ({status})",
        status_code=status,
    )


def _network_error(endpoint: Endpoint, exc: httpx.TransportError) -> GatewayError:
    logger.warning(
        "API request failed without response: GET %s (%s)", endpoint.value, exc
    )
    return GatewayError(ErrorKind.NETWORK_UNAVAILABLE, NETWORK_MESSAGE)


def _unreadable_response(
    endpoint: Endpoint, exc: httpx.RequestError, status_code: int | None = None
) -> GatewayError:
    """A response arrived but its body could not be decoded."""
    logger.warning("API response unreadable: GET %s (%s)", endpoint.value, exc)
    return GatewayError(
        ErrorKind.PROVIDER_ERROR, UNREADABLE_MESSAGE, status_code=status_code
    )


def _is_transient(exc: Exception) -> bool:
    return isinstance(exc, GatewayError) and exc.kind in _TRANSIENT_KINDS


class HttpGateway:
    """Single point of outbound HTTP traffic to the flight-data provider."""

    def __init__(
        self,
        *,
        api_key: str,
        host: str = "sky-scrapper.p.rapidapi.com",
        base_url: str = "https://sky-scrapper.p.rapidapi.com/api",
        timeout: float | None = None,
        max_retries: int = 0,
        retry_base_delay: float = 1.0,
        retry_max_delay: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key or not api_key.strip():
            raise ConfigurationMissing(
                "SKY_SEARCH_RAPIDAPI_KEY must be set in environment or .env"
            )
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"X-RapidAPI-Key": api_key, "X-RapidAPI-Host": host},
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )
        self._send = async_retry(
            max_retries=max_retries,
            base_delay=retry_base_delay,
            max_delay=retry_max_delay,
            exceptions=(GatewayError,),
            retry_if=_is_transient,
        )(self._send_once)
        logger.debug("API key loaded: %s...", api_key[:8])

    @classmethod
    def from_settings(
        cls,
        cfg: ClientSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> HttpGateway:
        """Build a gateway from :class:`ClientSettings` (module settings by default)."""
        cfg = cfg or settings
        return cls(
            api_key=cfg.rapidapi_key,
            host=cfg.rapidapi_host,
            base_url=cfg.base_url,
            timeout=cfg.request_timeout,
            max_retries=cfg.max_retries,
            retry_base_delay=cfg.retry_base_delay,
            retry_max_delay=cfg.retry_max_delay,
            transport=transport,
        )

    async def request(
        self,
        path: Endpoint | str,
        params: Mapping[str, QueryValue] | None = None,
    ) -> Any:
        """Issue ``GET path`` and return the decoded JSON body.

        Raises
        ------
        InvalidArgument
            *path* is not one of the :class:`Endpoint` values.
        GatewayError
            The provider answered non-2xx, the body was not JSON, or no
            response was received at all.
        """
        try:
            endpoint = Endpoint(path)
        except ValueError:
            msg = f"Unknown endpoint path: {path}"
            raise InvalidArgument(msg) from None
        return await self._send(endpoint, dict(params or {}))

    async def _send_once(self, endpoint: Endpoint, params: dict[str, QueryValue]) -> Any:
        logger.info("API request: GET %s", endpoint.value)
        request = self._client.build_request("GET", endpoint.value, params=params)
        try:
            resp = await self._client.send(request, stream=True)
        except httpx.TransportError as exc:
            raise _network_error(endpoint, exc) from exc
        except httpx.RequestError as exc:
            raise _unreadable_response(endpoint, exc) from exc
        try:
            await resp.aread()
        except httpx.TransportError as exc:
            raise _network_error(endpoint, exc) from exc
        except httpx.RequestError as exc:
            raise _unreadable_response(endpoint, exc, resp.status_code) from exc
        finally:
            await resp.aclose()

        if not resp.is_success:
            error = _error_for_response(resp)
            logger.warning(
                "API response error: %d %s (%s)",
                resp.status_code,
                endpoint.value,
                _provider_detail(resp) or resp.reason_phrase,
            )
            raise error

        logger.info("API response: %d %s", resp.status_code, endpoint.value)
        try:
            return resp.json()
        except ValueError as exc:
            raise GatewayError(
                ErrorKind.PROVIDER_ERROR,
                "Invalid JSON in provider response",
                status_code=resp.status_code,
            ) from exc

    async def close(self) -> None:
        """Shut down the underlying HTTPX client."""
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
