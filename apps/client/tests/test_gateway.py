"""HttpGateway: headers, error mapping, retries, startup precondition."""

from __future__ import annotations

import logging

import httpx
import pytest

from sky_search_client.errors import (
    ConfigurationMissing,
    ErrorKind,
    GatewayError,
    InvalidArgument,
)
from sky_search_client.gateway import (
    FORBIDDEN_MESSAGE,
    NETWORK_MESSAGE,
    RATE_LIMITED_MESSAGE,
    UNAUTHORIZED_MESSAGE,
    UNREADABLE_MESSAGE,
    Endpoint,
    HttpGateway,
)

from .conftest import TEST_API_KEY, FakeProvider, Reply, envelope


def _gateway(provider: FakeProvider, **kwargs: object) -> HttpGateway:
    return HttpGateway(api_key=TEST_API_KEY, transport=provider.transport, **kwargs)


async def test_request_attaches_auth_headers(gateway, provider):
    provider.respond(Endpoint.SEARCH_AIRPORT, envelope([]))

    await gateway.request(Endpoint.SEARCH_AIRPORT, {"query": "SFO"})

    request = provider.requests[0]
    assert request.method == "GET"
    assert request.headers["X-RapidAPI-Key"] == TEST_API_KEY
    assert request.headers["X-RapidAPI-Host"] == "sky-scrapper.p.rapidapi.com"
    assert request.url.host == "sky-scrapper.p.rapidapi.com"
    assert request.url.path == "/api/v1/flights/searchAirport"
    assert request.url.params["query"] == "SFO"


async def test_success_returns_body_unchanged(gateway, provider):
    body = envelope({"anything": [1, 2, 3]})
    provider.respond(Endpoint.PRICE_CALENDAR, body)

    assert await gateway.request(Endpoint.PRICE_CALENDAR, {}) == body


async def test_accepts_plain_string_paths(gateway, provider):
    provider.respond(Endpoint.SEARCH_FLIGHTS, envelope({}))

    await gateway.request("/v2/flights/searchFlights", {"adults": "1"})

    assert provider.requests[0].url.path.endswith("/v2/flights/searchFlights")


@pytest.mark.parametrize(
    ("status", "body", "kind", "message"),
    [
        (429, {"message": "You have exceeded the rate limit"}, ErrorKind.RATE_LIMITED, RATE_LIMITED_MESSAGE),
        (401, {"message": "Invalid API key"}, ErrorKind.UNAUTHORIZED, UNAUTHORIZED_MESSAGE),
        (403, {"message": "You are not subscribed"}, ErrorKind.FORBIDDEN, FORBIDDEN_MESSAGE),
        (400, {"message": "date is invalid"}, ErrorKind.BAD_REQUEST, "Bad request: date is invalid"),
        (400, {}, ErrorKind.BAD_REQUEST, "Bad request: Invalid parameters"),
        (500, {"message": "Upstream exploded"}, ErrorKind.PROVIDER_ERROR, "Upstream exploded"),
        (503, {"error": "nope"}, ErrorKind.PROVIDER_ERROR, "API Error (503)"),
    ],
)
async def test_http_errors_map_to_kinds(gateway, provider, status, body, kind, message):
    provider.respond(Endpoint.SEARCH_AIRPORT, Reply(status, body))

    with pytest.raises(GatewayError) as excinfo:
        await gateway.request(Endpoint.SEARCH_AIRPORT, {"query": "SFO"})

    assert excinfo.value.kind is kind
    assert excinfo.value.message == message
    assert excinfo.value.status_code == status


async def test_rate_limit_message_hides_provider_body(gateway, provider):
    provider.respond(Endpoint.SEARCH_FLIGHTS, Reply(429, {"message": "quota exceeded for key"}))

    with pytest.raises(GatewayError) as excinfo:
        await gateway.request(Endpoint.SEARCH_FLIGHTS, {})

    assert excinfo.value.kind is ErrorKind.RATE_LIMITED
    assert "quota exceeded" not in excinfo.value.message


async def test_non_json_error_body_uses_status_code(gateway, provider):
    provider.respond(Endpoint.SEARCH_AIRPORT, Reply(502, text="<html>Bad Gateway</html>"))

    with pytest.raises(GatewayError, match=r"API Error \(502\)"):
        await gateway.request(Endpoint.SEARCH_AIRPORT, {"query": "SFO"})


@pytest.mark.parametrize(
    "exc",
    [
        httpx.ConnectError("Name or service not known"),
        httpx.ReadTimeout("timed out"),
    ],
)
async def test_no_response_is_network_unavailable(gateway, provider, exc):
    provider.respond(Endpoint.SEARCH_AIRPORT, exc)

    with pytest.raises(GatewayError) as excinfo:
        await gateway.request(Endpoint.SEARCH_AIRPORT, {"query": "SFO"})

    assert excinfo.value.kind is ErrorKind.NETWORK_UNAVAILABLE
    assert excinfo.value.message == NETWORK_MESSAGE
    assert excinfo.value.status_code is None


async def test_invalid_json_on_success_is_provider_error(gateway, provider):
    provider.respond(Endpoint.SEARCH_AIRPORT, Reply(200, text="not json"))

    with pytest.raises(GatewayError) as excinfo:
        await gateway.request(Endpoint.SEARCH_AIRPORT, {"query": "SFO"})

    assert excinfo.value.kind is ErrorKind.PROVIDER_ERROR


async def test_undecodable_body_is_provider_error(gateway, provider):
    async def bad_gzip(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            headers={"content-encoding": "gzip"},
            stream=httpx.ByteStream(b"not-gzip"),
        )

    provider.respond(Endpoint.SEARCH_AIRPORT, bad_gzip)

    with pytest.raises(GatewayError) as excinfo:
        await gateway.request(Endpoint.SEARCH_AIRPORT, {"query": "SFO"})

    assert excinfo.value.kind is ErrorKind.PROVIDER_ERROR
    assert excinfo.value.message == UNREADABLE_MESSAGE
    assert excinfo.value.status_code == 200
    assert isinstance(excinfo.value.__cause__, httpx.DecodingError)


async def test_request_error_without_response_is_provider_error(gateway, provider):
    provider.respond(Endpoint.SEARCH_AIRPORT, httpx.DecodingError("bad encoding"))

    with pytest.raises(GatewayError) as excinfo:
        await gateway.request(Endpoint.SEARCH_AIRPORT, {"query": "SFO"})

    assert excinfo.value.kind is ErrorKind.PROVIDER_ERROR
    assert excinfo.value.status_code is None


async def test_unknown_path_rejected_before_request(gateway, provider):
    with pytest.raises(InvalidArgument):
        await gateway.request("/v1/flights/somethingElse", {})

    assert provider.requests == []


@pytest.mark.parametrize("api_key", ["", "   "])
def test_missing_api_key_is_fatal(api_key):
    with pytest.raises(ConfigurationMissing):
        HttpGateway(api_key=api_key)


def test_from_settings_requires_key(cfg):
    empty = cfg.model_copy(update={"rapidapi_key": ""})

    with pytest.raises(ConfigurationMissing, match="SKY_SEARCH_RAPIDAPI_KEY"):
        HttpGateway.from_settings(empty)


async def test_transient_errors_retried_when_enabled(provider):
    provider.respond(
        Endpoint.SEARCH_AIRPORT,
        Reply(429, {"message": "slow down"}),
        httpx.ConnectError("reset"),
        envelope([]),
    )
    async with _gateway(provider, max_retries=2, retry_base_delay=0.0) as gw:
        body = await gw.request(Endpoint.SEARCH_AIRPORT, {"query": "SFO"})

    assert body == envelope([])
    assert len(provider.requests) == 3


async def test_client_errors_are_not_retried(provider):
    provider.respond(Endpoint.SEARCH_AIRPORT, Reply(400, {"message": "bad"}), envelope([]))

    async with _gateway(provider, max_retries=3, retry_base_delay=0.0) as gw:
        with pytest.raises(GatewayError):
            await gw.request(Endpoint.SEARCH_AIRPORT, {"query": "SFO"})

    assert len(provider.requests) == 1


async def test_retries_disabled_by_default(gateway, provider):
    provider.respond(Endpoint.SEARCH_AIRPORT, Reply(429, {}), envelope([]))

    with pytest.raises(GatewayError):
        await gateway.request(Endpoint.SEARCH_AIRPORT, {"query": "SFO"})

    assert len(provider.requests) == 1


async def test_logs_request_and_response(gateway, provider, caplog):
    caplog.set_level(logging.INFO, logger="sky_search_client.gateway")
    provider.respond(Endpoint.SEARCH_AIRPORT, envelope([]))

    await gateway.request(Endpoint.SEARCH_AIRPORT, {"query": "SFO"})

    assert "GET /v1/flights/searchAirport" in caplog.text
    assert "200 /v1/flights/searchAirport" in caplog.text
    assert TEST_API_KEY not in caplog.text
