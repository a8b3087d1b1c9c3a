"""Command line front-end for searching airports, flights and fares."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from datetime import date
from typing import TYPE_CHECKING, Any

import click
from pydantic import ValidationError

from sky_search_client.config import settings
from sky_search_client.credentials import CredentialStore
from sky_search_client.errors import AuthenticationError, ConfigurationMissing
from sky_search_client.flight_client import FlightDataClient
from sky_search_client.gateway import HttpGateway
from sky_search_client.result import Err, Ok
from sky_search_client.session import SearchSession
from sky_search_core.schemas import (
    CabinClass,
    DetailLeg,
    FlightSearchQuery,
    LoginParams,
    RegisterParams,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from datetime import datetime

    from sky_search_client.result import Result
    from sky_search_core.schemas import (
        Airport,
        FlightDetailsResult,
        FlightSearchResult,
        PriceCalendarResult,
    )

logger = logging.getLogger(__name__)


def _make_gateway() -> HttpGateway:
    return HttpGateway.from_settings()


def _make_credentials() -> CredentialStore:
    return CredentialStore.from_settings()


def _run_session[T](op: Callable[[SearchSession], Awaitable[Result[T]]]) -> T:
    """Run *op* against a fresh session; print the error and exit on ``Err``."""

    async def _run() -> Result[T]:
        try:
            gateway = _make_gateway()
        except ConfigurationMissing as exc:
            raise click.ClickException(exc.message) from exc
        async with gateway:
            return await op(SearchSession(FlightDataClient(gateway)))

    match asyncio.run(_run()):
        case Ok(value=value):
            return value
        case Err(message=message):
            click.echo(f"Error: {message}", err=True)
            sys.exit(1)


def _dump_json(payload: Any) -> None:
    click.echo(json.dumps(payload, indent=2, default=str))


def _print_airports(airports: list[Airport]) -> None:
    if not airports:
        click.echo("No airports found.")
        return
    for i, ap in enumerate(airports, 1):
        click.echo(
            f"  {i}. {ap.sky_id} | {ap.display_title} | {ap.display_subtitle} "
            f"(entity {ap.entity_id})"
        )


def _print_flights(result: FlightSearchResult) -> None:
    click.echo(
        f"Status: {result.context.status} | "
        f"Total results: {result.context.total_results}"
    )
    if not result.itineraries:
        click.echo("No flights found.")
        return
    click.echo(f"\nFound {len(result.itineraries)} itinerar(ies):\n")
    for i, it in enumerate(result.itineraries, 1):
        legs = " / ".join(
            f"{leg.origin.display_code or leg.origin.id} {leg.departure:%H:%M} → "
            f"{leg.destination.display_code or leg.destination.id} {leg.arrival:%H:%M} "
            f"({leg.duration_in_minutes}min, {leg.stop_count} stop(s))"
            for leg in it.legs
        )
        click.echo(f"  {i}. {it.price.formatted or it.price.raw} | {legs} | id={it.id}")


def _print_details(result: FlightDetailsResult) -> None:
    options = result.itinerary.pricing_options
    if not options:
        click.echo("No pricing options.")
        return
    for i, opt in enumerate(options, 1):
        agents = ", ".join(a.name for a in opt.agents) or "-"
        click.echo(f"  {i}. {opt.total_price} | {agents}")
        for agent in opt.agents:
            if agent.url:
                click.echo(f"       {agent.name}: {agent.url}")


def _print_calendar(result: PriceCalendarResult) -> None:
    entries = result.entries()
    if not entries:
        click.echo("No prices found.")
        return
    for entry in entries:
        click.echo(
            f"  {entry.date.isoformat()}  {entry.price:>10.2f} {result.currency}  "
            f"{entry.group_label}"
        )


def _parse_leg(raw: str) -> DetailLeg:
    try:
        origin, destination, day = raw.split(":")
        return DetailLeg(
            origin=origin, destination=destination, date=date.fromisoformat(day)
        )
    except ValueError as exc:
        msg = f"Invalid leg {raw!r}, expected ORIGIN:DESTINATION:YYYY-MM-DD"
        raise click.BadParameter(msg) from exc


@click.group()
@click.option("--log-level", default=None, help="Override SKY_SEARCH_LOG_LEVEL")
def cli(log_level: str | None) -> None:
    """Sky Search CLI."""
    logging.basicConfig(
        level=(log_level or settings.log_level).upper(),
        format="%(levelname)s: %(message)s",
    )


@cli.command("airports")
@click.argument("query")
@click.option("--locale", default=None, help="Result locale, e.g. en-US")
@click.option("--json-output", is_flag=True, help="Output as JSON")
def airports_cmd(query: str, locale: str | None, json_output: bool) -> None:
    """Search airports and cities matching QUERY."""
    airports = _run_session(lambda s: s.search_airports(query, locale))
    if json_output:
        _dump_json([a.model_dump(mode="json", by_alias=True) for a in airports])
    else:
        _print_airports(airports)


@cli.command("flights")
@click.argument("origin_sky_id")
@click.argument("origin_entity_id")
@click.argument("destination_sky_id")
@click.argument("destination_entity_id")
@click.option(
    "--date",
    "departure_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="YYYY-MM-DD",
)
@click.option(
    "--cabin",
    type=click.Choice([c.value for c in CabinClass]),
    default=None,
    help="Cabin class",
)
@click.option("--adults", default=None, help="Number of adults")
@click.option("--sort-by", default=None, help="Provider sort order")
@click.option("--currency", default=None, help="ISO 4217 currency code")
@click.option("--json-output", is_flag=True, help="Output as JSON")
def flights_cmd(
    origin_sky_id: str,
    origin_entity_id: str,
    destination_sky_id: str,
    destination_entity_id: str,
    departure_date: datetime | None,
    cabin: str | None,
    adults: str | None,
    sort_by: str | None,
    currency: str | None,
    json_output: bool,
) -> None:
    """Search one-way flights between two places."""
    try:
        query = FlightSearchQuery(
            origin_sky_id=origin_sky_id,
            origin_entity_id=origin_entity_id,
            destination_sky_id=destination_sky_id,
            destination_entity_id=destination_entity_id,
            date=departure_date.date() if departure_date else None,
            cabin_class=CabinClass(cabin) if cabin else None,
            adults=adults,
            sort_by=sort_by,
            currency=currency.upper() if currency else None,
        )
    except ValidationError as exc:
        raise click.UsageError(str(exc)) from exc
    result = _run_session(lambda s: s.search_flights(query))
    if json_output:
        _dump_json(result.model_dump(mode="json", by_alias=True))
    else:
        _print_flights(result)


@cli.command("details")
@click.option(
    "--leg",
    "legs",
    multiple=True,
    required=True,
    help="ORIGIN:DESTINATION:YYYY-MM-DD (repeat for return legs)",
)
@click.option("--adults", default="1", help="Number of adults")
@click.option("--currency", default=None, help="ISO 4217 currency code")
@click.option("--json-output", is_flag=True, help="Output as JSON")
def details_cmd(
    legs: tuple[str, ...], adults: str, currency: str | None, json_output: bool
) -> None:
    """Show pricing options and booking agents for an itinerary."""
    parsed = [_parse_leg(raw) for raw in legs]
    result = _run_session(lambda s: s.load_flight_details(parsed, adults, currency))
    if json_output:
        _dump_json(result.model_dump(mode="json", by_alias=True))
    else:
        _print_details(result)


@cli.command("calendar")
@click.argument("origin_sky_id")
@click.argument("destination_sky_id")
@click.argument("from_date")
@click.option("--currency", default=None, help="ISO 4217 currency code")
@click.option("--json-output", is_flag=True, help="Output as JSON")
def calendar_cmd(
    origin_sky_id: str,
    destination_sky_id: str,
    from_date: str,
    currency: str | None,
    json_output: bool,
) -> None:
    """Show the cheapest price per day starting at FROM_DATE."""
    result = _run_session(
        lambda s: s.load_price_calendar(
            origin_sky_id, destination_sky_id, from_date, currency
        )
    )
    if json_output:
        _dump_json([e.model_dump(mode="json", by_alias=True) for e in result.entries()])
    else:
        _print_calendar(result)


# ---------------------------------------------------------------------------
# Local account
# ---------------------------------------------------------------------------


def _run_auth[T](op: Callable[[CredentialStore], Awaitable[T]]) -> T:
    try:
        return asyncio.run(op(_make_credentials()))
    except AuthenticationError as exc:
        click.echo(f"Error: {exc.message}", err=True)
        sys.exit(1)


@cli.command("register")
@click.option("--email", prompt=True)
@click.option("--first-name", prompt=True)
@click.option("--last-name", prompt=True)
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
def register_cmd(email: str, first_name: str, last_name: str, password: str) -> None:
    """Create a local account and sign in."""
    params = RegisterParams(
        email=email, password=password, first_name=first_name, last_name=last_name
    )
    auth = _run_auth(lambda store: store.register(params))
    click.echo(f"Welcome, {auth.user.first_name}! Signed in as {auth.user.email}.")


@cli.command("login")
@click.option("--email", prompt=True)
@click.option("--password", prompt=True, hide_input=True)
def login_cmd(email: str, password: str) -> None:
    """Sign in with a local account."""
    params = LoginParams(email=email, password=password)
    auth = _run_auth(lambda store: store.login(params))
    click.echo(f"Signed in as {auth.user.email}.")


@cli.command("logout")
def logout_cmd() -> None:
    """Sign out."""
    _run_auth(lambda store: store.logout())
    click.echo("Signed out.")


@cli.command("whoami")
def whoami_cmd() -> None:
    """Show the signed-in user."""
    user = _run_auth(lambda store: store.get_current_user())
    if user is None:
        click.echo("Not signed in.")
        return
    click.echo(f"{user.first_name} {user.last_name} <{user.email}>")


if __name__ == "__main__":
    cli()
