#!/usr/bin/env python3
"""
cli.py — Click CLI for querying the Cvent SOAP API from a terminal.

Credentials come from options or the CVENT_* environment variables
(a local .env file is loaded first).

Usage:
    python cli.py login
    python cli.py search User --filter "UserRole:Equals:Administrators"
    python cli.py retrieve User 7EE3FBC2-006F-4EBD-B4F2-16B4E7E719BE --field Email --field UserType
    python cli.py find Event --filter "EventStartDate:Greater than:2026-01-01T00:00:00" --field EventTitle
    python cli.py fields Registration --no-custom
    python cli.py describe Event
"""
from __future__ import annotations

import json
import logging

import click
from dotenv import load_dotenv

from cvent_client.core.client import CventClient, SearchFilter
from cvent_client.core.errors import CventError
from cvent_client.data.soap_api import DEFAULT_TIMEOUT

load_dotenv()


def _parse_filters(raw: tuple[str, ...]) -> list[SearchFilter]:
    try:
        return [SearchFilter.parse(text) for text in raw]
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--filter")


def _connect(ctx: click.Context) -> CventClient:
    """Build a client from the group options and log in."""
    opts = ctx.obj
    missing = [name for name in ("account", "username", "password") if not opts[name]]
    if missing:
        click.echo(
            "ERROR: Missing credentials: " + ", ".join(missing)
            + ". Set CVENT_ACCOUNT_NUMBER, CVENT_USERNAME and CVENT_PASSWORD or pass options.",
            err=True,
        )
        raise SystemExit(1)
    client = CventClient(eu=opts["eu"], wsdl=opts["wsdl"], timeout=opts["timeout"])
    try:
        client.login(opts["account"], opts["username"], opts["password"])
    except CventError as e:
        click.echo(f"Login failed: {e}", err=True)
        raise SystemExit(1)
    return client


def _run(call, *args, **kwargs):
    try:
        return call(*args, **kwargs)
    except CventError as e:
        click.echo(f"ERROR: {e}", err=True)
        raise SystemExit(1)


@click.group()
@click.option("--account", envvar="CVENT_ACCOUNT_NUMBER", default=None, help="Cvent account number.")
@click.option("--username", envvar="CVENT_USERNAME", default=None, help="API username.")
@click.option("--password", envvar="CVENT_PASSWORD", default=None, help="API password.")
@click.option("--eu/--production", envvar="CVENT_EU", default=False,
              help="Use the EU data center endpoint.")
@click.option("--wsdl", envvar="CVENT_WSDL", default=None, help="Override the service WSDL URL.")
@click.option("--timeout", envvar="CVENT_TIMEOUT", default=DEFAULT_TIMEOUT,
              type=click.IntRange(min=1), help="HTTP timeout in seconds.")
@click.option("--verbose", "-v", is_flag=True, help="Log SOAP calls to stderr.")
@click.pass_context
def cli(
    ctx: click.Context,
    account: str | None,
    username: str | None,
    password: str | None,
    eu: bool,
    wsdl: str | None,
    timeout: int,
    verbose: bool,
) -> None:
    """Cvent SOAP API CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj.update(
        account=account, username=username, password=password,
        eu=eu, wsdl=wsdl, timeout=timeout,
    )


@cli.command()
@click.pass_context
def login(ctx: click.Context) -> None:
    """Check credentials and show the session endpoint."""
    client = _connect(ctx)
    click.echo(f"Logged in. Session endpoint: {client.gateway.endpoint}")


@cli.command()
@click.argument("object_type")
@click.option("--filter", "filters", multiple=True, help="Field:Operator:Value (repeatable).")
@click.option("--or", "use_or", is_flag=True, help="Match any filter instead of all.")
@click.pass_context
def search(ctx: click.Context, object_type: str, filters: tuple[str, ...], use_or: bool) -> None:
    """Print ids of OBJECT_TYPE records matching the filters."""
    parsed = _parse_filters(filters)
    client = _connect(ctx)
    ids = _run(client.search, object_type, parsed, "OR" if use_or else "AND")
    if not ids:
        click.echo(f"No {object_type} records found.", err=True)
        return
    for record_id in ids:
        click.echo(record_id)


@cli.command()
@click.argument("object_type")
@click.argument("ids", nargs=-1, required=True)
@click.option("--field", "fields", multiple=True, help="Field to return (repeatable). Id is always included.")
@click.option("--flatten/--no-flatten", default=True, help="Add 'Answer Array' for survey answers.")
@click.pass_context
def retrieve(
    ctx: click.Context, object_type: str, ids: tuple[str, ...], fields: tuple[str, ...], flatten: bool,
) -> None:
    """Print the requested fields of OBJECT_TYPE records as JSON."""
    client = _connect(ctx)
    result = _run(client.retrieve, object_type, list(ids), list(fields), flatten)
    click.echo(json.dumps(result, indent=2))


@cli.command()
@click.argument("object_type")
@click.option("--filter", "filters", multiple=True, help="Field:Operator:Value (repeatable).")
@click.option("--field", "fields", multiple=True, help="Field to return (repeatable). Id is always included.")
@click.option("--or", "use_or", is_flag=True, help="Match any filter instead of all.")
@click.option("--flatten/--no-flatten", default=True, help="Add 'Answer Array' for survey answers.")
@click.pass_context
def find(
    ctx: click.Context,
    object_type: str,
    filters: tuple[str, ...],
    fields: tuple[str, ...],
    use_or: bool,
    flatten: bool,
) -> None:
    """Search OBJECT_TYPE and print the matching records as JSON."""
    parsed = _parse_filters(filters)
    client = _connect(ctx)
    result = _run(
        client.search_and_retrieve, object_type, parsed, list(fields),
        "OR" if use_or else "AND", flatten,
    )
    click.echo(json.dumps(result, indent=2))


@cli.command()
@click.argument("object_type")
@click.option("--custom/--no-custom", default=True, help="Include custom fields.")
@click.pass_context
def fields(ctx: click.Context, object_type: str, custom: bool) -> None:
    """List field names of OBJECT_TYPE."""
    client = _connect(ctx)
    names = _run(client.describe_fields, object_type, custom)
    click.echo(f"{len(names)} fields:", err=True)
    for name in names:
        click.echo(name)


@cli.command()
@click.argument("object_type")
@click.pass_context
def describe(ctx: click.Context, object_type: str) -> None:
    """Print the raw describe payload for OBJECT_TYPE as JSON."""
    client = _connect(ctx)
    description = _run(client.describe_object, object_type)
    click.echo(json.dumps(description, indent=2, default=str))


if __name__ == "__main__":
    cli()
