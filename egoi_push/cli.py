"""Command-line tools for checking an E-goi push integration."""

from __future__ import annotations

import asyncio
import json
import sys

import click
import httpx

from egoi_push.config import get_settings
from egoi_push.log import configure_logging
from egoi_push.payload import InvalidPayloadError, parse_payload
from egoi_push.schemas.events import EventType
from egoi_push.transport import Transport


def run_async(coro):
    """Run an async function in a new event loop."""
    return asyncio.run(coro)


async def _with_transport(app_id: str, api_key: str, call):
    settings = get_settings()
    async with httpx.AsyncClient(timeout=settings.request_timeout) as client:
        transport = Transport(app_id, api_key, client, settings)
        return await call(transport)


@click.group()
def cli():
    """E-goi push SDK tools."""
    configure_logging()


@cli.command("parse-payload")
@click.argument("source", type=click.File("r"), default="-")
def parse_payload_cmd(source):
    """Parse a push payload (JSON file or stdin) and print the notification record."""
    try:
        payload = json.load(source)
    except ValueError as e:
        click.echo(f"Invalid JSON: {e}", err=True)
        sys.exit(1)

    try:
        record = parse_payload(payload)
    except InvalidPayloadError as e:
        click.echo(f"Invalid payload: {e}", err=True)
        sys.exit(1)

    click.echo(record.model_dump_json(indent=2, by_alias=True))
    if record.geo.is_present:
        click.echo(
            f"Geofence: {record.geo.radius:g}m around "
            f"({record.geo.latitude}, {record.geo.longitude}) "
            f"for {record.geo.duration_seconds}s"
        )


@cli.command("register-token")
@click.option("--app-id", envvar="EGOI_PUSH_APP_ID", required=True)
@click.option("--api-key", envvar="EGOI_PUSH_API_KEY", required=True)
@click.option("--token", required=True, help="Device push token.")
@click.option("--field", default=None, help="Contact field used to identify the device.")
@click.option("--value", default=None, help="Value of the contact field.")
def register_token(app_id, api_key, token, field, value):
    """Register a push token with E-goi."""
    success = run_async(
        _with_transport(
            app_id, api_key, lambda t: t.register_token(field, value, token)
        )
    )
    click.echo("Token registered." if success else "Token registration failed.")
    sys.exit(0 if success else 1)


@cli.command("send-event")
@click.option("--app-id", envvar="EGOI_PUSH_APP_ID", required=True)
@click.option("--api-key", envvar="EGOI_PUSH_API_KEY", required=True)
@click.option(
    "--event",
    "event",
    type=click.Choice([e.value for e in EventType]),
    required=True,
)
@click.option("--contact", required=True, help="Contact ID.")
@click.option("--message-hash", required=True)
def send_event(app_id, api_key, event, contact, message_hash):
    """Report a notification event to E-goi."""
    success = run_async(
        _with_transport(
            app_id,
            api_key,
            lambda t: t.register_event(EventType(event), contact, message_hash),
        )
    )
    click.echo("Event sent." if success else "Event rejected.")
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    cli()
