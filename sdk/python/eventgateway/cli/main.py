"""
Event Gateway CLI - Main entry point.

Commands:
    eventgateway emit <event>      - Emit an event
    eventgateway eventtypes        - List event types of a space
    eventgateway functions         - List functions of a space
    eventgateway subscriptions     - List subscriptions of a space
    eventgateway version           - Show the SDK version
"""
import asyncio
import json
from typing import Optional

import typer

from eventgateway_common import DEFAULT_SPACE

from ..client import EmitError, EventGateway
from ..config import ConfigClient, ConfigError

DEFAULT_URL = "http://localhost:4000"
DEFAULT_CONFIG_URL = "http://localhost:4001"

app = typer.Typer(
    name="eventgateway",
    help="Event Gateway CLI - emit events and inspect gateway configuration.",
    no_args_is_help=True,
)


@app.command()
def emit(
    event: str = typer.Argument(..., help="Event type, e.g. user.created"),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="JSON payload"),
    url: str = typer.Option(DEFAULT_URL, "--url", envvar="EVENT_GATEWAY_URL", help="Events API URL"),
    path: str = typer.Option("/", "--path", help="Path to emit the event on"),
):
    """
    Emit an event to the gateway.
    """
    try:
        payload = json.loads(data) if data is not None else None
    except ValueError as e:
        typer.echo(f"❌ --data is not valid JSON: {e}", err=True)
        raise typer.Exit(1)

    async def _emit():
        async with EventGateway(url=url) as client:
            return await client.emit(event, data=payload, path=path)

    try:
        response = asyncio.run(_emit())
    except EmitError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"✓ Emitted {event} ({response.status_code})")
    if response.content:
        typer.echo(response.text)


def _list(config_url: str, space: str, kind: str):
    async def _fetch():
        async with ConfigClient(config_url, space=space) as client:
            return await getattr(client, f"list_{kind}")()

    try:
        items = asyncio.run(_fetch())
    except ConfigError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)

    typer.echo(json.dumps(
        [item.model_dump(mode="json", by_alias=True, exclude_none=True) for item in items],
        indent=2,
    ))


ConfigUrlOption = typer.Option(
    DEFAULT_CONFIG_URL, "--config-url", envvar="EVENT_GATEWAY_CONFIG_URL", help="Configuration API URL"
)
SpaceOption = typer.Option(DEFAULT_SPACE, "--space", "-s", help="Space name")


@app.command()
def eventtypes(config_url: str = ConfigUrlOption, space: str = SpaceOption):
    """
    List the event types of a space.
    """
    _list(config_url, space, "event_types")


@app.command()
def functions(config_url: str = ConfigUrlOption, space: str = SpaceOption):
    """
    List the functions of a space.
    """
    _list(config_url, space, "functions")


@app.command()
def subscriptions(config_url: str = ConfigUrlOption, space: str = SpaceOption):
    """
    List the subscriptions of a space.
    """
    _list(config_url, space, "subscriptions")


@app.command()
def version():
    """
    Show the Event Gateway SDK version.
    """
    from eventgateway import __version__
    typer.echo(f"Event Gateway SDK v{__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
