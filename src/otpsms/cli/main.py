"""otpsms CLI — inspect providers and send OTP messages from the command line."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from otpsms.channels.base import ChannelProvider
from otpsms.channels.registry import available_providers, load_provider
from otpsms.config import get_config
from otpsms.errors import ConfigError, DispatchError, InvalidAddressError
from otpsms.logging import setup_logging

app = typer.Typer(
    name="otpsms",
    help="otpsms — OTP delivery over SMS gateways",
    no_args_is_help=True,
    add_completion=False,
)

console = Console()


def _load(provider_id: str) -> ChannelProvider:
    config = get_config()
    setup_logging(level=config.log_level, fmt=config.log_format)

    provider_id = provider_id or config.default_provider
    try:
        return load_provider(provider_id, config.provider_config(provider_id))
    except ConfigError as e:
        console.print(f"[red]✗[/red] {e}")
        console.print(f"Configure it under providers.{provider_id} in otpsms.yaml")
        raise typer.Exit(1)


@app.command()
def providers() -> None:
    """List registered providers and the limits they advertise."""
    table = Table(title="OTP channel providers", border_style="blue")
    table.add_column("ID", style="cyan")
    table.add_column("Channel")
    table.add_column("Address")
    table.add_column("Max address", justify="right")
    table.add_column("Max OTP", justify="right")
    table.add_column("Max body", justify="right")

    for caps in available_providers():
        table.add_row(
            caps.provider_id,
            caps.channel_name,
            caps.address_name,
            str(caps.max_address_len),
            str(caps.max_otp_len),
            str(caps.max_body_len),
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def validate(
    address: str = typer.Argument(..., help="Destination address to check"),
    provider: str = typer.Option("", "--provider", "-p", help="Provider id (defaults to config)"),
) -> None:
    """Check that an address is acceptable for a provider. Never contacts the gateway."""
    channel = _load(provider)
    try:
        channel.validate_address(address)
    except InvalidAddressError as e:
        console.print(f"[red]✗[/red] {address!r}: {e}")
        raise typer.Exit(1)
    finally:
        asyncio.run(channel.aclose())
    console.print(f"[green]✓[/green] {address} is a valid {channel.address_name.lower()}")


async def _push(channel: ChannelProvider, address: str, body: bytes) -> None:
    async with channel:
        await channel.push(address, body)


@app.command()
def send(
    address: str = typer.Argument(..., help="Destination address"),
    body: str = typer.Argument(..., help="Message body"),
    provider: str = typer.Option("", "--provider", "-p", help="Provider id (defaults to config)"),
) -> None:
    """Send a single message through a provider."""
    channel = _load(provider)

    payload = body.encode("utf-8")
    problem: str | None = None
    try:
        channel.validate_address(address)
    except InvalidAddressError as e:
        problem = f"{address!r}: {e}"
    else:
        # The gateway does not enforce the advertised limit; the caller does.
        if len(payload) > channel.max_body_len:
            problem = (
                f"Body is {len(payload)} bytes; {channel.id} allows at most {channel.max_body_len}"
            )

    if problem:
        asyncio.run(channel.aclose())
        console.print(f"[red]✗[/red] {problem}")
        raise typer.Exit(1)

    try:
        asyncio.run(_push(channel, address, payload))
    except DispatchError as e:
        hint = " (retryable)" if e.retryable else ""
        console.print(f"[red]✗[/red] {e.kind.value} error{hint}: {e.detail or e}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Sent via {channel.id} to {address}")


if __name__ == "__main__":
    app()
