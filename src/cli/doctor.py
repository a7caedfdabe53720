"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from core.config import AppSettings, get_user_env_file, write_user_env_vars
from core.domain.models import DEFAULT_BASE_URL

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get(url)
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc) or type(exc).__name__


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="urlscan-client Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    if settings.api_key:
        table.add_row("API key", "OK", f"...{settings.api_key[-4:]}")
    else:
        table.add_row("API key", "MISSING", "Set URLSCAN_API_KEY or run `doctor set-key`")
    table.add_row("User config", "OK", str(get_user_env_file()))
    table.add_row("Timeout", "OK", f"{settings.http_timeout_seconds:g}s")

    # Connectivity (best-effort, no API key sent)
    ok_http, detail_http = asyncio.run(_check_http(DEFAULT_BASE_URL, settings))
    table.add_row("HTTP connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if not settings.api_key:
        raise typer.Exit(code=1)


@app.command(name="set-key")
def set_key() -> None:
    """Store the urlscan.io API key in the user config .env."""

    api_key = typer.prompt("urlscan.io API key", hide_input=True, confirmation_prompt=False).strip()
    if not api_key:
        raise typer.BadParameter("API key is required.")

    env_path = write_user_env_vars({"URLSCAN_API_KEY": api_key})
    _console.print(f"[green]Saved API key to:[/green] {env_path}")
