"""CLI de urlscan-client (Typer + Rich).

Por qué la CLI es fina:
- Toda la lógica de peticiones vive en `adapters.urlscan_client`.
- Aquí solo se resuelve la configuración (API key), se presentan resultados y
  se traduce el resultado a un exit code.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional

import pydantic
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from adapters.json_exporter import export_json
from adapters.urlscan_client import UrlscanClient
from cli import doctor
from cli.ui_components import (
    build_result_table,
    build_scan_panel,
    build_search_table,
    next_search_cursor,
)
from core.config import AppSettings
from core.domain.models import ScanRequest, SearchOptions, Visibility
from core.errors import UrlscanError

app = typer.Typer(no_args_is_help=True, help="Submit, fetch and search urlscan.io scans.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=_err_console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log HTTP activity to stderr."),
) -> None:
    _configure_logging(verbose)


def _build_client(api_key: str | None) -> UrlscanClient:
    settings = AppSettings()
    return UrlscanClient(api_key or settings.api_key, settings=settings)


def _emit(payload: dict[str, Any] | None, *, as_json: bool, output: Path | None, render) -> None:
    if payload is None:
        raise typer.Exit(code=1)

    if output is not None:
        path = export_json(payload=payload, output_path=output)
        _console.print(f"[green]Saved JSON to:[/green] {path}")

    if as_json:
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        _console.print(render(payload))


def _run(coro) -> Any:
    try:
        return asyncio.run(coro)
    except UrlscanError as exc:
        _err_console.print(f"[red]{exc.message}[/red]")
        raise typer.Exit(code=1) from exc
    except pydantic.ValidationError as exc:
        # AppSettings inválido (env o .env).
        _err_console.print(f"[red]Invalid configuration:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


@app.command()
def scan(
    url: str = typer.Argument(..., help="URL to submit for scanning."),
    visibility: Optional[Visibility] = typer.Option(None, "--visibility", help="public, unlisted or private."),
    tags: Optional[list[str]] = typer.Option(None, "--tag", help="Tag to attach (repeatable)."),
    customagent: Optional[str] = typer.Option(None, "--customagent", help="Custom User-Agent for the scan."),
    referer: Optional[str] = typer.Option(None, "--referer", help="Referer header for the scan."),
    override_safety: bool = typer.Option(False, "--override-safety", help="Ask urlscan.io to skip its safety checks."),
    country: Optional[str] = typer.Option(None, "--country", help="2-letter country code to scan from."),
    api_key: Optional[str] = typer.Option(None, "--api-key", help="Overrides URLSCAN_API_KEY."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON response."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Also write the JSON response here."),
) -> None:
    """Submit a URL for scanning."""

    options = ScanRequest(
        url=url,
        visibility=visibility,
        tags=tags or None,
        customagent=customagent,
        referer=referer,
        overrideSafety=True if override_safety else None,
        country=country,
    ).to_payload()

    async def _go() -> dict[str, Any] | None:
        client = _build_client(api_key)
        async with client:
            return await client.submit_scan(url, options)

    payload = _run(_go())
    _emit(payload, as_json=as_json, output=output, render=build_scan_panel)


@app.command()
def result(
    scan_id: str = typer.Argument(..., metavar="UUID", help="Scan UUID returned by `scan`."),
    api_key: Optional[str] = typer.Option(None, "--api-key", help="Overrides URLSCAN_API_KEY."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON response."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Also write the JSON response here."),
) -> None:
    """Fetch the result of a scan."""

    async def _go() -> dict[str, Any] | None:
        client = _build_client(api_key)
        async with client:
            return await client.fetch_scan_result(scan_id)

    payload = _run(_go())
    _emit(payload, as_json=as_json, output=output, render=build_result_table)


@app.command()
def search(
    term: str = typer.Argument(..., help="Search query, e.g. 'domain:example.com'."),
    size: Optional[int] = typer.Option(None, "--size", min=1, help="Number of results."),
    search_after: Optional[str] = typer.Option(None, "--search-after", help="Pagination cursor."),
    api_key: Optional[str] = typer.Option(None, "--api-key", help="Overrides URLSCAN_API_KEY."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON response."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Also write the JSON response here."),
) -> None:
    """Search previous scans."""

    async def _go() -> dict[str, Any] | None:
        client = _build_client(api_key)
        async with client:
            return await client.search(term, SearchOptions(size=size, search_after=search_after))

    payload = _run(_go())
    _emit(payload, as_json=as_json, output=output, render=build_search_table)

    if not as_json and payload is not None:
        cursor = next_search_cursor(payload)
        if cursor:
            _console.print(f"[dim]More results: --search-after {cursor}[/dim]")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
