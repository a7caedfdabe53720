"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Los comandos pasan JSON crudo; aquí se valida contra los modelos solo para
  presentarlo.
"""

from __future__ import annotations

from typing import Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import ResultResponse, ScanResponse, SearchResponse


def build_scan_panel(payload: dict[str, Any]) -> Panel:
    """Panel con la respuesta de `POST scan`."""

    scan = ScanResponse.model_validate(payload)
    body = Text()
    body.append(f"{scan.message or 'Submission accepted'}\n\n", style="bold")
    rows = [
        ("UUID", scan.uuid),
        ("URL", scan.url),
        ("Visibility", scan.visibility),
        ("Country", scan.country),
        ("User-Agent", scan.options.useragent if scan.options else None),
        ("Report", scan.result),
        ("API", scan.api),
    ]
    for label, value in rows:
        if value:
            body.append(f"{label}: ", style="cyan")
            body.append(f"{value}\n")
    return Panel(body, title=Text("Scan submitted", style="bold green"), border_style="green")


def build_result_table(payload: dict[str, Any]) -> Table:
    """Resumen de `GET result/{uuid}` (page + verdicts + stats)."""

    result = ResultResponse.model_validate(payload)

    table = Table(title="Scan Result")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")

    task = result.task
    page = result.page
    overall = result.verdicts.get("overall") if isinstance(result.verdicts.get("overall"), dict) else {}

    table.add_row("UUID", str(task.get("uuid") or ""))
    table.add_row("Submitted", str(task.get("time") or ""))
    table.add_row("URL", str(page.get("url") or task.get("url") or ""))
    table.add_row("Domain", str(page.get("domain") or ""))
    table.add_row("IP", str(page.get("ip") or ""))
    table.add_row("Country", str(page.get("country") or ""))
    table.add_row("Server", str(page.get("server") or ""))
    table.add_row("Malicious", str(overall.get("malicious", "")))
    table.add_row("Score", str(overall.get("score", "")))
    table.add_row("Requests", str(len(result.data.get("requests") or [])))
    table.add_row("Screenshot", str(task.get("screenshotURL") or ""))
    return table


def build_search_table(payload: dict[str, Any]) -> Table:
    """Tabla con los resultados de `GET search`."""

    search = SearchResponse.model_validate(payload)

    title = "Search Results"
    if search.total is not None:
        title += f" ({len(search.results)} of {search.total})"
    table = Table(title=title)
    table.add_column("Time", style="dim", no_wrap=True)
    table.add_column("UUID", style="cyan", no_wrap=True)
    table.add_column("URL", style="magenta")
    table.add_column("Visibility", style="white")

    for item in search.results:
        task = item.get("task") if isinstance(item.get("task"), dict) else {}
        page = item.get("page") if isinstance(item.get("page"), dict) else {}
        table.add_row(
            str(task.get("time") or ""),
            str(item.get("_id") or task.get("uuid") or ""),
            str(page.get("url") or task.get("url") or ""),
            str(task.get("visibility") or ""),
        )
    return table


def next_search_cursor(payload: dict[str, Any]) -> str | None:
    """Cursor `search_after` para la siguiente página, si hay más resultados.

    urlscan.io usa el campo `sort` del último resultado, unido por comas.
    """

    search = SearchResponse.model_validate(payload)
    if not search.has_more or not search.results:
        return None
    sort = search.results[-1].get("sort")
    if not isinstance(sort, list) or not sort:
        return None
    return ",".join(str(part) for part in sort)
