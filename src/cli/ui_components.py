"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.exceptions import MultiStatusError, ServerStatusError


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    return value


def print_result(console: Console, value: Any) -> None:
    """Imprime el resultado decodificado como JSON coloreado."""

    if value is None:
        console.print("[dim]<no content>[/dim]")
        return
    if isinstance(value, str):
        console.print(value, markup=False, highlight=False)
        return
    console.print_json(data=_jsonable(value))


def build_error_panel(exc: Exception) -> Panel:
    """Panel para errores del cliente (status del servidor, red, decode)."""

    body = Text()
    if isinstance(exc, ServerStatusError):
        body.append(f"HTTP {exc.status_code}", style="bold red")
        if exc.url:
            body.append(f"  {exc.url}", style="dim")
        if exc.message:
            body.append(f"\n\n{exc.message}")
    elif isinstance(exc, MultiStatusError) and exc.result and exc.result.results:
        body.append(str(exc), style="bold red")
        for entry in exc.result.results:
            body.append(f"\n  {entry.id}: HTTP {entry.status_code} {entry.message}")
    else:
        body.append(str(exc))
    return Panel(body, title=Text(type(exc).__name__, style="bold red"), border_style="red")


def build_checks_table(title: str) -> Table:
    table = Table(title=title)
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")
    return table
