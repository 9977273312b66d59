"""CLI `rest-resource`: operaciones del cliente genérico desde la terminal.

Por qué una CLI:
- Permite inspeccionar un servicio que sigue el contrato URI/verbo sin escribir
  código (leer, listar, comprobar existencia, borrar).
- Los valores se decodifican sin esquema (`Any`) y se imprimen como JSON.
"""

from __future__ import annotations

import logging
from typing import Any

import typer
from rich.console import Console
from rich.logging import RichHandler

from adapters.http_client import RestClient
from cli import doctor
from cli.ui_components import build_error_panel, print_result
from core.config import ClientSettings
from core.domain.models import QueryParameters
from core.exceptions import ResourceClientError

app = typer.Typer(no_args_is_help=True, help="Generic client for convention-driven REST resources.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


def _settings(base_url: str | None, verbose: bool) -> ClientSettings:
    overrides: dict[str, Any] = {}
    if base_url:
        overrides["base_url"] = base_url
    if verbose:
        overrides["with_logging"] = True
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=_err_console, show_path=False)],
        )
    return ClientSettings(**overrides)


def _query(params: list[str]) -> QueryParameters | None:
    if not params:
        return None
    query = QueryParameters()
    for item in params:
        if "=" not in item:
            raise typer.BadParameter(f"expected key=value, got {item!r}", param_hint="--param")
        key, value = item.split("=", 1)
        query.add(key.strip(), value)
    return query


def _locator(id: int | None, key: str | None) -> Any:
    if id is not None and key is not None:
        raise typer.BadParameter("use either --id or --key, not both")
    return id if id is not None else key


def _run(base_url: str | None, verbose: bool, path: str, operation: Any) -> None:
    try:
        with RestClient(_settings(base_url, verbose)) as rest:
            result = operation(rest.resource(Any, path))
    except ResourceClientError as exc:
        _err_console.print(build_error_panel(exc))
        raise typer.Exit(code=1) from exc
    print_result(_console, result)


_BASE_URL = typer.Option(None, "--base-url", help="Override REST_RESOURCE_BASE_URL.")
_SESSION = typer.Option(None, "--session", "-s", help="Session token sent as the X-SessionId cookie.")
_VERBOSE = typer.Option(False, "--verbose", "-v", help="Log requests and responses.")
_PARAMS = typer.Option([], "--param", "-p", help="Query parameter key=value (repeatable).")


@app.command()
def read(
    path: str = typer.Argument(..., help="Base path of the resource, e.g. /v1/entries."),
    id: int | None = typer.Option(None, "--id", help="Numeric id of the element."),
    key: str | None = typer.Option(None, "--key", help="String key of the element."),
    version: int | None = typer.Option(None, "--version", help="Version id to read."),
    session: str | None = _SESSION,
    param: list[str] = _PARAMS,
    base_url: str | None = _BASE_URL,
    verbose: bool = _VERBOSE,
) -> None:
    """Read one element (or the collection URL as a single value)."""

    locator = _locator(id, key)
    query = _query(param)
    if version is not None:
        if locator is None:
            raise typer.BadParameter("--version requires --id or --key")
        _run(base_url, verbose, path, lambda c: c.read_version(locator, version, query=query, session=session))
        return
    _run(base_url, verbose, path, lambda c: c.read(locator, query=query, session=session))


@app.command(name="list")
def list_(
    path: str = typer.Argument(..., help="Base path of the resource."),
    session: str | None = _SESSION,
    param: list[str] = _PARAMS,
    base_url: str | None = _BASE_URL,
    verbose: bool = _VERBOSE,
) -> None:
    """List the elements of a collection."""

    query = _query(param)
    _run(base_url, verbose, path, lambda c: c.read_list(shape=Any, query=query, session=session))


@app.command()
def available(
    path: str = typer.Argument(..., help="Base path of the resource."),
    id: int = typer.Argument(..., help="Numeric id of the element."),
    version: int | None = typer.Option(None, "--version", help="Check one version instead."),
    session: str | None = _SESSION,
    base_url: str | None = _BASE_URL,
    verbose: bool = _VERBOSE,
) -> None:
    """Check whether an element (or one of its versions) exists."""

    if version is not None:
        _run(base_url, verbose, path, lambda c: c.version_available(id, version, session=session))
        return
    _run(base_url, verbose, path, lambda c: c.available(id, session=session))


@app.command()
def versions(
    path: str = typer.Argument(..., help="Base path of the resource."),
    id: int = typer.Argument(..., help="Numeric id of the element."),
    session: str | None = _SESSION,
    base_url: str | None = _BASE_URL,
    verbose: bool = _VERBOSE,
) -> None:
    """List the versions of an element."""

    _run(base_url, verbose, path, lambda c: c.read_versions(id, shape=Any, session=session))


@app.command()
def delete(
    path: str = typer.Argument(..., help="Base path of the resource."),
    ids: list[int] = typer.Option([], "--id", help="Numeric id of the element (repeat to delete several)."),
    key: str | None = typer.Option(None, "--key", help="String key of the element."),
    version: int | None = typer.Option(None, "--version", help="Delete only this version."),
    session: str | None = _SESSION,
    param: list[str] = _PARAMS,
    base_url: str | None = _BASE_URL,
    verbose: bool = _VERBOSE,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """Delete elements, one version, or (with neither --id nor --key) the whole collection."""

    if len(ids) > 1:
        if key is not None or version is not None or param:
            raise typer.BadParameter("several --id values cannot be combined with --key, --version or --param")
        _run(base_url, verbose, path, lambda c: c.delete_many(ids, session=session))
        return

    locator = _locator(ids[0] if ids else None, key)
    query = _query(param)
    if locator is None:
        if not yes:
            typer.confirm(f"Delete the whole collection at {path}?", abort=True)
        _run(base_url, verbose, path, lambda c: c.delete_all(session=session).status_code)
        return
    _run(
        base_url,
        verbose,
        path,
        lambda c: c.delete(locator, version_id=version, query=query, session=session).status_code,
    )


def run() -> None:
    app()


if __name__ == "__main__":
    run()
