"""Doctor command for environment diagnostics."""

from __future__ import annotations

import httpx
import typer
from rich.console import Console

from adapters.http_client import build_client
from cli.ui_components import build_checks_table
from core.config import ClientSettings, get_user_env_file
from core.exceptions import PreconditionViolation

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_http(settings: ClientSettings) -> tuple[bool, str]:
    try:
        with build_client(settings) as client:
            response = client.get("/")
        return True, f"HTTP {response.status_code}"
    except PreconditionViolation as exc:
        return False, str(exc)
    except httpx.HTTPError as exc:
        return False, str(exc)


@app.command()
def run() -> None:
    """Run baseline diagnostics against the configured endpoint."""

    settings = ClientSettings()

    table = build_checks_table("REST resource doctor")

    # Config
    table.add_row("Base URL", "OK", str(settings.base_url))
    if settings.has_credentials:
        table.add_row("Credentials", "OK", "Basic auth enabled")
    elif settings.api_key or settings.api_password:
        table.add_row("Credentials", "FAIL", "api_key and api_password must be set together")
    else:
        table.add_row("Credentials", "OPTIONAL", "No credentials -> anonymous requests")
    if settings.disable_certificate_validation:
        table.add_row("TLS", "WARN", "Certificate validation disabled")
    else:
        table.add_row("TLS", "OK", "Certificates validated")
    env_file = get_user_env_file()
    table.add_row("User config", "OK" if env_file.exists() else "OPTIONAL", str(env_file))

    # Connectivity (best-effort)
    ok_http, detail_http = _check_http(settings)
    table.add_row("HTTP connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if not ok_http:
        raise typer.Exit(code=1)
