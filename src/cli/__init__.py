"""CLI (Typer + Rich) sobre el cliente genérico."""
