"""Errores del cliente de recursos.

Por qué una jerarquía propia:
- El llamador distingue "el servidor dijo que no" (`ServerStatusError`) de
  "el servidor dijo algo que no entendemos" (`DecodeError`) y de fallos de red
  (`TransportError`).
- El core no reintenta ni recupera: todo se propaga tal cual.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.domain.models import MultiStatusResult


class ResourceClientError(Exception):
    """Base de todos los errores del cliente."""


class PreconditionViolation(ResourceClientError, ValueError):
    """Argumento requerido ausente o inválido (error de programación)."""


class ServerStatusError(ResourceClientError):
    """Respuesta HTTP fuera del rango 2xx."""

    def __init__(self, status_code: int, message: str = "", *, url: str | None = None) -> None:
        self.status_code = status_code
        self.message = message
        self.url = url
        detail = f"HTTP {status_code}"
        if url:
            detail += f" ({url})"
        if message:
            detail += f": {message}"
        super().__init__(detail)

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class TransportError(ResourceClientError):
    """Fallo de conexión, timeout u otro error de la capa de transporte."""


class DecodeError(ResourceClientError):
    """El cuerpo de la respuesta no encaja con la forma esperada."""


class MultiStatusError(ResourceClientError):
    """Agrega fallos por id de una operación por lotes."""

    def __init__(self, message: str, result: MultiStatusResult | None = None) -> None:
        super().__init__(message)
        self.result = result
