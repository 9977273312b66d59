"""Contratos de los colaboradores externos del core.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- El core depende solo de `execute` y de `encode`/`decode`; httpx, pydantic o
  un stub de test son intercambiables.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from core.domain.models import RawResponse, RequestDescriptor


@runtime_checkable
class Transport(Protocol):
    """Ejecuta una llamada HTTP.

    Reglas de diseño:
    - Devuelve el status tal cual, incluso si no es 2xx: el core decide.
    - Los fallos de red se lanzan como `core.exceptions.TransportError`.
    - El cuerpo de la petición llega sin codificar; el transporte usa el
      Serializer que le hayan dado al construirlo solo si lo necesita.
    """

    def execute(self, request: RequestDescriptor, *, content: bytes | None = None) -> RawResponse:
        """Envía `request` con el cuerpo ya codificado en `content`."""

        ...


@runtime_checkable
class Serializer(Protocol):
    """Codificación estructurada (JSON canónicamente) de entidades."""

    def encode(self, value: Any, media_type: str) -> bytes:
        ...

    def decode(self, content: bytes, target: Any) -> Any:
        """Decodifica `content` en `target` (modelo, `list[X]`, `dict`, ...)."""

        ...
