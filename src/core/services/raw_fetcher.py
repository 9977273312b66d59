"""Lecturas en crudo con extensión derivada del media type.

Por qué separado de `ResourceClient`:
- El camino principal de lectura siempre decodifica en tipos. Pedir el cuerpo
  como string y negociar el formato con una extensión en el nombre es un modo
  de compatibilidad, no parte del contrato tipado.
"""

from __future__ import annotations

import warnings
from typing import TYPE_CHECKING

from core.domain.media_type import MediaType
from core.domain.models import Locatable, ResponseShape, SessionToken
from core.exceptions import PreconditionViolation

if TYPE_CHECKING:
    from core.services.resource_client import ResourceClient


class RawFetcher:
    """`GET` que devuelve el cuerpo decodificado como texto, sin pasar por el Serializer."""

    __slots__ = ("_client",)

    def __init__(self, client: ResourceClient) -> None:
        self._client = client

    def read_string(
        self,
        id: Locatable,
        media_type: MediaType | str,
        *,
        session: SessionToken | None = None,
    ) -> str:
        """`GET base/<id><ext>` con `Accept: media_type`.

        Deprecated: la extensión se calcula del media type (JSON sin sufijo,
        XML `.xml`, cualquier otro `.json`).
        """

        warnings.warn(
            "read_string() is deprecated; read() decodes the canonical representation",
            DeprecationWarning,
            stacklevel=2,
        )
        return self._fetch(id, None, media_type, session)

    def read_version_string(
        self,
        id: Locatable,
        version_id: int,
        media_type: MediaType | str,
        *,
        session: SessionToken | None = None,
    ) -> str:
        """`GET base/<id>/versions/<versionId><ext>` con `Accept: media_type`."""

        if version_id is None:
            raise PreconditionViolation("version_id must not be None")
        return self._fetch(id, version_id, media_type, session)

    def _fetch(
        self,
        id: Locatable,
        version_id: int | None,
        media_type: MediaType | str,
        session: SessionToken | None,
    ) -> str:
        if id is None:
            raise PreconditionViolation("id must not be None")
        if not media_type:
            raise PreconditionViolation("media_type must not be empty")
        return self._client.execute(
            "GET",
            locator=id,
            version=version_id,
            extension=MediaType.extension_for(media_type),
            session=session,
            shape=ResponseShape.TEXT,
            accept=media_type,
        )
