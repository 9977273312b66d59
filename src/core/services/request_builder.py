"""Composición de peticiones a partir del contrato URI/verbo.

Por qué un builder puro:
- Toda la lógica de direccionamiento (base, id/key, versions, sufijo, query,
  cookie de sesión) vive en un único sitio y se testea sin red.
- `ResourceClient` solo elige los argumentos; nunca arma paths a mano.
"""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from core.domain.media_type import MediaType
from core.domain.models import (
    SESSION_COOKIE,
    ByVersionId,
    ElementLocator,
    QueryParameters,
    RequestBody,
    RequestDescriptor,
    ResponseShape,
    SessionToken,
)
from core.exceptions import PreconditionViolation

VERSIONS_SEGMENT = "versions"
AVAILABLE_SEGMENT = "available"

_METHODS = frozenset({"GET", "POST", "PUT", "DELETE", "PATCH", "HEAD"})


def split_path(path: str | Sequence[str]) -> tuple[str, ...]:
    """Parte un path en segmentos, descartando los vacíos.

    Acepta tanto `"/v1/entries"` como `("v1", "entries")`, de modo que
    `a/b` + `c` y `a` + `b/c` producen los mismos segmentos.
    """

    if path is None:
        raise PreconditionViolation("path must not be None")
    parts: Iterable[str] = path.split("/") if isinstance(path, str) else path
    segments: list[str] = []
    for part in parts:
        if part is None:
            raise PreconditionViolation("path segments must not be None")
        segments.extend(piece for piece in str(part).split("/") if piece)
    return tuple(segments)


class RequestBuilder:
    """Traduce (base, locators, sufijo, query, sesión, cuerpo) a un `RequestDescriptor`.

    El orden del path es fijo:
    base -> id/key -> "versions" -> version id -> sufijo.
    """

    __slots__ = ("_base",)

    def __init__(self, base_path: str | Sequence[str]) -> None:
        if base_path is None:
            raise PreconditionViolation("base_path must not be None")
        self._base = split_path(base_path)

    @property
    def base(self) -> tuple[str, ...]:
        return self._base

    def path_for(
        self,
        *,
        locator: ElementLocator | None = None,
        version: ByVersionId | None = None,
        versions: bool = False,
        suffix: str | Sequence[str] | None = None,
        extension: str | None = None,
    ) -> tuple[str, ...]:
        """Compone los segmentos del path sin construir la petición."""

        if (version is not None or versions) and locator is None:
            raise PreconditionViolation("versioned paths require an element locator")

        segments = list(self._base)
        if locator is not None:
            segments.append(locator.segment)
        if version is not None or versions:
            segments.append(VERSIONS_SEGMENT)
        if version is not None:
            segments.append(version.segment)
        if extension:
            if len(segments) == len(self._base):
                raise PreconditionViolation("an extension needs an id, key or version segment to attach to")
            # la extensión va pegada al último id/key/versión, nunca al sufijo
            segments[-1] = segments[-1] + extension
        if suffix is not None:
            segments.extend(split_path(suffix))
        return tuple(segments)

    def build(
        self,
        method: str,
        *,
        locator: ElementLocator | None = None,
        version: ByVersionId | None = None,
        versions: bool = False,
        suffix: str | Sequence[str] | None = None,
        extension: str | None = None,
        query: QueryParameters | None = None,
        session: SessionToken | None = None,
        body: RequestBody | None = None,
        shape: ResponseShape = ResponseShape.ELEMENT,
        target: Any = None,
        accept: MediaType | str | None = MediaType.JSON,
    ) -> RequestDescriptor:
        if not method:
            raise PreconditionViolation("method must not be empty")
        verb = method.upper()
        if verb not in _METHODS:
            raise PreconditionViolation(f"unsupported HTTP method {method!r}")
        if shape in (ResponseShape.ELEMENT, ResponseShape.GENERIC) and target is None:
            raise PreconditionViolation(f"response shape {shape.value!r} requires a decode target")

        path = self.path_for(
            locator=locator,
            version=version,
            versions=versions,
            suffix=suffix,
            extension=extension,
        )

        headers: dict[str, str] = {}
        if accept is not None:
            headers["Accept"] = MediaType.normalize(accept)
        if body is not None:
            headers["Content-Type"] = body.media_type

        cookies: dict[str, str] = {}
        if session is not None:
            cookies[SESSION_COOKIE] = session_value(session)

        return RequestDescriptor(
            method=verb,
            path=path,
            query=tuple(query.items()) if query is not None else (),
            headers=headers,
            cookies=cookies,
            body=body,
            shape=shape,
            target=target,
        )


def session_value(session: SessionToken) -> str:
    """Valor de la cookie `X-SessionId`; el token nunca se interpreta."""

    if isinstance(session, bool):
        raise PreconditionViolation("session token must be an int or a str")
    value = str(session)
    if not value:
        raise PreconditionViolation("session token must not be empty")
    return value
