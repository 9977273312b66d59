"""Cliente genérico para un recurso REST que sigue el contrato URI/verbo.

Convenciones del servidor:
- `GET base` lista, `POST base` crea, `PUT base` reemplaza la colección y
  `DELETE base` la borra entera.
- `GET|PUT|DELETE base/<id|key>` opera sobre un elemento (última versión).
- `base/<id>/versions[/<versionId>]` direcciona revisiones históricas.
- `GET base/<id>/available` responde si el elemento existe.
- La sesión, si hace falta, viaja en la cookie `X-SessionId`. Obtenerla queda
  fuera de este cliente.

Por qué una sola operación interna:
- Cada verbo público es una composición corta de `RequestBuilder` +
  transporte + decode; las combinaciones id/key, con/sin sesión, con/sin
  query se expresan como argumentos opcionales, no como sobrecargas.
"""

from __future__ import annotations

import io
import warnings
from typing import Any, BinaryIO, Generic, Iterable, Mapping, Sequence, TypeVar, Union

from adapters.json_serializer import PydanticSerializer
from core.domain.media_type import MediaType
from core.domain.models import (
    ByVersionId,
    ElementLocator,
    Locatable,
    MultiStatusResult,
    QueryParameters,
    RawResponse,
    RequestBody,
    RequestDescriptor,
    ResponseShape,
    SessionToken,
    locate,
    version_of,
)
from core.exceptions import MultiStatusError, PreconditionViolation, ServerStatusError
from core.interfaces.transport import Serializer, Transport
from core.services.raw_fetcher import RawFetcher
from core.services.request_builder import AVAILABLE_SEGMENT, RequestBuilder

T = TypeVar("T")

QueryLike = Union[QueryParameters, Mapping[str, Union[str, Sequence[str]]], Iterable[tuple[str, str]], None]


def _require(value: Any, name: str) -> Any:
    if value is None:
        raise PreconditionViolation(f"{name} must not be None")
    return value


def _require_locator(value: Locatable | None, name: str = "locator") -> ElementLocator:
    return _require(locate(value), name)


class ResourceClient(Generic[T]):
    """Superficie completa de verbos sobre un tipo de elemento.

    El estado (transporte, tipo, base path, serializer) se fija al construir y
    no cambia: dos hilos pueden compartir la instancia si el transporte lo
    permite.
    """

    __slots__ = ("_transport", "_element_type", "_builder", "_serializer")

    def __init__(
        self,
        transport: Transport,
        element_type: Any,
        base_path: str | Sequence[str],
        *,
        serializer: Serializer | None = None,
    ) -> None:
        self._transport = _require(transport, "transport")
        self._element_type = _require(element_type, "element_type")
        self._builder = RequestBuilder(base_path)
        self._serializer: Serializer = serializer or PydanticSerializer()

    def __repr__(self) -> str:
        name = getattr(self._element_type, "__name__", repr(self._element_type))
        return f"ResourceClient[{name}]({self.base_path!r})"

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def element_type(self) -> Any:
        return self._element_type

    @property
    def serializer(self) -> Serializer:
        return self._serializer

    @property
    def base_path(self) -> str:
        return "/" + "/".join(self._builder.base)

    @property
    def segments(self) -> tuple[str, ...]:
        return self._builder.base

    @property
    def raw(self) -> RawFetcher:
        """Lecturas que devuelven el cuerpo como string (fuera del camino tipado)."""

        return RawFetcher(self)

    # ------------------------------------------------------------------
    # Operación general
    # ------------------------------------------------------------------

    def send(
        self,
        method: str,
        *,
        locator: Locatable | None = None,
        version: ByVersionId | int | None = None,
        versions: bool = False,
        suffix: str | Sequence[str] | None = None,
        extension: str | None = None,
        query: QueryLike = None,
        session: SessionToken | None = None,
        body: RequestBody | None = None,
        shape: ResponseShape = ResponseShape.ELEMENT,
        target: Any = None,
        accept: MediaType | str | None = MediaType.JSON,
    ) -> tuple[RequestDescriptor, RawResponse]:
        """Arma, envía y valida el status; no decodifica.

        Raises:
            PreconditionViolation: argumentos requeridos ausentes.
            ServerStatusError: status fuera de 2xx.
            TransportError: fallo de red (lo lanza el transporte).
        """

        request = self._builder.build(
            method,
            locator=locate(locator),
            version=version_of(version),
            versions=versions,
            suffix=suffix,
            extension=extension,
            query=QueryParameters.coerce(query),
            session=session,
            body=body,
            shape=shape,
            target=target,
            accept=accept,
        )
        response = self._transport.execute(request, content=self._encode(body))
        if not response.is_success:
            raise ServerStatusError(response.status_code, _server_message(response), url=request.url)
        return request, response

    def execute(self, method: str, **kwargs: Any) -> Any:
        """`send` + decode según la forma pedida en el descriptor."""

        request, response = self.send(method, **kwargs)
        return self._decode(request, response)

    def _encode(self, body: RequestBody | None) -> bytes | None:
        if body is None:
            return None
        if body.raw:
            return str(body.content).encode("utf-8")
        return self._serializer.encode(body.content, body.media_type)

    def _decode(self, request: RequestDescriptor, response: RawResponse) -> Any:
        shape = request.shape
        if shape is ResponseShape.NO_CONTENT:
            if response.stream is not None:
                response.stream.close()
            return None
        if shape is ResponseShape.STREAM:
            return response.stream if response.stream is not None else io.BytesIO(response.content)
        if shape is ResponseShape.TEXT:
            return response.text
        return self._serializer.decode(response.content, request.target)

    # ------------------------------------------------------------------
    # Existencia
    # ------------------------------------------------------------------

    def available(self, id: Locatable, *, session: SessionToken | None = None) -> bool:
        """`GET base/<id>/available`; un 404 es `False`, no un error."""

        return self._exists(_require_locator(id, "id"), None, session)

    def version_available(
        self,
        id: Locatable,
        version_id: int,
        *,
        session: SessionToken | None = None,
    ) -> bool:
        """`GET base/<id>/versions/<versionId>/available`."""

        return self._exists(_require_locator(id, "id"), _require(version_of(version_id), "version_id"), session)

    def _exists(
        self,
        locator: ElementLocator,
        version: ByVersionId | None,
        session: SessionToken | None,
    ) -> bool:
        try:
            result = self.execute(
                "GET",
                locator=locator,
                version=version,
                suffix=AVAILABLE_SEGMENT,
                session=session,
                shape=ResponseShape.GENERIC,
                target=bool,
            )
        except ServerStatusError as exc:
            if exc.is_not_found:
                return False
            raise
        return bool(result)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(
        self,
        entity: T,
        *,
        query: QueryLike = None,
        session: SessionToken | None = None,
    ) -> T:
        """`POST base[?query]`; devuelve la entidad tal como la deja el servidor."""

        return self.execute(
            "POST",
            query=query,
            session=session,
            body=RequestBody.entity(_require(entity, "entity")),
            target=self._element_type,
        )

    def create_at(
        self,
        locator: Locatable,
        entity: T,
        *,
        session: SessionToken | None = None,
    ) -> T:
        """`POST base/<id|key>`.

        Deprecated: if the address is known, `update`/`overwrite` (PUT) is the
        right verb. Kept for servers that still expect the POST form.
        """

        warnings.warn(
            "create_at() posts to an addressed element; use update() or overwrite() instead",
            DeprecationWarning,
            stacklevel=2,
        )
        return self.execute(
            "POST",
            locator=_require_locator(locator),
            session=session,
            body=RequestBody.entity(_require(entity, "entity")),
            target=self._element_type,
        )

    def create_list(
        self,
        entities: Iterable[Any] | None = None,
        *,
        shape: Any,
        session: SessionToken | None = None,
    ) -> Any:
        """`POST base` con cuerpo vacío (lista vacía) o con la colección dada.

        La respuesta se decodifica en `shape`, que puede no tener nada que ver
        con el tipo del cliente (p.ej. `list[OtroModelo]`).
        """

        body = RequestBody.empty() if entities is None else RequestBody.entity(list(entities))
        return self.execute(
            "POST",
            session=session,
            body=body,
            shape=ResponseShape.GENERIC,
            target=_require(shape, "shape"),
        )

    def create_no_response(self, entity: T, *, session: SessionToken | None = None) -> None:
        self.execute(
            "POST",
            session=session,
            body=RequestBody.entity(_require(entity, "entity")),
            shape=ResponseShape.NO_CONTENT,
        )

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def read(
        self,
        locator: Locatable | None = None,
        *,
        query: QueryLike = None,
        session: SessionToken | None = None,
        shape: Any = None,
    ) -> Any:
        """`GET base[/<id|key>][?query]`.

        Sin locator lee la URL de la colección como un único valor. Con
        `shape` decodifica en ese tipo en lugar del tipo del cliente.
        """

        return self.execute(
            "GET",
            locator=locator,
            query=query,
            session=session,
            shape=ResponseShape.GENERIC if shape is not None else ResponseShape.ELEMENT,
            target=shape if shape is not None else self._element_type,
        )

    def read_any(self, *, session: SessionToken | None = None) -> T:
        """`GET base` aceptando cualquier media type (`Accept: */*`)."""

        return self.execute(
            "GET",
            session=session,
            target=self._element_type,
            accept=MediaType.WILDCARD,
        )

    def read_list(
        self,
        *,
        shape: Any = None,
        query: QueryLike = None,
        session: SessionToken | None = None,
    ) -> Any:
        """`GET base[?query]`; por defecto decodifica en `list[T]`."""

        return self.execute(
            "GET",
            query=query,
            session=session,
            shape=ResponseShape.GENERIC,
            target=shape if shape is not None else list[self._element_type],
        )

    def read_version(
        self,
        locator: Locatable,
        version_id: int,
        *,
        query: QueryLike = None,
        session: SessionToken | None = None,
        shape: Any = None,
    ) -> Any:
        """`GET base/<id|key>/versions/<versionId>[?query]`."""

        return self.execute(
            "GET",
            locator=_require_locator(locator),
            version=_require(version_id, "version_id"),
            query=query,
            session=session,
            shape=ResponseShape.GENERIC if shape is not None else ResponseShape.ELEMENT,
            target=shape if shape is not None else self._element_type,
        )

    def read_versions(
        self,
        id: Locatable,
        *,
        shape: Any = None,
        session: SessionToken | None = None,
    ) -> Any:
        """`GET base/<id>/versions`; por defecto `list[T]`."""

        return self.execute(
            "GET",
            locator=_require_locator(id, "id"),
            versions=True,
            session=session,
            shape=ResponseShape.GENERIC,
            target=shape if shape is not None else list[self._element_type],
        )

    def read_stream(
        self,
        id: Locatable,
        extension: str,
        *,
        session: SessionToken | None = None,
    ) -> BinaryIO:
        """`GET base/<id><extension>` como stream abierto.

        El llamador es dueño del stream y debe cerrarlo. La extensión se pega
        tal cual (`".pdf"`), para que el servidor negocie por nombre de fichero.
        """

        return self.execute(
            "GET",
            locator=_require_locator(id, "id"),
            extension=_require(extension, "extension"),
            session=session,
            shape=ResponseShape.STREAM,
            accept=None,
        )

    def read_stream_version(
        self,
        id: Locatable,
        version_id: int,
        extension: str,
        *,
        session: SessionToken | None = None,
    ) -> BinaryIO:
        """`GET base/<id>/versions/<versionId><extension>` como stream abierto."""

        return self.execute(
            "GET",
            locator=_require_locator(id, "id"),
            version=_require(version_id, "version_id"),
            extension=_require(extension, "extension"),
            session=session,
            shape=ResponseShape.STREAM,
            accept=None,
        )

    # ------------------------------------------------------------------
    # Overwrite / update
    # ------------------------------------------------------------------

    def overwrite(
        self,
        entity: Any,
        locator: Locatable | None = None,
        *,
        media_type: MediaType | str | None = None,
        session: SessionToken | None = None,
    ) -> T:
        """`PUT base[/<key>]` con semántica de reemplazo total.

        Sin locator reemplaza la colección entera con `entity`.
        """

        return self.execute(
            "PUT",
            locator=locator,
            session=session,
            body=RequestBody.entity(_require(entity, "entity"), media_type),
            target=self._element_type,
        )

    def update(
        self,
        entity: T,
        locator: Locatable | None = None,
        *,
        session: SessionToken | None = None,
    ) -> T:
        """`PUT base[/<id|key>]`; parcial o total según el servidor."""

        return self.execute(
            "PUT",
            locator=locator,
            session=session,
            body=RequestBody.entity(_require(entity, "entity")),
            target=self._element_type,
        )

    def update_raw(
        self,
        content: str,
        media_type: MediaType | str,
        locator: Locatable | None = None,
        *,
        session: SessionToken | None = None,
    ) -> T:
        """`PUT` con un cuerpo ya serializado (representación no canónica)."""

        return self.execute(
            "PUT",
            locator=locator,
            session=session,
            body=RequestBody.raw_string(content, media_type),
            target=self._element_type,
        )

    def update_no_response(
        self,
        entity: T,
        locator: Locatable | None = None,
        *,
        session: SessionToken | None = None,
    ) -> None:
        self.execute(
            "PUT",
            locator=locator,
            session=session,
            body=RequestBody.entity(_require(entity, "entity")),
            shape=ResponseShape.NO_CONTENT,
        )

    def touch(self, id: Locatable, *, session: SessionToken | None = None) -> None:
        """`PUT base/<id>` con cuerpo vacío, solo como señal."""

        self.execute(
            "PUT",
            locator=_require_locator(id, "id"),
            session=session,
            body=RequestBody.empty(),
            shape=ResponseShape.NO_CONTENT,
        )

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    def delete(
        self,
        locator: Locatable,
        *,
        version_id: int | None = None,
        query: QueryLike = None,
        session: SessionToken | None = None,
    ) -> RawResponse:
        """`DELETE base/<id|key>[/versions/<versionId>][?query]`.

        Con `version_id` borra exactamente esa revisión y deja las demás.
        """

        _, response = self.send(
            "DELETE",
            locator=_require_locator(locator),
            version=version_id,
            query=query,
            session=session,
            shape=ResponseShape.NO_CONTENT,
            accept=None,
        )
        return response

    def delete_all(self, *, session: SessionToken | None = None) -> RawResponse:
        """`DELETE base`: borra la colección entera, sin confirmación."""

        _, response = self.send(
            "DELETE",
            session=session,
            shape=ResponseShape.NO_CONTENT,
            accept=None,
        )
        return response

    def delete_many(self, ids: Iterable[int], *, session: SessionToken | None = None) -> None:
        """Borra cada id y reporta todos los fallos juntos.

        Raises:
            MultiStatusError: algún borrado respondió fuera de 2xx; `result`
                lleva el status y mensaje de cada id fallido.
        """

        failures: dict[int, ServerStatusError] = {}
        for element_id in _require(ids, "ids"):
            try:
                self.delete(element_id, session=session)
            except ServerStatusError as exc:
                failures[element_id] = exc
        if failures:
            raise MultiStatusError(
                f"{len(failures)} delete(s) failed",
                MultiStatusResult.from_errors(failures),
            )

    # ------------------------------------------------------------------
    # Sub-recursos
    # ------------------------------------------------------------------

    def child(
        self,
        child_type: Any,
        relative_path: str | Sequence[str],
        *,
        locator: Locatable | None = None,
        version_id: int | None = None,
    ) -> ResourceClient[Any]:
        """Deriva un cliente para `base[/<id|key>[/versions/<versionId>]]/<relative_path>`.

        No hace I/O. El hijo comparte transporte y serializer y no guarda
        referencia al padre. `child_type` puede ser un modelo concreto o una
        forma genérica (`list[X]`, `dict[str, int]`).
        """

        path = self._builder.path_for(
            locator=locate(locator),
            version=version_of(version_id),
            suffix=_require(relative_path, "relative_path"),
        )
        return ResourceClient(self._transport, child_type, path, serializer=self._serializer)

    def counts(self, *, session: SessionToken | None = None) -> dict[int, int]:
        """`GET base` decodificado como `dict[int, int]`.

        Deprecated: equivale a `read(shape=dict[int, int])` o a un cliente hijo
        con ese tipo.
        """

        warnings.warn(
            "counts() is deprecated; use read(shape=dict[int, int]) instead",
            DeprecationWarning,
            stacklevel=2,
        )
        return self.read(session=session, shape=dict[int, int])


def _server_message(response: RawResponse) -> str:
    if response.stream is not None:
        response.stream.close()
    text = response.text.strip()
    return text or response.reason

