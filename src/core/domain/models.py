"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Los locators y el descriptor de petición son valores inmutables y validados
  en el borde: un id que no es entero falla antes de construir nada.
- El descriptor es fácil de inspeccionar en tests (igualdad estructural).

Nota:
- Estos modelos describen *qué* se pide, no *cómo* se envía por la red.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, BinaryIO, Iterable, Iterator, Mapping, Sequence, Union
from urllib.parse import urlencode

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict

from core.domain.media_type import MediaType
from core.exceptions import PreconditionViolation, ServerStatusError

SESSION_COOKIE = "X-SessionId"

SessionToken = Union[int, str]


class ById(BaseModel):
    """Addresses one element by its numeric id."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Identificador numérico del elemento.")

    @property
    def segment(self) -> str:
        return str(self.id)


class ByKey(BaseModel):
    """Addresses one element by its string key (used verbatim in the path)."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., min_length=1, description="Clave textual del elemento.")

    @property
    def segment(self) -> str:
        return self.key


class ByVersionId(BaseModel):
    """Scopes an operation to one historical revision of an element."""

    model_config = ConfigDict(frozen=True)

    version_id: int = Field(..., description="Identificador numérico de la versión.")

    @property
    def segment(self) -> str:
        return str(self.version_id)


ElementLocator = Union[ById, ByKey]
Locatable = Union[ById, ByKey, int, str]


def locate(value: Locatable | None) -> ElementLocator | None:
    """Normaliza un id/key suelto a su locator.

    `int` -> `ById`, `str` -> `ByKey`, locators y `None` pasan tal cual.
    """

    if value is None or isinstance(value, (ById, ByKey)):
        return value
    # bool es subclase de int y nunca es un id válido
    if isinstance(value, bool):
        raise PreconditionViolation(f"locator must be an int id or a str key, got {value!r}")
    if isinstance(value, int):
        return ById(id=value)
    if isinstance(value, str):
        if not value:
            raise PreconditionViolation("key must not be empty")
        return ByKey(key=value)
    raise PreconditionViolation(f"locator must be an int id or a str key, got {type(value).__name__}")


def version_of(value: ByVersionId | int | None) -> ByVersionId | None:
    """Normaliza un version id suelto a `ByVersionId`."""

    if value is None or isinstance(value, ByVersionId):
        return value
    if isinstance(value, bool) or not isinstance(value, int):
        raise PreconditionViolation(f"version id must be an int, got {value!r}")
    return ByVersionId(version_id=value)


class QueryParameters:
    """Ordered multi-map of query parameters.

    Repeated keys are kept and emitted in insertion order, so
    `{"a": ["1", "2"]}` renders as `?a=1&a=2`.
    """

    __slots__ = ("_pairs",)

    def __init__(
        self,
        data: Mapping[str, Any] | Iterable[tuple[str, str]] | None = None,
    ) -> None:
        self._pairs: list[tuple[str, str]] = []
        if data is None:
            return
        if isinstance(data, Mapping):
            for key, values in data.items():
                # escalares (str, int, bool...) cuentan como un único valor
                if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
                    self.add(key, values)
                else:
                    for value in values:
                        self.add(key, value)
        else:
            for key, value in data:
                self.add(key, value)

    @classmethod
    def coerce(
        cls,
        value: QueryParameters | Mapping[str, str | Sequence[str]] | Iterable[tuple[str, str]] | None,
    ) -> QueryParameters | None:
        if value is None or isinstance(value, QueryParameters):
            return value
        return cls(value)

    def add(self, key: str, value: Any) -> QueryParameters:
        if not key:
            raise PreconditionViolation("query parameter name must not be empty")
        if value is None:
            raise PreconditionViolation(f"query parameter {key!r} must not be None")
        text = value.decode("utf-8") if isinstance(value, bytes) else str(value)
        self._pairs.append((key, text))
        return self

    def get_all(self, key: str) -> list[str]:
        return [v for k, v in self._pairs if k == key]

    def keys(self) -> list[str]:
        seen: dict[str, None] = {}
        for key, _ in self._pairs:
            seen.setdefault(key, None)
        return list(seen)

    def items(self) -> list[tuple[str, str]]:
        return list(self._pairs)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(list(self._pairs))

    def __len__(self) -> int:
        return len(self._pairs)

    def __bool__(self) -> bool:
        return bool(self._pairs)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, QueryParameters):
            return self._pairs == other._pairs
        return NotImplemented

    def __repr__(self) -> str:
        return f"QueryParameters({self._pairs!r})"


class ResponseShape(str, Enum):
    """How the body of a response is turned into a result."""

    ELEMENT = "element"
    GENERIC = "generic"
    TEXT = "text"
    STREAM = "stream"
    NO_CONTENT = "no_content"


class RequestBody(BaseModel):
    """Cuerpo de la petición.

    - `raw=False`: `content` es una entidad que codifica el Serializer.
    - `raw=True`: `content` ya es un string serializado en `media_type`.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    content: Any = None
    media_type: str = MediaType.JSON.value
    raw: bool = False

    @classmethod
    def entity(cls, value: Any, media_type: MediaType | str | None = None) -> RequestBody:
        return cls(content=value, media_type=MediaType.normalize(media_type or MediaType.JSON))

    @classmethod
    def raw_string(cls, value: str, media_type: MediaType | str) -> RequestBody:
        if value is None:
            raise PreconditionViolation("raw body must not be None")
        if not media_type:
            raise PreconditionViolation("raw body requires an explicit media type")
        return cls(content=value, media_type=MediaType.normalize(media_type), raw=True)

    @classmethod
    def empty(cls) -> RequestBody:
        """Zero-length JSON body: the one sent by "create empty list" and "touch"."""

        return cls(content="", raw=True)


class RequestDescriptor(BaseModel):
    """Descripción completa e inmutable de una llamada saliente.

    Se crea por invocación, la consume el transporte y se descarta.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    method: str = Field(..., min_length=1)
    path: tuple[str, ...] = Field(..., description="Segmentos del path, ya compuestos.")
    query: tuple[tuple[str, str], ...] = ()
    headers: Mapping[str, str] = Field(default_factory=dict, validate_default=True)
    cookies: Mapping[str, str] = Field(default_factory=dict, validate_default=True)
    body: RequestBody | None = None
    shape: ResponseShape = ResponseShape.ELEMENT
    target: Any = Field(default=None, description="Tipo destino para ELEMENT/GENERIC.")

    @field_validator("headers", "cookies", mode="after")
    @classmethod
    def freeze_mapping(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(value))

    @property
    def path_string(self) -> str:
        return "/" + "/".join(self.path)

    @property
    def url(self) -> str:
        """Path plus query string, relative to the transport's base URL."""

        if not self.query:
            return self.path_string
        return f"{self.path_string}?{urlencode(list(self.query))}"


@dataclass(frozen=True)
class RawResponse:
    """Lo que devuelve el transporte: status, headers y cuerpo (o stream)."""

    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    content: bytes = b""
    stream: BinaryIO | None = None
    reason: str = ""
    url: str | None = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")


class StatusEntry(BaseModel):
    """Resultado de un id dentro de una operación por lotes."""

    id: int
    status_code: int
    message: str = ""


class MultiStatusResult(BaseModel):
    """Fallos por id de una operación por lotes (p.ej. borrados masivos).

    Por qué existe:
    - Un llamador que itera sobre varios ids necesita devolver todos los
      fallos juntos en lugar de cortar en el primero.
    """

    results: list[StatusEntry] | None = None

    @classmethod
    def from_errors(cls, errors: Mapping[int, ServerStatusError]) -> MultiStatusResult:
        return cls(
            results=[
                StatusEntry(id=key, status_code=exc.status_code, message=exc.message or str(exc))
                for key, exc in errors.items()
            ]
        )
