"""Serialización JSON de entidades con Pydantic.

Por qué `TypeAdapter`:
- Un único camino para modelos, listas, mapas y escalares: `list[Entry]`,
  `dict[int, int]` o `bool` se validan igual que un `BaseModel`.
- Los errores de forma salen como `DecodeError`, distintos de los de status.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import TypeAdapter, ValidationError

from core.domain.media_type import MediaType
from core.exceptions import DecodeError, PreconditionViolation


@lru_cache(maxsize=256)
def _adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def _adapter_for(target: Any) -> TypeAdapter[Any]:
    try:
        return _adapter(target)
    except TypeError:
        # tipos no hashables (p.ej. Annotated con metadatos mutables)
        return TypeAdapter(target)


class PydanticSerializer:
    """Implementa `core.interfaces.Serializer` sobre JSON.

    Reglas:
    - `encode` usa alias y el modo JSON de Pydantic (fechas ISO, enums por valor).
    - `decode` de un cuerpo vacío devuelve `None`; un string vacío también se
      acepta como `null` cuando el destino lo admite.
    """

    def __init__(self, *, by_alias: bool = True, exclude_none: bool = False) -> None:
        self._by_alias = by_alias
        self._exclude_none = exclude_none

    def encode(self, value: Any, media_type: str = MediaType.JSON.value) -> bytes:
        normalized = MediaType.normalize(media_type)
        if normalized != MediaType.JSON.value and not normalized.endswith("+json"):
            # otra representación: solo se aceptan cuerpos ya serializados
            if isinstance(value, bytes):
                return value
            if isinstance(value, str):
                return value.encode("utf-8")
            raise PreconditionViolation(f"cannot encode {type(value).__name__} as {media_type!r}; serialize it first")
        if value is None:
            return b"null"
        adapter = _adapter_for(type(value))
        return adapter.dump_json(value, by_alias=self._by_alias, exclude_none=self._exclude_none)

    def decode(self, content: bytes, target: Any) -> Any:
        if not content or not content.strip():
            return None
        try:
            return _adapter_for(target).validate_json(content)
        except ValidationError as exc:
            if content.strip() == b'""':
                # ACCEPT_EMPTY_STRING_AS_NULL_OBJECT: "" cuenta como null
                return self._decode_null(target, exc)
            raise DecodeError(f"response does not match {_describe(target)}: {exc}") from exc
        except ValueError as exc:
            raise DecodeError(f"malformed JSON response: {exc}") from exc

    def _decode_null(self, target: Any, original: ValidationError) -> Any:
        try:
            return _adapter_for(target).validate_python(None)
        except ValidationError:
            raise DecodeError(f"response does not match {_describe(target)}: {original}") from original


def _describe(target: Any) -> str:
    return getattr(target, "__name__", None) or repr(target)
