"""Transporte HTTP sobre httpx.

Por qué un wrapper:
- Estandariza timeouts, headers, Basic Auth, TLS y logging en un solo sitio.
- Facilita testeo: `httpx.MockTransport` sustituye la red sin tocar el core.
"""

from __future__ import annotations

import io
import logging
from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Any, Iterator, Sequence

import httpx

from adapters.json_serializer import PydanticSerializer
from core.config import ClientSettings
from core.domain.models import RawResponse, RequestDescriptor, ResponseShape
from core.exceptions import PreconditionViolation, TransportError
from core.interfaces.transport import Serializer
from core.services.resource_client import ResourceClient

logger = logging.getLogger(__name__)


def _log_request(request: httpx.Request) -> None:
    logger.debug("-> %s %s", request.method, request.url)


def _log_response(response: httpx.Response) -> None:
    logger.debug(
        "<- %s %s %s",
        response.status_code,
        response.request.method,
        response.request.url,
    )


def build_client(
    settings: ClientSettings | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
    extra_headers: dict[str, str] | None = None,
) -> httpx.Client:
    """Crea un `httpx.Client` apuntando a `settings.base_url`.

    Por qué un builder:
    - Las credenciales Basic se aplican una vez, aquí, y no por llamada.
    - El jar de cookies no persiste nada: una llamada sin sesión nunca
      reenvía un `X-SessionId` que el servidor haya puesto antes.
    - `transport` permite inyectar un `httpx.MockTransport` en tests.
    """

    settings = settings or ClientSettings()
    if (settings.api_key is None) != (settings.api_password is None):
        raise PreconditionViolation("api_key and api_password must be configured together")

    headers: dict[str, str] = {"User-Agent": settings.user_agent}
    if extra_headers:
        headers.update(extra_headers)

    auth = httpx.BasicAuth(settings.api_key, settings.api_password) if settings.has_credentials else None

    event_hooks: dict[str, list[Any]] = {"request": [], "response": []}
    if settings.with_logging:
        event_hooks["request"].append(_log_request)
        event_hooks["response"].append(_log_response)

    kwargs: dict[str, Any] = {}
    if transport is not None:
        kwargs["transport"] = transport

    return httpx.Client(
        base_url=str(settings.base_url),
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        headers=headers,
        auth=auth,
        # certificados autofirmados
        verify=not settings.disable_certificate_validation,
        event_hooks=event_hooks,
        # la sesión viaja solo por petición; el jar no guarda Set-Cookie
        cookies=CookieJar(policy=DefaultCookiePolicy(allowed_domains=[])),
        **kwargs,
    )


class ResponseStream(io.RawIOBase):
    """Cuerpo de una respuesta en streaming como fichero binario de solo lectura.

    Cerrar el stream cierra la respuesta httpx subyacente.
    """

    def __init__(self, response: httpx.Response) -> None:
        super().__init__()
        self._response = response
        self._chunks: Iterator[bytes] = response.iter_bytes()
        self._pending = b""

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: Any) -> int:
        while not self._pending:
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                return 0
        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size

    def close(self) -> None:
        if not self.closed:
            self._response.close()
        super().close()


def _cookie_header(cookies: dict[str, str]) -> str:
    return "; ".join(f"{name}={value}" for name, value in cookies.items())


class HttpxTransport:
    """Implementa `core.interfaces.Transport` con un `httpx.Client` síncrono.

    Reglas:
    - Devuelve cualquier status; decidir qué es error es cosa del core.
    - Las respuestas de error se leen completas aunque se pidiera stream, para
      que el mensaje del servidor llegue al `ServerStatusError`.
    - Los fallos de httpx (conexión, timeout, redirects) salen como
      `core.exceptions.TransportError`.
    """

    def __init__(self, client: httpx.Client) -> None:
        if client is None:
            raise PreconditionViolation("client must not be None")
        self._client = client

    @property
    def client(self) -> httpx.Client:
        return self._client

    def execute(self, request: RequestDescriptor, *, content: bytes | None = None) -> RawResponse:
        headers = dict(request.headers)
        if request.cookies:
            headers["Cookie"] = _cookie_header(request.cookies)

        params: Sequence[tuple[str, str]] | None = list(request.query) or None
        http_request = self._client.build_request(
            request.method,
            request.path_string,
            params=params,
            headers=headers,
            content=content,
        )

        streaming = request.shape is ResponseShape.STREAM
        try:
            response = self._client.send(http_request, stream=streaming)
        except httpx.RequestError as exc:
            raise TransportError(f"{request.method} {request.url} failed: {exc}") from exc

        if streaming:
            if response.is_success:
                return RawResponse(
                    status_code=response.status_code,
                    headers=dict(response.headers),
                    stream=ResponseStream(response),
                    reason=response.reason_phrase,
                    url=str(response.url),
                )
            try:
                response.read()
            finally:
                response.close()

        return RawResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            content=response.content,
            reason=response.reason_phrase,
            url=str(response.url),
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class RestClient:
    """Conexión a un servicio REST: dueño del `httpx.Client` y fábrica de clientes de recurso.

    Uso:
        with RestClient(ClientSettings()) as rest:
            entries = rest.resource(Entry, "/v1/entries")
            entries.read(1, session=42)
    """

    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
        serializer: Serializer | None = None,
    ) -> None:
        self._settings = settings or ClientSettings()
        self._transport = HttpxTransport(build_client(self._settings, transport=transport))
        self._serializer = serializer or PydanticSerializer()

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    @property
    def transport(self) -> HttpxTransport:
        return self._transport

    def resource(self, element_type: Any, base_path: str | Sequence[str]) -> ResourceClient[Any]:
        return ResourceClient(self._transport, element_type, base_path, serializer=self._serializer)

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> RestClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
