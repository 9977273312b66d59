"""Servidor stub sobre `httpx.MockTransport` y modelos de prueba.

El stub responde solo a las reglas registradas y devuelve 404 a todo lo
demás, igual que un servidor que exige cookie o query params concretos.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx
from pydantic import BaseModel

BASE_URL = "http://localhost:5309"
V1_ENTRIES = "/v1/entries"
_MISSING = object()


class Entry(BaseModel):
    entry: str | None = None


@dataclass
class Rule:
    method: str
    path: str
    status: int = 200
    json: Any = _MISSING
    content: bytes | None = None
    content_type: str | None = None
    cookie: str | None = None
    query: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    calls: int = 0

    def matches(self, request: httpx.Request) -> bool:
        if request.method != self.method or request.url.path != self.path:
            return False
        if self.cookie is not None and self.cookie not in request.headers.get("cookie", ""):
            return False
        for key, value in self.query.items():
            if value not in request.url.params.get_list(key):
                return False
        return True

    def respond(self) -> httpx.Response:
        self.calls += 1
        if self.json is not _MISSING:
            return httpx.Response(self.status, json=self.json, headers=self.headers)
        headers = dict(self.headers)
        if self.content_type:
            headers["Content-Type"] = self.content_type
        return httpx.Response(self.status, content=self.content or b"", headers=headers)


class StubServer:
    """Handler para `httpx.MockTransport`; la última regla registrada gana."""

    def __init__(self) -> None:
        self.rules: list[Rule] = []
        self.requests: list[httpx.Request] = []

    def stub(self, method: str, path: str, **kwargs: Any) -> Rule:
        rule = Rule(method=method, path=path, **kwargs)
        self.rules.append(rule)
        return rule

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        for rule in reversed(self.rules):
            if rule.matches(request):
                return rule.respond()
        return httpx.Response(404, text=f"no stub for {request.method} {request.url.path}")


