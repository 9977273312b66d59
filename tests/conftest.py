from __future__ import annotations

from typing import Iterator

import httpx
import pytest

from adapters.http_client import RestClient
from core.config import ClientSettings
from core.services.resource_client import ResourceClient
from support import BASE_URL, V1_ENTRIES, Entry, StubServer


@pytest.fixture
def server() -> StubServer:
    return StubServer()


@pytest.fixture
def settings() -> ClientSettings:
    return ClientSettings(base_url=BASE_URL, _env_file=None)


@pytest.fixture
def rest(server: StubServer, settings: ClientSettings) -> Iterator[RestClient]:
    client = RestClient(settings, transport=httpx.MockTransport(server))
    yield client
    client.close()


@pytest.fixture
def client(rest: RestClient) -> ResourceClient[Entry]:
    return rest.resource(Entry, V1_ENTRIES)
