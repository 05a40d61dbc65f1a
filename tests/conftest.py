from contextlib import asynccontextmanager

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from unittest.mock import patch

from tests.mocks import (
    FakeClock,
    InMemoryStore,
    MockApplicationServer,
)


def _create_test_client(mock_server: MockApplicationServer) -> TestClient:
    from chatarchive.server.api import dependencies
    from chatarchive.server.main import create_app

    dependencies.set_server_instance(mock_server)

    @asynccontextmanager
    async def mock_lifespan(app: FastAPI):
        yield

    with patch("chatarchive.server.main.server", mock_server):
        with patch("chatarchive.server.main.lifespan", mock_lifespan):
            app = create_app()
            return TestClient(app)


@pytest.fixture
def mock_server() -> MockApplicationServer:
    return MockApplicationServer()


@pytest.fixture
def mock_server_no_services() -> MockApplicationServer:
    server = MockApplicationServer()
    server.service_container = None
    return server


@pytest.fixture
def client(mock_server: MockApplicationServer) -> TestClient:
    return _create_test_client(mock_server)


@pytest.fixture
def client_no_services(mock_server_no_services: MockApplicationServer) -> TestClient:
    return _create_test_client(mock_server_no_services)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def text_store(clock: FakeClock) -> InMemoryStore:
    return InMemoryStore("text", clock)


@pytest.fixture
def files_store(clock: FakeClock) -> InMemoryStore:
    return InMemoryStore("files", clock)
