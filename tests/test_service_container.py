from unittest.mock import AsyncMock, patch

import pytest

from chatarchive.config.settings import Settings
from chatarchive.server.service_container import (
    ServiceConfig,
    ServiceContainer,
    ServiceInitializationError,
)
from chatarchive.storage.database import StoreConnectionError, queries
from tests.mocks import FakeClock, InMemoryStore


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def _connect_to(stores):
    async def connect(config):
        store = stores[config.name]
        if isinstance(store, Exception):
            raise store
        return store

    return connect


class TestServiceContainer:
    @pytest.mark.asyncio
    async def test_initialize_builds_services_and_schema(self):
        clock = FakeClock()
        stores = {
            "text": InMemoryStore("text", clock),
            "files": InMemoryStore("files", clock),
        }
        container = ServiceContainer(ServiceConfig.from_settings(_settings()))

        with patch(
            "chatarchive.server.service_container.Store.connect",
            new=AsyncMock(side_effect=_connect_to(stores)),
        ):
            await container.initialize()

        assert container.message_service is not None
        assert container.attachment_service is not None
        assert container.retention_service is not None
        assert container.deletion_service is not None
        assert stores["text"].statements[0][0] == queries.CREATE_MESSAGES_TABLE
        assert stores["files"].statements[0][0] == queries.CREATE_ATTACHMENTS_TABLE

    @pytest.mark.asyncio
    async def test_settings_reach_the_services(self):
        stores = {"text": InMemoryStore("text"), "files": InMemoryStore("files")}
        settings = _settings(
            auto_migrate=False,
            max_upload_bytes=10,
            message_retention_days=7,
            attachment_url_template="https://files.example/{id}",
        )
        container = ServiceContainer(ServiceConfig.from_settings(settings))

        with patch(
            "chatarchive.server.service_container.Store.connect",
            new=AsyncMock(side_effect=_connect_to(stores)),
        ):
            await container.initialize()

        assert stores["text"].statements == []
        assert container.attachment_service.max_upload_bytes == 10
        assert container.attachment_service.build_url(3) == "https://files.example/3"
        assert container.retention_service.message_retention.days == 7

    @pytest.mark.asyncio
    async def test_failed_connect_closes_the_other_store(self):
        text_store = InMemoryStore("text")
        stores = {
            "text": text_store,
            "files": StoreConnectionError("refused", store="files"),
        }
        container = ServiceContainer(ServiceConfig.from_settings(_settings()))

        with patch(
            "chatarchive.server.service_container.Store.connect",
            new=AsyncMock(side_effect=_connect_to(stores)),
        ):
            with pytest.raises(ServiceInitializationError):
                await container.initialize()

        assert text_store.closed is True
        assert container.text_store is None
        assert container.message_service is None

    @pytest.mark.asyncio
    async def test_cleanup_closes_both_stores(self):
        stores = {"text": InMemoryStore("text"), "files": InMemoryStore("files")}
        container = ServiceContainer(ServiceConfig.from_settings(_settings()))

        with patch(
            "chatarchive.server.service_container.Store.connect",
            new=AsyncMock(side_effect=_connect_to(stores)),
        ):
            async with container:
                assert await container.health_check() == {
                    "text": True,
                    "files": True,
                }

        assert stores["text"].closed is True
        assert stores["files"].closed is True


class TestSettings:
    def test_store_configs(self):
        settings = _settings(
            text_db_host="text.db",
            files_db_host="files.db",
            files_db_port=4000,
            db_pool_max_size=4,
        )

        text = settings.text_store_config()
        files = settings.files_store_config()

        assert (text.name, text.host, text.max_size) == ("text", "text.db", 4)
        assert (files.name, files.host, files.port) == ("files", "files.db", 4000)

    def test_environment_prefix(self, monkeypatch):
        monkeypatch.setenv("CHATARCHIVE_MESSAGE_RETENTION_DAYS", "14")

        assert _settings().message_retention_days == 14
