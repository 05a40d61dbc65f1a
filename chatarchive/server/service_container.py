"""
Service container for dependency injection and lifecycle management.

This module connects both stores, bootstraps their schema and builds the
services on top of them, so that route handlers only ever see fully
initialized services. Pools are closed on shutdown in reverse order.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from ..config.settings import Settings, StoreConfig
from ..storage.database import (
    AttachmentService,
    DatabaseError,
    DeletionService,
    MessageService,
    RetentionService,
    Store,
    ensure_schema,
)
from ..utils.logging import log_event


@dataclass
class ServiceConfig:
    """
    Configuration for all core services.

    This centralizes configuration needed to initialize services,
    making dependencies explicit and easy to modify.
    """

    text_store: StoreConfig
    files_store: StoreConfig
    settings: Settings

    @classmethod
    def from_settings(cls, settings: Settings) -> "ServiceConfig":
        return cls(
            text_store=settings.text_store_config(),
            files_store=settings.files_store_config(),
            settings=settings,
        )


class ServiceInitializationError(Exception):
    """Raised when service initialization fails."""

    pass


class ServiceContainer:
    """
    Container for the two stores and the services that use them.

    Manages the lifecycle of:
    - Text store pool (messages)
    - Files store pool (attachments)
    - Message, attachment, retention and deletion services

    All services are guaranteed to be initialized (never None) after
    calling initialize(). Services are initialized in dependency order
    and cleaned up in reverse order.

    Usage:
        container = ServiceContainer(ServiceConfig.from_settings(settings))
        await container.initialize()

        result = await container.message_service.list_messages()

        await container.cleanup()

    Or use as async context manager:
        async with ServiceContainer(config) as container:
            await container.retention_service.run_cleanup()
    """

    def __init__(self, config: ServiceConfig):
        """
        Initialize container with configuration.

        Args:
            config: Service configuration
        """
        self.config = config
        self._initialized = False

        # Store adapters
        self.text_store: Optional[Store] = None
        self.files_store: Optional[Store] = None

        # Services
        self.message_service: Optional[MessageService] = None
        self.attachment_service: Optional[AttachmentService] = None
        self.retention_service: Optional[RetentionService] = None
        self.deletion_service: Optional[DeletionService] = None

    async def initialize(self, migrate: Optional[bool] = None) -> None:
        """
        Initialize all services in correct dependency order.

        Initialization phases:
        1. Store connections (text, files)
        2. Schema bootstrap (when auto_migrate is enabled)
        3. Services

        Args:
            migrate: Override settings.auto_migrate for this call

        Raises:
            ServiceInitializationError: If any service fails to initialize
        """
        if self._initialized:
            log_event(
                "service_container_already_initialized",
                level=logging.WARNING,
            )
            return

        settings = self.config.settings
        if migrate is None:
            migrate = settings.auto_migrate

        try:
            log_event(
                "service_container_init_start",
                {
                    "text_store": _describe_store(self.config.text_store),
                    "files_store": _describe_store(self.config.files_store),
                    "auto_migrate": migrate,
                },
            )

            # Phase 1: Store connections
            self.text_store = await Store.connect(self.config.text_store)
            self.files_store = await Store.connect(self.config.files_store)

            # Phase 2: Schema
            if migrate:
                await ensure_schema(self.text_store, self.files_store)

            # Phase 3: Services
            self._init_services()

            self._initialized = True

            log_event(
                "service_container_initialized",
                {
                    "services": [
                        "text_store",
                        "files_store",
                        "message",
                        "attachment",
                        "retention",
                        "deletion",
                    ],
                    "status": "ready",
                },
            )

        except Exception as e:
            log_event(
                "service_container_init_failed",
                {
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
                level=logging.ERROR,
            )
            # Cleanup on failure
            await self.cleanup()
            raise ServiceInitializationError(
                f"Failed to initialize services: {str(e)}"
            ) from e

    def _init_services(self) -> None:
        settings = self.config.settings

        self.message_service = MessageService(
            self.text_store,
            max_content_length=settings.max_content_length,
        )
        self.attachment_service = AttachmentService(
            self.files_store,
            self.message_service,
            url_template=settings.attachment_url_template,
            max_upload_bytes=settings.max_upload_bytes,
        )
        self.retention_service = RetentionService(
            self.text_store,
            self.files_store,
            message_retention=timedelta(days=settings.message_retention_days),
            attachment_retention=timedelta(days=settings.attachment_retention_days),
        )
        self.deletion_service = DeletionService(
            self.text_store,
            self.files_store,
            self.message_service,
            self.attachment_service,
        )

    async def cleanup(self) -> None:
        """
        Close both pools in reverse initialization order.

        Safe to call when initialization failed part way.
        """
        log_event("service_container_cleanup_start")

        # Services hold no resources of their own
        self.deletion_service = None
        self.retention_service = None
        self.attachment_service = None
        self.message_service = None

        for attr in ("files_store", "text_store"):
            store: Optional[Store] = getattr(self, attr)
            if store is None:
                continue
            try:
                await store.close()
            except Exception as e:
                log_event(
                    "store_cleanup_error",
                    {"store": store.name, "error": str(e)},
                    level=logging.WARNING,
                )
            setattr(self, attr, None)

        self._initialized = False
        log_event("service_container_cleanup_complete")

    async def health_check(self) -> dict:
        """Ping both stores; a store that does not answer is reported as False."""
        status = {}
        for store in (self.text_store, self.files_store):
            if store is None:
                continue
            try:
                status[store.name] = await store.ping()
            except DatabaseError as e:
                log_event(
                    "store_health_check_failed",
                    {"store": store.name, "error": str(e)},
                    level=logging.WARNING,
                )
                status[store.name] = False
        return status

    async def __aenter__(self):
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.cleanup()
        return False  # Don't suppress exceptions


def _describe_store(config: StoreConfig) -> dict:
    """Loggable view of a store config, without credentials."""
    return {
        "host": config.host,
        "port": config.port,
        "database": config.database,
        "tls": config.ca_b64 is not None,
        "max_size": config.max_size,
    }
