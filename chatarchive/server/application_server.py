"""
Application server managing high-level application services.

This server owns the ServiceContainer (stores and services) and the
retention scheduler, and makes sure they start and stop in order.
"""

import logging
from typing import Optional

from ..config import get_settings
from ..config.settings import Settings
from ..utils.logging import log_event
from .background_tasks import RetentionScheduler
from .service_container import ServiceConfig, ServiceContainer


class ApplicationServer:
    """
    Main application server coordinating all services.

    This server manages:
    - Core infrastructure (via ServiceContainer)
    - The periodic retention scheduler

    The server ensures proper initialization order and cleanup.
    """

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize application server."""
        self.settings = settings or get_settings()

        # Will be initialized
        self.service_container: Optional[ServiceContainer] = None
        self.background_tasks: Optional[RetentionScheduler] = None

        self._initialized = False

    async def initialize(self):
        """
        Initialize all server components in correct order.

        Initialization phases:
        1. Core infrastructure (ServiceContainer)
        2. Retention scheduler
        """
        if self._initialized:
            log_event(
                "application_server_already_initialized",
                level=logging.WARNING,
            )
            return

        try:
            log_event("application_server_init_start")

            # Phase 1: Initialize core infrastructure
            await self._init_service_container()

            # Phase 2: Background retention
            await self._init_background_tasks()

            self._initialized = True

            log_event(
                "application_server_initialized",
                {
                    "cleanup_interval_hours": self.settings.cleanup_interval_hours,
                    "background_tasks_enabled": bool(
                        self.background_tasks and self.background_tasks.enabled
                    ),
                },
            )

        except Exception as e:
            log_event(
                "application_server_init_failed",
                {"error": str(e), "error_type": type(e).__name__},
                level=logging.ERROR,
            )
            # Cleanup on failure
            await self.cleanup()
            raise

    async def cleanup(self):
        """Cleanup all services in reverse initialization order."""
        log_event("application_server_cleanup_start")

        # Stop background tasks first
        if self.background_tasks:
            try:
                await self.background_tasks.stop()
            except Exception as e:
                log_event(
                    "background_tasks_stop_error",
                    {"error": str(e)},
                    level=logging.WARNING,
                )
            self.background_tasks = None

        # Cleanup core infrastructure
        if self.service_container:
            try:
                await self.service_container.cleanup()
            except Exception as e:
                log_event(
                    "service_container_cleanup_error",
                    {"error": str(e)},
                    level=logging.WARNING,
                )
            self.service_container = None

        self._initialized = False
        log_event("application_server_cleanup_complete")

    # Initialization methods

    async def _init_service_container(self):
        """Initialize core infrastructure services."""
        self.service_container = ServiceContainer(
            ServiceConfig.from_settings(self.settings)
        )
        await self.service_container.initialize()

    async def _init_background_tasks(self):
        """Start the retention scheduler."""
        self.background_tasks = RetentionScheduler(
            self.service_container.retention_service,
            interval_hours=self.settings.cleanup_interval_hours,
        )
        await self.background_tasks.start()
