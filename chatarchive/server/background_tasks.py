"""
Background retention scheduling within the main server process.
"""

import asyncio
import contextlib
import logging
import time
from typing import Any, Dict, Optional

from chatarchive.storage.database import RetentionService
from chatarchive.utils.logging import (
    log_event,
    log_operation_error,
    log_operation_success,
    new_correlation_id,
)


class RetentionScheduler:
    """Runs retention cleanup periodically until stopped."""

    def __init__(self, retention_service: RetentionService, interval_hours: float):
        self.retention_service = retention_service
        self.interval_seconds = interval_hours * 3600
        self.worker_task: Optional[asyncio.Task] = None
        self.shutdown_event = asyncio.Event()
        self.enabled = False
        self.runs = 0
        self.last_result: Optional[Dict[str, Any]] = None
        self.stop_timeout = 5.0

    async def start(self):
        """Start the scheduler loop; an interval of 0 leaves it disabled."""
        if self.interval_seconds <= 0:
            log_event(
                "retention_scheduler_disabled",
                {"interval_seconds": self.interval_seconds},
            )
            return

        self.shutdown_event.clear()
        self.worker_task = asyncio.create_task(self._run_loop())
        self.enabled = True

        log_event(
            "retention_scheduler_started",
            {"interval_seconds": self.interval_seconds},
        )

    async def _run_loop(self):
        """Wait one interval, clean up, repeat until shutdown."""
        while not self.shutdown_event.is_set():
            try:
                await asyncio.wait_for(
                    self.shutdown_event.wait(), timeout=self.interval_seconds
                )
                break
            except asyncio.TimeoutError:
                pass

            await self.run_once()

    async def run_once(self) -> Optional[Dict[str, Any]]:
        """
        Run one cleanup pass under a fresh correlation id.

        Failures are logged and the loop keeps going; nothing is retried
        before the next interval.
        """
        new_correlation_id()
        start = time.time()
        self.runs += 1

        try:
            result = await self.retention_service.run_cleanup()
        except Exception as e:
            log_operation_error(
                "scheduled_cleanup",
                e,
                duration_ms=int((time.time() - start) * 1000),
                run=self.runs,
            )
            return None

        duration_ms = int((time.time() - start) * 1000)
        if result.is_failure():
            log_event(
                "scheduled_cleanup_failed",
                {
                    "run": self.runs,
                    "error": str(result.error),
                    "error_type": result.error_type,
                    "context": result.context,
                },
                level=logging.WARNING,
            )
            return None

        self.last_result = result.unwrap()
        log_operation_success(
            "scheduled_cleanup",
            duration_ms=duration_ms,
            run=self.runs,
            **self.last_result,
        )
        return self.last_result

    async def stop(self):
        """Stop the scheduler loop gracefully."""
        if self.worker_task and not self.worker_task.done():
            self.shutdown_event.set()

            try:
                await asyncio.wait_for(self.worker_task, timeout=self.stop_timeout)
            except asyncio.TimeoutError:
                self.worker_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await self.worker_task

        self.enabled = False

        log_event("retention_scheduler_stopped", {"runs": self.runs})

    def get_status(self) -> Dict[str, Any]:
        """Get status of the scheduler."""
        return {
            "enabled": self.enabled,
            "interval_seconds": self.interval_seconds,
            "runs": self.runs,
            "last_result": self.last_result,
        }
