"""
Idempotent schema bootstrap for both stores.
"""

from . import queries
from .store import Store
from ...utils.logging import log_event


async def ensure_text_schema(store: Store) -> None:
    """Create the messages table and its indexes if they are missing."""
    await store.execute(queries.CREATE_MESSAGES_TABLE)
    for statement in queries.CREATE_MESSAGES_INDEXES:
        await store.execute(statement)
    log_event("schema_ready", {"store": store.name, "table": "messages"})


async def ensure_files_schema(store: Store) -> None:
    """Create the attachments table and its indexes if they are missing."""
    await store.execute(queries.CREATE_ATTACHMENTS_TABLE)
    for statement in queries.CREATE_ATTACHMENTS_INDEXES:
        await store.execute(statement)
    log_event("schema_ready", {"store": store.name, "table": "attachments"})


async def ensure_schema(text_store: Store, files_store: Store) -> None:
    """
    Create both tables. Each store is independent; there are no cross-store
    foreign keys.
    """
    await ensure_text_schema(text_store)
    await ensure_files_schema(files_store)
