"""
Database module for the two-store chat archive.

Messages live in the text store, attachment bytes in the files store. Each
store is reached through its own bounded asyncpg pool; no statement ever
spans both, so cross-store operations are sequences of independently
committed statements.
"""

from .attachment_service import AttachmentService
from .deletion_service import DeletionService
from .message_service import MessageService
from .retention_service import RetentionService
from .schema import ensure_files_schema, ensure_schema, ensure_text_schema
from .store import Store
from .utils import (
    DatabaseError,
    StatementError,
    StatementResult,
    StoreConnectionError,
    build_ssl_context,
    parse_affected_count,
    record_to_dict,
    records_to_list,
)

__all__ = [
    "AttachmentService",
    "DeletionService",
    "MessageService",
    "RetentionService",
    "Store",
    "DatabaseError",
    "StatementError",
    "StatementResult",
    "StoreConnectionError",
    "build_ssl_context",
    "ensure_files_schema",
    "ensure_schema",
    "ensure_text_schema",
    "parse_affected_count",
    "record_to_dict",
    "records_to_list",
]
