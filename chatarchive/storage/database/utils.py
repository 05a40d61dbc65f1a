"""
Database utility functions and exceptions shared by the store adapter and
the services.

Provides reusable helpers for:
- Store error classification
- Result mapping
- Command status parsing
- Failure conversion
"""

import base64
import binascii
import logging
import ssl
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from ...utils.logging import log_event
from ...utils.result import Failure, connection_error, statement_error


class DatabaseError(Exception):
    """Base exception for store errors."""

    def __init__(self, message: str, store: Optional[str] = None):
        super().__init__(message)
        self.store = store


class StoreConnectionError(DatabaseError):
    """Raised when a store cannot be reached or no pooled connection is free."""

    pass


class StatementError(DatabaseError):
    """Raised when a store rejects a statement."""

    pass


@dataclass(frozen=True)
class StatementResult:
    """
    Outcome of a mutating statement.

    Attributes:
        affected_rows: Number of rows inserted or deleted
        inserted_id: Store-generated id for inserts, None otherwise
    """

    affected_rows: int
    inserted_id: Optional[int] = None


def record_to_dict(record: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Convert a database record to a dictionary.

    Args:
        record: Database record (asyncpg.Record or any mapping)

    Returns:
        Dictionary with column names as keys
    """
    return dict(record)


def records_to_list(records: List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Convert a list of database records to a list of dictionaries."""
    return [record_to_dict(record) for record in records]


def parse_affected_count(status: Optional[str]) -> int:
    """
    Parse the row count out of a PostgreSQL command status tag.

    Args:
        status: Status string returned by ``Connection.execute``,
            e.g. "DELETE 3" or "INSERT 0 1"

    Returns:
        Number of affected rows, 0 when the tag carries no count
    """
    if not status:
        return 0

    last = status.rsplit(" ", 1)[-1]
    return int(last) if last.isdigit() else 0


def build_ssl_context(ca_b64: Optional[str]) -> Optional[ssl.SSLContext]:
    """
    Build a TLS context from a base64-encoded PEM CA bundle.

    Args:
        ca_b64: Base64 of the PEM file contents, or None/empty for plain TCP

    Returns:
        SSLContext trusting the given CA, or None when no CA was configured

    Raises:
        ValueError: If the value is not valid base64 or not a PEM bundle
    """
    if not ca_b64:
        return None

    try:
        pem = base64.b64decode(ca_b64, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ValueError(f"Invalid base64 CA bundle: {e}") from None

    try:
        return ssl.create_default_context(cadata=pem)
    except ssl.SSLError as e:
        raise ValueError(f"Invalid CA bundle: {e}") from None


def store_failure(
    error: DatabaseError,
    operation: str,
    context: Optional[Dict[str, Any]] = None,
) -> Failure:
    """
    Log a store error and convert it to a Failure result.

    Args:
        error: Exception raised by the store adapter
        operation: Name of the service operation that failed
        context: Identifiers describing what was being done

    Returns:
        ConnectionError (503) or StatementError (500) failure
    """
    failure_context = dict(context or {})
    if error.store:
        failure_context["store"] = error.store

    log_event(
        f"{operation}_error",
        {
            **failure_context,
            "error": str(error),
            "error_type": type(error).__name__,
        },
        level=logging.ERROR,
    )

    if isinstance(error, StoreConnectionError):
        return connection_error(
            f"Store unavailable during {operation}: {error}", context=failure_context
        )
    return statement_error(
        f"Store rejected {operation}: {error}", context=failure_context
    )
