"""
Result type for explicit error handling.

Every service operation returns either a Success carrying its value or a
Failure carrying an error message, a taxonomy name and an HTTP status hint.
Routes turn a Failure into an error response without inspecting exceptions.

Example:
    >>> result = Success({"id": 7})
    >>> result.unwrap()
    {'id': 7}

    >>> result = not_found_error("Message '7' not found")
    >>> result.to_dict()
    {'ok': False, 'error': "Message '7' not found", 'error_type': 'NotFound'}
"""

from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass
class Success(Generic[T]):
    """
    Represents a successful operation with a value.

    Routes shape their own success bodies, so only the value is carried.
    """

    value: T

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the success value."""
        return self.value

    def __bool__(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Success({self.value})"


@dataclass
class Failure(Generic[E]):
    """
    Represents a failed operation with an error.

    Attributes:
        error: The error message
        error_type: Taxonomy name (e.g., "NotFound", "StatementError")
        context: Additional context about the error
        recoverable: Whether the caller may try again later
        status_code: HTTP status code hint for API responses
    """

    error: E
    error_type: str = "InternalError"
    context: Optional[Dict[str, Any]] = None
    recoverable: bool = False
    status_code: int = 500

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def unwrap(self) -> Any:
        """
        Attempt to get the value (will raise).

        Raises:
            RuntimeError: Always, since this is a Failure
        """
        raise RuntimeError(f"Called unwrap on Failure: {self.error}")

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary with ok=False and error fields
        """
        result = {
            "ok": False,
            "error": str(self.error),
            "error_type": self.error_type,
        }
        if self.context:
            result["context"] = self.context
        if self.recoverable:
            result["recoverable"] = True
        return result

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Failure({self.error_type}: {self.error})"


Result = Union[Success[T], Failure[E]]


class ErrorType:
    """Error taxonomy with HTTP status codes and recoverability."""

    VALIDATION_ERROR = ("ValidationError", 400, False)
    NOT_FOUND_ERROR = ("NotFound", 404, False)
    PAYLOAD_TOO_LARGE = ("PayloadTooLarge", 413, False)
    CONNECTION_ERROR = ("ConnectionError", 503, True)
    STATEMENT_ERROR = ("StatementError", 500, False)
    INTERNAL_ERROR = ("InternalError", 500, False)


def _failure(
    kind: tuple, message: str, context: Optional[Dict[str, Any]] = None
) -> Failure:
    error_type, status_code, recoverable = kind
    return Failure(
        error=message,
        error_type=error_type,
        context=context,
        recoverable=recoverable,
        status_code=status_code,
    )


def validation_error(message: str, context: Optional[Dict[str, Any]] = None) -> Failure:
    """Create a validation error result."""
    return _failure(ErrorType.VALIDATION_ERROR, message, context)


def not_found_error(message: str, context: Optional[Dict[str, Any]] = None) -> Failure:
    """Create a not found error result."""
    return _failure(ErrorType.NOT_FOUND_ERROR, message, context)


def payload_too_large(message: str, context: Optional[Dict[str, Any]] = None) -> Failure:
    """Create a payload too large error result."""
    return _failure(ErrorType.PAYLOAD_TOO_LARGE, message, context)


def connection_error(message: str, context: Optional[Dict[str, Any]] = None) -> Failure:
    """Create a store connection error result."""
    return _failure(ErrorType.CONNECTION_ERROR, message, context)


def statement_error(message: str, context: Optional[Dict[str, Any]] = None) -> Failure:
    """Create a statement error result."""
    return _failure(ErrorType.STATEMENT_ERROR, message, context)


def internal_error(message: str, context: Optional[Dict[str, Any]] = None) -> Failure:
    """Create an internal error result."""
    return _failure(ErrorType.INTERNAL_ERROR, message, context)
