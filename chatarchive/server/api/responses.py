"""
Response helpers shared by the route modules.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any
from urllib.parse import quote

from fastapi.responses import JSONResponse

from ...utils.result import Failure


def serialize_for_json(obj: Any) -> Any:
    """
    Recursively convert objects to JSON-serializable types.

    Handles:
    - datetime -> ISO format str
    - Decimal -> int or float
    - bytes -> dropped to None (bytes are only served by the file route)
    - dict -> recursively serialize values
    - list -> recursively serialize items
    """
    if isinstance(obj, datetime):
        return obj.isoformat()
    elif isinstance(obj, Decimal):
        return int(obj) if obj == obj.to_integral_value() else float(obj)
    elif isinstance(obj, (bytes, bytearray, memoryview)):
        return None
    elif isinstance(obj, dict):
        return {k: serialize_for_json(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [serialize_for_json(item) for item in obj]
    else:
        return obj


def failure_response(result: Failure) -> JSONResponse:
    """Render a service Failure as ``{ok: false, error, error_type[, context]}``."""
    return JSONResponse(
        content=serialize_for_json(result.to_dict()),
        status_code=result.status_code,
    )


def content_disposition(filename: str, disposition: str = "inline") -> str:
    """
    Build a Content-Disposition header value for a stored filename.

    Quotes and backslashes are escaped. Names outside latin-1 get an ASCII
    fallback plus an RFC 5987 ``filename*`` parameter.
    """
    escaped = filename.replace("\\", "\\\\").replace('"', '\\"')
    try:
        escaped.encode("latin-1")
    except UnicodeEncodeError:
        fallback = escaped.encode("ascii", "replace").decode("ascii")
        return (
            f'{disposition}; filename="{fallback}"; '
            f"filename*=UTF-8''{quote(filename, safe='')}"
        )
    return f'{disposition}; filename="{escaped}"'
