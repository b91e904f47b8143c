"""Response utilities and error codes for the HTTP bridge.

Routes return data through wrap_response() and signal errors through
raise_api_error(); the exception handlers in app.py render ErrorEnvelope.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException

from comment_dashboard.api.models import MetaModel

API_VERSION = "1.0"

# Error Code Constants
VALIDATION_ERROR = "VALIDATION_ERROR"  # Malformed request body (422)
NOT_FOUND = "NOT_FOUND"  # Unknown route (404)
SESSION_UNAVAILABLE = "SESSION_UNAVAILABLE"  # No plugin session attached (503)
INTERNAL_ERROR = "INTERNAL_ERROR"  # Unhandled failure (500)

ERROR_STATUS_CODES: Dict[str, int] = {
    VALIDATION_ERROR: 422,
    NOT_FOUND: 404,
    SESSION_UNAVAILABLE: 503,
    INTERNAL_ERROR: 500,
}


def wrap_response(data: Any, total: Optional[int] = None) -> Dict[str, Any]:
    """Wrap data in the standard envelope.

    Returns:
        {"data": <data>, "meta": {"timestamp": ..., "version": "1.0", "total": ...}}
    """
    meta = MetaModel(
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=API_VERSION,
        total=total,
    )
    return {
        "data": data,
        "meta": meta.model_dump(exclude_none=True),
    }


def raise_api_error(code: str, message: str, status_code: Optional[int] = None) -> None:
    """Raise an HTTPException that app.py renders as an ErrorEnvelope.

    Example:
        raise_api_error(SESSION_UNAVAILABLE, "Plugin session is not running")
    """
    if status_code is None:
        status_code = ERROR_STATUS_CODES.get(code, 500)

    raise HTTPException(
        status_code=status_code,
        detail={"code": code, "message": message},
    )
