# Uniform API response envelope

from datetime import datetime, timezone
from typing import Any, Dict


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


def create_success_response(
    data: Any = None,
    message: str = "OK"
) -> Dict[str, Any]:
    """
    Build a success envelope.

    Args:
        data: payload
        message: human-readable message

    Returns:
        {"success": True, "data", "message", "timestamp"}
    """
    return {
        "success": True,
        "data": data,
        "message": message,
        "timestamp": _timestamp()
    }


def create_error_response(
    error: str,
    data: Any = None
) -> Dict[str, Any]:
    """
    Build an error envelope.

    Args:
        error: error description
        data: optional detail, e.g. the offending field

    Returns:
        {"success": False, "error", "data", "timestamp"}
    """
    return {
        "success": False,
        "error": error,
        "data": data,
        "timestamp": _timestamp()
    }
