from typing import Any, Optional


def envelope(data: Any = None, message: Optional[str] = None, count: Optional[int] = None) -> dict:
    body = {"success": True}
    if message is not None:
        body["message"] = message
    if count is not None:
        body["count"] = count
    if data is not None:
        body["data"] = data
    return body


def error_envelope(message: str, stack: Optional[str] = None) -> dict:
    body = {"success": False, "message": message}
    if stack is not None:
        body["stack"] = stack
    return body
