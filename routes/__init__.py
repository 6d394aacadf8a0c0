"""
API routers. Every JSON payload is wrapped in the {success, message, data} envelope.
"""

from typing import Any


def respond(data: Any = None, message: str = "Success") -> dict:
    return {"success": True, "message": message, "data": data}
