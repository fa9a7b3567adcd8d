"""
Request dependencies shared by the API routers.
"""
from fastapi import Header
from typing import Optional

from ..exceptions import AuthenticationError


async def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """Caller identity from the X-User-Id header."""
    if not x_user_id or not x_user_id.strip():
        raise AuthenticationError("X-User-Id header is required")
    return x_user_id.strip()
