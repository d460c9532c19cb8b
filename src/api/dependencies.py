"""FastAPI dependencies for authentication and the per-request database connection."""

import secrets
import sqlite3
from collections.abc import Iterator

from fastapi import Header, HTTPException, status

from api.models.responses import ErrorCodes
from core.config import ATTENDANCE_API_KEY
from core.database import get_connection


async def verify_api_key(x_api_key: str | None = Header(default=None, alias="X-API-Key")) -> str:
    """
    Verify the X-API-Key header against ATTENDANCE_API_KEY.

    Raises:
        HTTPException: 500 if no key is configured, 401 if the key is missing or wrong
    """
    if not ATTENDANCE_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "API key not configured on server",
                "code": ErrorCodes.INTERNAL_ERROR,
                "details": [],
            },
        )

    if not x_api_key or not secrets.compare_digest(x_api_key, ATTENDANCE_API_KEY):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "Invalid or missing API key",
                "code": ErrorCodes.UNAUTHORIZED,
                "details": [],
            },
        )

    return x_api_key


def get_db() -> Iterator[sqlite3.Connection]:
    """Yield a connection to DB_PATH, closed after the request."""
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()
