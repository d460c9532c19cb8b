"""Health check endpoint."""

import sqlite3
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from api.models.responses import HealthResponse
from core.config import API_VERSION, DB_PATH
from core.database import get_connection

router = APIRouter()


def database_status() -> str | None:
    """None when the attendance schema is readable, else what is wrong."""
    if not DB_PATH.exists():
        return "Attendance database not found (run scripts/init_db.py)"

    conn = get_connection(DB_PATH)
    try:
        row = conn.execute(
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'attendance'"
        ).fetchone()
    except sqlite3.Error as e:
        return f"Attendance database unreadable: {e}"
    finally:
        conn.close()

    if row is None:
        return "Attendance tables missing (run scripts/init_db.py)"
    return None


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint for monitoring.

    Returns 200 if the attendance database is usable, 503 otherwise.
    """
    error = database_status()
    response = HealthResponse(
        status="unhealthy" if error else "healthy",
        version=API_VERSION,
        database_available=error is None,
        timestamp=datetime.now(timezone.utc).isoformat(),
        error=error,
    )
    if error:
        return JSONResponse(status_code=503, content=response.model_dump())
    return response
