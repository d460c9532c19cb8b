"""SQLite request logging for the attendance API."""

import sqlite3
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from core.database import get_connection

REQUEST_COLUMNS = (
    "request_id",
    "timestamp",
    "endpoint",
    "method",
    "client_ip",
    "payload_size_bytes",
    "status_code",
    "error_code",
    "error_message",
    "processing_time_ms",
    "events_parsed",
    "records_saved",
)


@dataclass
class RequestLog:
    """One API call, written to api_requests plus api_request_details."""

    endpoint: str
    method: str = "POST"
    client_ip: str | None = None
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    payload_size_bytes: int | None = None
    status_code: int = 0
    error_code: str | None = None
    error_message: str | None = None
    processing_time_ms: int = 0
    events_parsed: int | None = None
    records_saved: int | None = None
    details: list[tuple[str, str]] = field(default_factory=list)  # (type, message)
    started: float = field(default_factory=time.monotonic, repr=False)

    def add_details(self, detail_type: str, messages: list[str]) -> None:
        """detail_type is 'validation_error' or 'warning'."""
        self.details.extend((detail_type, message) for message in messages)

    def finish(
        self, status_code: int, error_code: str | None = None, error_message: str | None = None
    ) -> None:
        self.status_code = status_code
        self.error_code = error_code
        self.error_message = error_message
        self.processing_time_ms = int((time.monotonic() - self.started) * 1000)


def log_request(log: RequestLog, conn: sqlite3.Connection | None = None) -> None:
    """
    Write a request log.

    Uses the given connection (the request's own) or opens one on DB_PATH.
    """
    own_connection = conn is None
    if own_connection:
        conn = get_connection()
    try:
        cursor = conn.cursor()
        cursor.execute(
            f"INSERT INTO api_requests ({', '.join(REQUEST_COLUMNS)}) "
            f"VALUES ({', '.join('?' * len(REQUEST_COLUMNS))})",
            tuple(getattr(log, column) for column in REQUEST_COLUMNS),
        )
        cursor.executemany(
            "INSERT INTO api_request_details (request_id, detail_type, message) VALUES (?, ?, ?)",
            [(log.request_id, detail_type, message) for detail_type, message in log.details],
        )
        conn.commit()
    finally:
        if own_connection:
            conn.close()
