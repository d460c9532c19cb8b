#!/usr/bin/env python3
"""
Ingest a pasted chat transcript of CI/CO messages into the attendance database.

Usage:
    uv run python src/scripts/ingest_transcript.py transcripts/2025-03-06.txt
    uv run python src/scripts/ingest_transcript.py transcripts/2025-03-06.txt --dry-run
"""

import argparse
import sys
import traceback
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import DB_PATH
from core.database import get_connection
from services.ingestion import ingest_transcript, preview_transcript


def print_preview(path: Path):
    """Print what a transcript would produce without storing it."""
    result = preview_transcript(path.read_text(encoding="utf-8"))

    print(f"Date: {result.date or '(none)'}")
    print(f"\nRecords ({len(result.records)}):")
    for record in result.records:
        print(
            f"  {record.employee_name:<24} in={record.in_time or '-':<20} "
            f"out={record.out_time or '-':<20} hours={record.work_hours:5.2f} "
            f"loc={record.location_code or '-'}"
        )

    print(f"\nOther messages kept: {len(result.messages)}")
    for message in result.messages:
        print(f"  {message.sender_name or '?'} [{message.time}]: {message.text}")

    for warning in result.warnings:
        print(f"Warning: {warning}")


def main(path: Path, dry_run: bool = False):
    """Main entry point."""
    if not path.exists():
        raise FileNotFoundError(f"Transcript not found: {path}")

    if dry_run:
        print_preview(path)
        return

    conn = get_connection(DB_PATH)
    try:
        ingest_transcript(conn, path.read_text(encoding="utf-8"))
    except Exception as e:
        print(f"\nError: {e}")
        traceback.print_exc()
        raise
    finally:
        conn.close()

    print("\nDone!")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Ingest a CI/CO chat transcript")
    parser.add_argument("transcript", type=Path, help="Text file with the pasted transcript")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse and print records without saving",
    )
    args = parser.parse_args()

    main(args.transcript, args.dry_run)
