"""
Chat transcript parsing.

A pasted block looks like:

    6 Mar, 2025
    John Doe, 9:05 AM?
    CI RO
    John Doe, 6:10 PM?
    CO RO
    Jane Roe, 9:40 AM?
    running late, traffic on the bridge

The first line is the date shared by every entry. After it, a header line
(``Name, time``) followed by a ``CI``/``CO`` detail line is an attendance
event. Everything else is treated as a chat message.
"""

import re
from datetime import datetime

from core.config import (
    CHECK_IN_MARKER,
    CHECK_OUT_MARKER,
    STORAGE_DATE_FORMAT,
    TRANSCRIPT_DATE_FORMATS,
)
from models.attendance import OtherMessage, ParseResult, RawEvent

_CLOCK_TIME_RE = re.compile(r"\d{1,2}:\d{2}(?::\d{2})?(?:\s*[AaPp][Mm])?")


def parse_common_date(line: str) -> tuple[str, bool]:
    """
    Normalize the block's first line to YYYY-MM-DD.

    Returns (date_string, parsed). When no known format matches the raw
    line is returned unchanged with parsed=False.
    """
    raw = line.strip()
    for fmt in TRANSCRIPT_DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).strftime(STORAGE_DATE_FORMAT), True
        except ValueError:
            continue
    return raw, False


def is_detail_line(line: str) -> bool:
    """True if the line's first token is a CI/CO marker."""
    tokens = line.split()
    return bool(tokens) and tokens[0] in (CHECK_IN_MARKER, CHECK_OUT_MARKER)


def parse_header(line: str) -> tuple[str, str]:
    """
    Split 'Name, <time>?' into (name, time).

    Chat clients render the time part either bare ('9:05 AM') or with a
    leading day label ('Thu 9:05 AM'), so the clock time is searched for
    rather than taken by position. Without a recognizable clock time the
    second token is used, or the whole remainder if it is a single token.
    """
    name, _, remainder = line.partition(",")
    remainder = remainder.strip().rstrip("?").strip()

    match = _CLOCK_TIME_RE.search(remainder)
    if match:
        return name.strip(), match.group(0)

    parts = remainder.split()
    time_str = parts[1] if len(parts) > 1 else remainder
    return name.strip(), time_str


def parse_detail(line: str) -> tuple[str, str]:
    """Split 'CI <location>' into (marker, location)."""
    parts = line.split()
    marker = parts[0] if parts else ""
    location = parts[1] if len(parts) > 1 else ""
    return marker, location


def is_attendance_chatter(body: str) -> bool:
    """
    Decide whether a non-attendance message is worth keeping.

    Bodies containing an uppercase 'C' are kept, the rest dropped.
    """
    return "C" in body


def close_open_event(
    events: list[RawEvent], employee_name: str, on_date: str, out_time: str, location: str
) -> bool:
    """Close the most recent open check-in for employee/date. Returns False if none."""
    for event in reversed(events):
        if event.employee_name == employee_name and event.date == on_date and event.is_open:
            event.out_time = out_time
            event.location_code = location
            return True
    return False


def parse_transcript(text: str) -> ParseResult:
    """
    Parse a pasted transcript into raw events and other messages.

    Never raises on malformed content: an unknown date header is kept
    literally and a check-out with no open check-in becomes an orphan
    event carrying only out_time.
    """
    if not isinstance(text, str):
        raise TypeError(f"Transcript must be a string, got {type(text).__name__}")

    lines = [line.strip() for line in text.splitlines()]
    lines = [line for line in lines if line]

    if not lines:
        return ParseResult(date="", date_parsed=False)

    common_date, date_parsed = parse_common_date(lines[0])
    result = ParseResult(date=common_date, date_parsed=date_parsed)

    i = 1
    while i < len(lines):
        if i < len(lines) - 1 and is_detail_line(lines[i + 1]):
            employee_name, time_str = parse_header(lines[i])
            marker, location = parse_detail(lines[i + 1])
            timestamp = f"{common_date} {time_str}"
            i += 2

            if marker == CHECK_IN_MARKER:
                result.events.append(
                    RawEvent(
                        employee_name=employee_name,
                        kind=CHECK_IN_MARKER,
                        date=common_date,
                        in_time=timestamp,
                        location_code=location,
                    )
                )
            elif not close_open_event(
                result.events, employee_name, common_date, timestamp, location
            ):
                result.events.append(
                    RawEvent(
                        employee_name=employee_name,
                        kind=CHECK_OUT_MARKER,
                        date=common_date,
                        out_time=timestamp,
                        location_code=location,
                    )
                )
            continue

        # Chat message: 'Sender, time' + body line, or a single bare line
        line = lines[i]
        if "," in line and i < len(lines) - 1:
            sender, _, time_part = line.partition(",")
            message = OtherMessage(
                sender_name=sender.strip(),
                text=lines[i + 1],
                time=time_part.strip().rstrip("?").strip(),
                date=common_date,
            )
            i += 2
        elif "," in line:
            sender, _, time_part = line.partition(",")
            message = OtherMessage(
                sender_name=sender.strip(),
                text="",
                time=time_part.strip().rstrip("?").strip(),
                date=common_date,
            )
            i += 1
        else:
            message = OtherMessage(sender_name="", text=line, time="", date=common_date)
            i += 1

        if is_attendance_chatter(message.text):
            result.messages.append(message)

    return result
