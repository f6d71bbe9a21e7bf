"""
Shared helpers for identifiers and timestamps.

All persisted timestamps are naive UTC datetimes.
"""

from __future__ import annotations

import os
import threading
import time
import calendar
import uuid
from datetime import datetime, timezone

_SNOW_EPOCH_MS = 1_700_000_000_000
_snow_lock = threading.Lock()
_snow_state = {"last_ms": -1, "sequence": 0}
_WORKER_ID = os.getpid() & 0x3FF


def utc_now() -> datetime:
    """Get current UTC datetime as naive datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_uuid() -> str:
    return str(uuid.uuid4())


def get_snow_id() -> str:
    """Return a snowflake-style numeric id: 41 bits of ms, 10 bits worker, 12 bits sequence."""
    with _snow_lock:
        now_ms = int(time.time() * 1000)
        if now_ms == _snow_state["last_ms"]:
            _snow_state["sequence"] = (_snow_state["sequence"] + 1) & 0xFFF
            if _snow_state["sequence"] == 0:
                while now_ms <= _snow_state["last_ms"]:
                    now_ms = int(time.time() * 1000)
        else:
            _snow_state["sequence"] = 0
        _snow_state["last_ms"] = now_ms
        value = ((now_ms - _SNOW_EPOCH_MS) << 22) | (_WORKER_ID << 12) | _snow_state["sequence"]
    return str(value)


def add_months(value: datetime, months: int) -> datetime:
    """Shift by calendar months, clamping the day to the end of a shorter month."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 date or datetime into naive UTC.

    Raises:
        ValueError: If ``value`` is not a valid ISO date.
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
