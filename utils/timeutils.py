# utils/timeutils.py
from datetime import datetime, timezone, tzinfo
from typing import Any, Optional
from zoneinfo import ZoneInfo

from utils.settings import TIMEZONE


def local_tz(name: Optional[str] = None) -> tzinfo:
    name = name or TIMEZONE
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def parse_timestamp(value: Any, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """
    Parse a Supabase timestamp ("2026-10-17T09:12:44.123+00:00") into a naive
    datetime in the shop's local time. Returns None when the value can't be read.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed
    return parsed.astimezone(tz or local_tz()).replace(tzinfo=None)


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
