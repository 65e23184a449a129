# =========================
# file: core/timeutils.py
# =========================
from __future__ import annotations
from typing import Optional

MINUTES_PER_DAY = 24 * 60


def to_minutes(hhmm: Optional[str]) -> int:
    """
    '16:05' -> 965. Blank or malformed input counts as midnight.
    """
    raw = (hhmm or "").strip()
    if not raw or ":" not in raw:
        return 0
    hours, _, mins = raw.partition(":")
    try:
        return int(hours) * 60 + int(mins[:2])
    except ValueError:
        return 0


def from_minutes(minutes: int) -> str:
    """
    965 -> '16:05'. Wraps around midnight in both directions.
    """
    h, m = divmod(int(minutes) % MINUTES_PER_DAY, 60)
    return f"{h:02d}:{m:02d}"


def add_minutes(hhmm: str, minutes: int) -> str:
    return from_minutes(to_minutes(hhmm) + int(minutes))


def safe_fmt_time(hhmm: Optional[str]) -> str:
    if not hhmm:
        return "—"
    h, m = divmod(to_minutes(hhmm), 60)
    ampm = "PM" if h >= 12 else "AM"
    return f"{h % 12 or 12}:{m:02d} {ampm}"


def fmt_minutes_hm(minutes: int) -> str:
    """
    Render minutes as '1h 30m' / '2h' / '45 min'; blank for zero.
    """
    mins = int(minutes or 0)
    if mins <= 0:
        return ""
    if mins < 60:
        return f"{mins} min"
    hours, rem = divmod(mins, 60)
    return f"{hours}h {rem}m" if rem else f"{hours}h"
