# =========================
# file: core/sun.py
# =========================
from __future__ import annotations

import logging
import math
from datetime import date, datetime
from typing import Optional, Union

from core.config import GOLDEN_HOUR_MINUTES, VENUE_LATITUDE
from core.models import SunsetWindow
from core.timeutils import add_minutes, from_minutes

logger = logging.getLogger(__name__)

DateLike = Union[date, str, None]


def _parse_date_yyyy_mm_dd(raw: DateLike) -> Optional[date]:
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    raw = raw.strip()
    if not raw:
        return None
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError:
        logger.warning("Ignoring unparseable wedding date %r", raw)
        return None


def _is_dst(on_date: date) -> bool:
    # Rough window: March through November
    return 3 <= on_date.month <= 11


def estimate_sunset(on_date: DateLike, latitude: float = VENUE_LATITUDE) -> Optional[str]:
    """
    Approximate local sunset ('HH:MM', 24h) for the venue on a given date.

    Simple declination model:
      - declination = 23.45 * sin(2π/365 * (day_of_year - 81))
      - hour angle  = acos(-tan(lat) * tan(declination))
      - sunset      = 12:00 + hour angle / 15°, +1h inside the DST window

    Good to a few minutes, which is plenty for planning portraits.
    Returns None when there is no usable date.
    """
    d = _parse_date_yyyy_mm_dd(on_date)
    if d is None:
        return None

    day_of_year = d.timetuple().tm_yday
    declination = 23.45 * math.sin((2 * math.pi / 365) * (day_of_year - 81))

    cos_h = -math.tan(math.radians(latitude)) * math.tan(math.radians(declination))
    cos_h = max(-1.0, min(1.0, cos_h))
    hour_angle = math.degrees(math.acos(cos_h))

    sunset_hour = 12 + hour_angle / 15
    if _is_dst(d):
        sunset_hour += 1

    return from_minutes(round(sunset_hour * 60))


def sunset_window(sunset: Optional[str], minutes: int = GOLDEN_HOUR_MINUTES) -> Optional[SunsetWindow]:
    if not sunset:
        return None
    return SunsetWindow(start=add_minutes(sunset, -minutes), end=sunset)
