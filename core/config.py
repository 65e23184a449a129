# =========================
# file: core/config.py
# =========================
from __future__ import annotations
import json
import logging
import os
from pathlib import Path

import dotenv

from core.models import Settings

DEFAULTS_PATH = Path(__file__).resolve().parent.parent / "defaults.json"

# Venue latitude used by the sunset estimate (Rapidan, VA)
VENUE_LATITUDE = 38.4

# Guests arriving + bride tucked away before the ceremony
BASE_LEAD_MINUTES = 45
GOLDEN_HOUR_MINUTES = 20
# Extra photos during cocktail hour start a few minutes in (first look path)
COCKTAIL_PHOTO_OFFSET = 5

# Pick up TIMELINE_* and LOG_LEVEL from a local .env, if there is one
dotenv.load_dotenv()

# Persistence
API_URL = os.getenv("TIMELINE_API_URL", "").rstrip("/")
EVENT_ID = os.getenv("TIMELINE_EVENT_ID", "demo-wedding")
REQUEST_TIMEOUT = float(os.getenv("TIMELINE_REQUEST_TIMEOUT", "12"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def load_defaults() -> dict:
    if DEFAULTS_PATH.exists():
        return json.loads(DEFAULTS_PATH.read_text())
    return {}


def default_settings(defaults: dict | None = None) -> Settings:
    d = load_defaults() if defaults is None else defaults
    s = d.get("settings", {})
    base = Settings()
    return Settings(
        ceremony_time=s.get("ceremony_time", base.ceremony_time),
        end_time=s.get("end_time", base.end_time),
        offsite_ceremony=bool(s.get("offsite_ceremony", base.offsite_ceremony)),
        meal_style=s.get("meal_style", base.meal_style),
        ritual_placement=s.get("ritual_placement", base.ritual_placement),
        first_look=bool(s.get("first_look", base.first_look)),
        buffer_minutes=int(s.get("buffer_minutes", base.buffer_minutes)),
    )
