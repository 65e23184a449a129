# =========================
# file: tools/timeline_store.py
# =========================
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from core.config import API_URL, REQUEST_TIMEOUT
from core.models import Settings, TimelineDocument
from tools.schedule import document_from_record, new_document

logger = logging.getLogger(__name__)


class TimelineStoreError(RuntimeError):
    pass


class TimelineStore:
    """
    Where a wedding's timeline document lives between sessions.
    """

    def load(self, event_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def save(self, event_id: str, doc: TimelineDocument) -> None:
        raise NotImplementedError


class MemoryTimelineStore(TimelineStore):
    def __init__(self) -> None:
        self._records: Dict[str, Dict[str, Any]] = {}

    def load(self, event_id: str) -> Optional[Dict[str, Any]]:
        return self._records.get(event_id)

    def save(self, event_id: str, doc: TimelineDocument) -> None:
        self._records[event_id] = doc.to_record()
        logger.info("Saved timeline for %s (in memory)", event_id)


class HttpTimelineStore(TimelineStore):
    """
    Talks to the planning portal API:
      GET  /api/timeline/<id>  -> {"timeline": {...} | null}
      POST /api/timeline       -> {"timeline": {...}}
    """

    def __init__(self, base_url: str, session: Optional[requests.Session] = None, timeout: float = REQUEST_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def load(self, event_id: str) -> Optional[Dict[str, Any]]:
        url = f"{self.base_url}/api/timeline/{event_id}"
        try:
            r = self.session.get(url, timeout=self.timeout)
            if r.status_code == 404:
                return None
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as e:
            raise TimelineStoreError(f"Couldn't load timeline {event_id}: {e}") from e

        return (data or {}).get("timeline") or None

    def save(self, event_id: str, doc: TimelineDocument) -> None:
        record = doc.to_record()
        payload = {
            "weddingId": event_id,
            "timelineData": record["timeline_data"],
            "ceremonyStart": record["ceremony_start"],
            "receptionEnd": record["reception_end"],
            "notes": record["notes"],
        }
        try:
            r = self.session.post(f"{self.base_url}/api/timeline", json=payload, timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as e:
            raise TimelineStoreError(f"Couldn't save timeline {event_id}: {e}") from e
        logger.info("Saved timeline for %s", event_id)


def make_store(base_url: str = API_URL) -> TimelineStore:
    if base_url:
        return HttpTimelineStore(base_url)
    logger.info("TIMELINE_API_URL not set; keeping timelines in memory")
    return MemoryTimelineStore()


def open_document(
    store: TimelineStore,
    event_id: str,
    wedding_date: Optional[str] = None,
    defaults: Optional[Settings] = None,
) -> TimelineDocument:
    """
    Load a saved timeline, or start a fresh one when there is nothing saved yet
    (or the store can't be reached).
    """
    try:
        record = store.load(event_id)
    except TimelineStoreError as e:
        logger.warning("%s; starting from defaults", e)
        record = None

    if not record:
        logger.info("No saved timeline for %s; initializing", event_id)
        return new_document(defaults, wedding_date)

    return document_from_record(record, wedding_date=wedding_date, base=defaults)
