# =========================
# file: tools/schedule.py
# =========================
from __future__ import annotations
from dataclasses import replace
import logging
import uuid
from typing import Any, Mapping, Optional, Tuple

from core.catalog import ALL_ACTIVITIES, get_activity
from core.models import (
    AdHocEntry,
    ScheduleEntry,
    ScheduleState,
    Settings,
    TimelineDocument,
    settings_from_record,
)
from core.sun import estimate_sunset
from core.timeutils import add_minutes
from tools.timeline_builder import recompute

logger = logging.getLogger(__name__)


def initialize_state() -> ScheduleState:
    return {
        a.id: ScheduleEntry(included=a.always_included, duration=a.default_duration)
        for a in ALL_ACTIVITIES
    }


def refresh(doc: TimelineDocument) -> TimelineDocument:
    """
    Run the recompute over the whole schedule and hand back the new document.
    """
    sunset = estimate_sunset(doc.wedding_date)
    return replace(doc, entries=recompute(doc.entries, doc.settings, sunset))


def new_document(settings: Optional[Settings] = None, wedding_date: Optional[str] = None) -> TimelineDocument:
    doc = TimelineDocument(settings=settings or Settings(), entries=initialize_state(), wedding_date=wedding_date)
    return refresh(doc)


def document_from_record(record: Mapping[str, Any], wedding_date: Optional[str] = None,
                         base: Optional[Settings] = None) -> TimelineDocument:
    """
    Rebuild a document from a stored timeline row: saved entries are laid over a
    freshly initialized schedule (unknown ids are dropped) and times recomputed.
    """
    settings = settings_from_record(record, base)
    data = record.get("timeline_data") or {}
    if not isinstance(data, Mapping):
        data = {}

    entries = initialize_state()
    for key, raw in (data.get("events") or {}).items():
        if key in entries and isinstance(raw, Mapping):
            entries[key] = entries[key].merged(raw)
        elif key not in entries:
            logger.debug("Dropping unknown saved activity %r", key)

    doc = TimelineDocument(
        settings=settings,
        entries=entries,
        shuttle_arrivals=tuple(AdHocEntry.from_dict("arrival", r) for r in data.get("shuttleArrivals") or []),
        shuttle_departures=tuple(AdHocEntry.from_dict("departure", r) for r in data.get("shuttleDepartures") or []),
        custom_entries=tuple(AdHocEntry.from_dict("custom", r) for r in data.get("customEvents") or []),
        notes=record.get("notes") or "",
        wedding_date=wedding_date or record.get("wedding_date"),
    )
    return refresh(doc)


# ---------- Schedule edits ----------
def _update_entry(doc: TimelineDocument, activity_id: str, **changes) -> TimelineDocument:
    get_activity(activity_id)
    entries = dict(doc.entries)
    entries[activity_id] = replace(entries[activity_id], **changes)
    return refresh(replace(doc, entries=entries))


def toggle_activity(doc: TimelineDocument, activity_id: str) -> TimelineDocument:
    return _update_entry(doc, activity_id, included=not doc.entries[activity_id].included)


def set_included(doc: TimelineDocument, activity_id: str, included: bool) -> TimelineDocument:
    return _update_entry(doc, activity_id, included=bool(included))


def set_duration(doc: TimelineDocument, activity_id: str, minutes: int) -> TimelineDocument:
    return _update_entry(doc, activity_id, duration=max(0, int(minutes)), manual_duration=True)


def set_time(doc: TimelineDocument, activity_id: str, hhmm: str) -> TimelineDocument:
    return _update_entry(doc, activity_id, time=hhmm, manual_time=True)


def set_notes(doc: TimelineDocument, activity_id: str, notes: str) -> TimelineDocument:
    return _update_entry(doc, activity_id, notes=notes)


def reset_to_auto_times(doc: TimelineDocument) -> TimelineDocument:
    entries = {k: replace(e, manual_time=False) for k, e in doc.entries.items()}
    return refresh(replace(doc, entries=entries))


# ---------- Settings ----------
def update_settings(doc: TimelineDocument, **changes) -> TimelineDocument:
    return refresh(replace(doc, settings=replace(doc.settings, **changes)))


def set_concurrent(doc: TimelineDocument, activity_id: str, concurrent: bool) -> TimelineDocument:
    if not get_activity(activity_id).can_be_concurrent:
        raise ValueError(f"{activity_id} can't happen alongside other prep")
    flags = dict(doc.settings.concurrent)
    flags[activity_id] = bool(concurrent)
    return update_settings(doc, concurrent=flags)


def set_ritual_placement(doc: TimelineDocument, activity_id: str, placement: str) -> TimelineDocument:
    if not get_activity(activity_id).can_choose_timing:
        raise ValueError(f"{activity_id} has a fixed place in the evening")
    if placement not in ("before", "after"):
        raise ValueError(f"Placement must be 'before' or 'after', got {placement!r}")
    overrides = dict(doc.settings.ritual_overrides)
    if placement == doc.settings.ritual_placement:
        overrides.pop(activity_id, None)
    else:
        overrides[activity_id] = placement
    return update_settings(doc, ritual_overrides=overrides)


def set_wedding_date(doc: TimelineDocument, wedding_date: Optional[str]) -> TimelineDocument:
    return refresh(replace(doc, wedding_date=(wedding_date or "").strip() or None))


def set_document_notes(doc: TimelineDocument, notes: str) -> TimelineDocument:
    return replace(doc, notes=notes)


# ---------- Ad hoc entries (never computed) ----------
def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:10]}"


def add_shuttle_arrival(doc: TimelineDocument, time: Optional[str] = None, notes: str = "") -> TimelineDocument:
    entry = AdHocEntry(
        id=_new_id("arrival"),
        kind="arrival",
        time=time or add_minutes(doc.settings.ceremony_time, -30),
        notes=notes,
    )
    return replace(doc, shuttle_arrivals=doc.shuttle_arrivals + (entry,))


def add_shuttle_departure(doc: TimelineDocument, time: Optional[str] = None, notes: str = "") -> TimelineDocument:
    entry = AdHocEntry(id=_new_id("departure"), kind="departure", time=time or doc.settings.end_time, notes=notes)
    return replace(doc, shuttle_departures=doc.shuttle_departures + (entry,))


def add_custom_entry(doc: TimelineDocument, name: str, time: str = "", duration: int = 15,
                     notes: str = "") -> TimelineDocument:
    if not (name or "").strip():
        raise ValueError("Custom entries need a name")
    entry = AdHocEntry(
        id=_new_id("custom"),
        kind="custom",
        time=time,
        name=name.strip(),
        notes=notes,
        duration=max(0, int(duration)),
    )
    return replace(doc, custom_entries=doc.custom_entries + (entry,))


def _ad_hoc_field(kind: str) -> str:
    return {
        "arrival": "shuttle_arrivals",
        "departure": "shuttle_departures",
        "custom": "custom_entries",
    }[kind]


def _find_ad_hoc(doc: TimelineDocument, entry_id: str) -> Tuple[str, AdHocEntry]:
    for entry in doc.ad_hoc():
        if entry.id == entry_id:
            return _ad_hoc_field(entry.kind), entry
    raise KeyError(f"No ad hoc entry with id {entry_id}")


def update_ad_hoc(doc: TimelineDocument, entry_id: str, **changes) -> TimelineDocument:
    field_name, entry = _find_ad_hoc(doc, entry_id)
    updated = replace(entry, **changes)
    items = tuple(updated if e.id == entry_id else e for e in getattr(doc, field_name))
    return replace(doc, **{field_name: items})


def remove_ad_hoc(doc: TimelineDocument, entry_id: str) -> TimelineDocument:
    field_name, _ = _find_ad_hoc(doc, entry_id)
    items = tuple(e for e in getattr(doc, field_name) if e.id != entry_id)
    return replace(doc, **{field_name: items})
