# =========================
# file: tools/timeline_builder.py
# =========================
from __future__ import annotations
from dataclasses import replace
from io import BytesIO
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import pandas as pd

from core.catalog import ACTIVITIES, ALL_ACTIVITIES, CHAINS, condition_met, meal_minutes
from core.config import BASE_LEAD_MINUTES, COCKTAIL_PHOTO_OFFSET, GOLDEN_HOUR_MINUTES
from core.models import (
    AdHocEntry,
    ScheduleEntry,
    ScheduleState,
    Settings,
    SummaryItem,
    TimelineDocument,
)
from core.timeutils import fmt_minutes_hm, from_minutes, safe_fmt_time, to_minutes

logger = logging.getLogger(__name__)

ZONE_NOTES = {
    "safe": "Couple sneaks away during cocktail hour",
    "scheduled": "Photos scheduled around sunset - timeline adjusted",
    "dinner": "During dinner - couple sneaks away while guests eat",
    "dancing": "During open dancing - couple sneaks away from the dance floor",
    "early": "Sunset is before ceremony - consider a later start time",
}


# ---------- Small helpers ----------
def _included(state: Mapping[str, ScheduleEntry], settings: Settings, activity_id: str) -> bool:
    entry = state.get(activity_id)
    if entry is None or not entry.included:
        return False
    return condition_met(ACTIVITIES[activity_id], settings.offsite_ceremony)


def _duration(state: Mapping[str, ScheduleEntry], settings: Settings, activity_id: str) -> int:
    if not _included(state, settings, activity_id):
        return 0
    return max(0, int(state[activity_id].duration))


def _is_concurrent(settings: Settings, activity_id: str) -> bool:
    return ACTIVITIES[activity_id].can_be_concurrent and settings.is_concurrent(activity_id)


def _buffer_allowance(state: Mapping[str, ScheduleEntry], settings: Settings) -> int:
    if _included(state, settings, "buffer-break"):
        return _duration(state, settings, "buffer-break")
    return max(0, int(settings.buffer_minutes))


def _clear_of_window(start: int, minutes: int, window: Optional[Tuple[int, int]]) -> int:
    """
    Start time for a block of `minutes` that must not run through the golden-hour window.
    Blocks that would overlap the window are pushed to start when it ends.
    """
    if window is None:
        return start
    w_start, w_end = window
    if start + minutes <= w_start or start >= w_end:
        return start
    return w_end


def apply_path_durations(state: Mapping[str, ScheduleEntry], settings: Settings) -> ScheduleState:
    """
    Portraits shrink to their cocktail-hour length when there is no first look,
    unless someone picked a duration by hand. Dinner length follows the meal style.
    """
    out: ScheduleState = dict(state)
    for a in ALL_ACTIVITIES:
        entry = out.get(a.id)
        if entry is None or a.cocktail_duration is None or entry.manual_duration:
            continue
        minutes = a.default_duration if settings.first_look else a.cocktail_duration
        if entry.duration != minutes:
            out[a.id] = replace(entry, duration=minutes)

    dinner = out.get("dinner")
    if dinner is not None:
        minutes = meal_minutes(settings.meal_style)
        if dinner.duration != minutes:
            out["dinner"] = replace(dinner, duration=minutes)
    return out


def lead_time_minutes(state: Mapping[str, ScheduleEntry], settings: Settings) -> int:
    """
    Minutes needed between hair & makeup being done and the ceremony.
    """
    state = apply_path_durations(state, settings)
    lead = BASE_LEAD_MINUTES

    if settings.offsite_ceremony:
        lead += _duration(state, settings, "travel-to-church")

    if settings.first_look:
        for aid in CHAINS["portraits-before"] + CHAINS["first-look"]:
            lead += _duration(state, settings, aid)

    for aid in CHAINS["prep"]:
        if not _is_concurrent(settings, aid):
            lead += _duration(state, settings, aid)

    lead += _buffer_allowance(state, settings)
    return lead


def preparation_start(state: Mapping[str, ScheduleEntry], settings: Settings) -> str:
    return from_minutes(to_minutes(settings.ceremony_time) - lead_time_minutes(state, settings))


# ---------- Main recompute ----------
def recompute(state: Mapping[str, ScheduleEntry], settings: Settings, sunset: Optional[str]) -> ScheduleState:
    """
    Fill in every computed time. Returns a new mapping; `state` is left alone.
    Entries with a manual time keep it, but their durations still move the
    running clock of whatever chain they sit in.
    """
    calc = apply_path_durations(state, settings)

    def included(aid: str) -> bool:
        return _included(calc, settings, aid)

    def dur(aid: str) -> int:
        return _duration(calc, settings, aid)

    def place(aid: str, minutes: int) -> None:
        if not included(aid):
            return
        entry = calc[aid]
        if entry.manual_time:
            return
        calc[aid] = replace(entry, time=from_minutes(minutes))

    def run_chain(ids: Iterable[str], t: int, window: Optional[Tuple[int, int]] = None) -> int:
        for aid in ids:
            if not included(aid):
                continue
            start = _clear_of_window(t, dur(aid), window)
            place(aid, start)
            t = start + dur(aid)
        return t

    ceremony = to_minutes(settings.ceremony_time)
    end = to_minutes(settings.end_time)

    # ------------------------
    # PRE-CEREMONY (backward sizing, then forward from hair & makeup)
    # ------------------------
    lead = lead_time_minutes(calc, settings)
    prep_start = ceremony - lead
    logger.debug("lead time %s min, hair & makeup done at %s", lead, from_minutes(prep_start))

    place("hair-makeup-done", prep_start)
    place("buffer-break", prep_start)
    t = prep_start + _buffer_allowance(calc, settings)

    positions: Dict[str, int] = {"hair-makeup-done": prep_start, "buffer-break": prep_start}
    for aid in CHAINS["prep"]:
        positions[aid] = t
        if not included(aid):
            continue
        if _is_concurrent(settings, aid):
            sibling = ACTIVITIES[aid].parallel_with
            place(aid, positions.get(sibling, prep_start))
            continue
        place(aid, t)
        t += dur(aid)

    if settings.first_look:
        t = run_chain(CHAINS["first-look"], t)
        t = run_chain(CHAINS["portraits-before"], t)

    place("hide-bride", ceremony - 30 - dur("hide-bride"))
    place("last-shuttle", ceremony - 15)
    place("travel-to-church", ceremony - 40 - dur("travel-to-church"))
    place("guests-arrive", ceremony - 30)
    place("ceremony-music", ceremony - 15)
    place("ceremony", ceremony)

    # ------------------------
    # POST-CEREMONY
    # ------------------------
    t = run_chain(CHAINS["post-ceremony"], ceremony + dur("ceremony"))
    cocktail_start = t
    place("cocktail-hour", cocktail_start)

    # ------------------------
    # COCKTAIL HOUR & SUNSET
    # ------------------------
    window: Optional[Tuple[int, int]] = None
    if sunset:
        sunset_minutes = to_minutes(sunset)
        window = (sunset_minutes - GOLDEN_HOUR_MINUTES, sunset_minutes)

    if settings.first_look:
        t = run_chain(CHAINS["cocktail-extras"], cocktail_start + COCKTAIL_PHOTO_OFFSET, window)
    else:
        t = run_chain(CHAINS["portraits-cocktail"], cocktail_start, window)
    place("couple-break", t)

    if window is not None:
        place("sunset-photos", window[0])
    elif included("sunset-photos") and not calc["sunset-photos"].manual_time:
        # no date, no sunset: nothing to anchor to
        calc["sunset-photos"] = replace(calc["sunset-photos"], time="")

    # ------------------------
    # RECEPTION
    # ------------------------
    t = run_chain(CHAINS["reception-start"], cocktail_start + dur("cocktail-hour"))

    rituals = [aid for aid in CHAINS["formalities"] if included(aid)]
    before = [aid for aid in rituals if settings.placement_for(aid) == "before"]
    after = [aid for aid in rituals if settings.placement_for(aid) != "before"]

    dinner_start = run_chain(before, t)
    place("dinner", dinner_start)
    dinner_end = dinner_start + dur("dinner")

    dancing_start = run_chain(after, dinner_end)
    place("open-dancing", dancing_start)

    # ------------------------
    # END OF NIGHT (backward from the end anchor)
    # ------------------------
    for aid in CHAINS["from-end"]:
        place(aid, end - (ACTIVITIES[aid].minutes_before_end or 0))

    # ------------------------
    # GOLDEN HOUR ZONE (display only)
    # ------------------------
    sunset_entry = calc.get("sunset-photos")
    if sunset_entry is not None:
        zone = None
        if window is not None and included("sunset-photos"):
            if included("dinner") and calc["dinner"].time:
                dinner_start = to_minutes(calc["dinner"].time)
                dinner_end = dinner_start + dur("dinner")
            if included("open-dancing") and calc["open-dancing"].time:
                dancing_start = to_minutes(calc["open-dancing"].time)
            zone = _golden_hour_zone(
                window[0], ceremony, dinner_start, dinner_end, dancing_start, end, settings.first_look
            )
            logger.debug("golden hour %s falls in zone %s", from_minutes(window[0]), zone)
        calc["sunset-photos"] = replace(sunset_entry, zone=zone, zone_note=ZONE_NOTES.get(zone or "", ""))

    return calc


def _golden_hour_zone(
    golden_start: int,
    ceremony: int,
    dinner_start: int,
    dinner_end: int,
    dancing_start: int,
    end: int,
    first_look: bool,
) -> str:
    if dinner_start <= golden_start < dinner_end:
        return "dinner"
    if dancing_start <= golden_start < end:
        return "dancing"
    if golden_start < ceremony:
        return "early"
    return "safe" if first_look else "scheduled"


def golden_hour_warnings(state: Mapping[str, ScheduleEntry], sunset: Optional[str]) -> List[str]:
    warnings: List[str] = []
    entry = state.get("sunset-photos")
    if not sunset or entry is None or not entry.included:
        return warnings
    if entry.zone == "early":
        warnings.append(
            f"Sunset is around {safe_fmt_time(sunset)}, before the ceremony starts. "
            "Consider a later ceremony time if sunset portraits matter to you."
        )
    return warnings


# ---------- Summary ----------
def _ad_hoc_item(entry: AdHocEntry) -> SummaryItem:
    if entry.kind == "custom":
        return SummaryItem(
            time=entry.time,
            name=entry.name,
            icon="⭐",
            duration=entry.duration,
            notes=entry.notes,
            source="custom",
        )
    label = "Shuttle Arrival" if entry.kind == "arrival" else "Shuttle Departure"
    if entry.notes:
        label = f"{label} ({entry.notes})"
    return SummaryItem(time=entry.time, name=label, icon="🚌", source=entry.kind)


def build_summary(
    state: Mapping[str, ScheduleEntry],
    settings: Settings,
    arrivals: Iterable[AdHocEntry] = (),
    departures: Iterable[AdHocEntry] = (),
    custom: Iterable[AdHocEntry] = (),
) -> List[SummaryItem]:
    """
    Everything with a time, in one list sorted by clock time.
    Ties keep insertion order: catalog activities, arrivals, departures, custom.
    """
    items: List[SummaryItem] = []

    for a in ALL_ACTIVITIES:
        entry = state.get(a.id)
        if entry is None or not entry.included or not entry.time:
            continue
        if not condition_met(a, settings.offsite_ceremony):
            continue
        items.append(
            SummaryItem(
                time=entry.time,
                name=a.name,
                icon=a.icon,
                duration=0 if a.is_time_marker else entry.duration,
                notes=entry.notes,
                activity_id=a.id,
                zone=entry.zone,
            )
        )

    for extra in (*arrivals, *departures, *custom):
        if extra.time:
            items.append(_ad_hoc_item(extra))

    return sorted(items, key=lambda i: i.time)


def document_summary(doc: TimelineDocument) -> List[SummaryItem]:
    return build_summary(
        doc.entries,
        doc.settings,
        doc.shuttle_arrivals,
        doc.shuttle_departures,
        doc.custom_entries,
    )


def summary_to_dataframe(items: List[SummaryItem]) -> pd.DataFrame:
    rows = []
    for i in items:
        rows.append(
            {
                "Time": safe_fmt_time(i.time),
                "Activity": f"{i.icon} {i.name}",
                "Duration": fmt_minutes_hm(i.duration),
                "Notes": i.notes,
                "Source": i.source,
            }
        )
    if not rows:
        return pd.DataFrame(columns=["Time", "Activity", "Duration", "Notes", "Source"])
    return pd.DataFrame(rows)


def summary_to_text(items: List[SummaryItem]) -> str:
    lines: List[str] = []
    for i in items:
        line = f"{safe_fmt_time(i.time)} • {i.name}"
        if i.duration > 0:
            line += f" ({fmt_minutes_hm(i.duration)})"
        if i.zone == "early":
            line += " ⚠️ before ceremony"
        lines.append(line)
        if i.notes and i.source in ("activity", "custom"):
            lines.append(f"  - {i.notes}")
    return "\n".join(lines)


def summary_to_excel(items: List[SummaryItem]) -> bytes:
    buf = BytesIO()
    summary_to_dataframe(items).to_excel(buf, index=False, sheet_name="Timeline", engine="openpyxl")
    return buf.getvalue()
