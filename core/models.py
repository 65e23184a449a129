from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple

Placement = Literal["before", "after"]
AdHocKind = Literal["arrival", "departure", "custom"]
Zone = Literal["dinner", "dancing", "early", "safe", "scheduled"]


@dataclass(frozen=True)
class ActivityDef:
    id: str
    name: str
    icon: str
    default_duration: int
    description: str = ""
    tips: str = ""
    chain: Optional[str] = None  # documentation only; ordering lives in catalog.CHAINS
    is_anchor: bool = False
    always_included: bool = False
    is_time_marker: bool = False
    can_be_concurrent: bool = False
    parallel_with: Optional[str] = None
    conditional: Optional[str] = None  # "offsite"
    can_choose_timing: bool = False
    cocktail_duration: Optional[int] = None
    minutes_before_end: Optional[int] = None
    flexible: bool = False


@dataclass(frozen=True)
class ScheduleEntry:
    included: bool = False
    duration: int = 0
    time: str = ""  # "HH:MM", blank until computed or typed in
    manual_time: bool = False
    manual_duration: bool = False
    notes: str = ""

    # golden-hour display tag (sunset photos only)
    zone: Optional[Zone] = None
    zone_note: str = ""

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "included": self.included,
            "duration": self.duration,
            "time": self.time,
            "manualTime": self.manual_time,
            "manualDuration": self.manual_duration,
            "eventNotes": self.notes,
        }
        if self.zone:
            d["sunsetZone"] = self.zone
            d["sunsetZoneNote"] = self.zone_note
        return d

    def merged(self, raw: Mapping[str, Any]) -> "ScheduleEntry":
        """
        Overlay a stored entry on top of this one. Missing keys keep current values.
        """
        return replace(
            self,
            included=bool(raw.get("included", self.included)),
            duration=int(raw.get("duration", self.duration) or 0),
            time=str(raw.get("time") or ""),
            manual_time=bool(raw.get("manualTime", self.manual_time)),
            manual_duration=bool(raw.get("manualDuration", self.manual_duration)),
            notes=str(raw.get("eventNotes") or ""),
        )


ScheduleState = Dict[str, ScheduleEntry]


@dataclass(frozen=True)
class Settings:
    ceremony_time: str = "16:00"
    end_time: str = "22:00"
    offsite_ceremony: bool = False
    meal_style: str = "buffet"
    ritual_placement: Placement = "after"
    ritual_overrides: Mapping[str, str] = field(default_factory=dict)
    concurrent: Mapping[str, bool] = field(default_factory=dict)
    first_look: bool = True

    # reserved ahead of dressing when the buffer / lunch break is not scheduled
    buffer_minutes: int = 25

    def placement_for(self, ritual_id: str) -> str:
        return self.ritual_overrides.get(ritual_id, self.ritual_placement)

    def is_concurrent(self, activity_id: str) -> bool:
        return bool(self.concurrent.get(activity_id, False))


@dataclass(frozen=True)
class AdHocEntry:
    id: str
    kind: AdHocKind
    time: str = ""
    name: str = ""
    notes: str = ""
    duration: int = 0

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"id": self.id, "time": self.time, "notes": self.notes}
        if self.kind == "custom":
            d["name"] = self.name
            d["duration"] = self.duration
        return d

    @classmethod
    def from_dict(cls, kind: AdHocKind, raw: Mapping[str, Any]) -> "AdHocEntry":
        return cls(
            id=str(raw.get("id") or ""),
            kind=kind,
            time=str(raw.get("time") or ""),
            name=str(raw.get("name") or ""),
            notes=str(raw.get("notes") or ""),
            duration=int(raw.get("duration") or 0) if kind == "custom" else 0,
        )


@dataclass(frozen=True)
class SunsetWindow:
    start: str
    end: str  # estimated sunset


@dataclass(frozen=True)
class SummaryItem:
    time: str
    name: str
    icon: str
    duration: int = 0
    notes: str = ""
    source: str = "activity"  # "activity", "arrival", "departure", "custom"
    activity_id: Optional[str] = None
    zone: Optional[str] = None


@dataclass(frozen=True)
class TimelineDocument:
    settings: Settings
    entries: ScheduleState
    shuttle_arrivals: Tuple[AdHocEntry, ...] = ()
    shuttle_departures: Tuple[AdHocEntry, ...] = ()
    custom_entries: Tuple[AdHocEntry, ...] = ()
    notes: str = ""
    wedding_date: Optional[str] = None  # "YYYY-MM-DD"

    def ad_hoc(self) -> List[AdHocEntry]:
        return [*self.shuttle_arrivals, *self.shuttle_departures, *self.custom_entries]

    def timeline_data(self) -> Dict[str, Any]:
        s = self.settings
        return {
            "events": {k: e.to_dict() for k, e in self.entries.items()},
            "shuttleArrivals": [a.to_dict() for a in self.shuttle_arrivals],
            "shuttleDepartures": [d.to_dict() for d in self.shuttle_departures],
            "customEvents": [c.to_dict() for c in self.custom_entries],
            "offSiteCeremony": s.offsite_ceremony,
            "dinnerType": s.meal_style,
            "formalitiesTiming": s.ritual_placement,
            "concurrentEvents": {k: {"isConcurrent": bool(v)} for k, v in s.concurrent.items()},
            "doingFirstLook": s.first_look,
            "formalityTimings": dict(s.ritual_overrides),
            "bufferMinutes": s.buffer_minutes,
        }

    def to_record(self) -> Dict[str, Any]:
        """
        Shape of one stored timeline row.
        """
        return {
            "ceremony_start": self.settings.ceremony_time,
            "reception_end": self.settings.end_time,
            "notes": self.notes,
            "wedding_date": self.wedding_date,
            "timeline_data": self.timeline_data(),
        }


def settings_from_record(record: Mapping[str, Any], base: Optional[Settings] = None) -> Settings:
    base = base or Settings()
    data = record.get("timeline_data") or {}
    if not isinstance(data, Mapping):
        data = {}

    concurrent_raw = data.get("concurrentEvents") or {}
    concurrent = {
        k: bool(v.get("isConcurrent")) if isinstance(v, Mapping) else bool(v)
        for k, v in concurrent_raw.items()
    }

    return Settings(
        ceremony_time=record.get("ceremony_start") or base.ceremony_time,
        end_time=record.get("reception_end") or base.end_time,
        offsite_ceremony=bool(data.get("offSiteCeremony", base.offsite_ceremony)),
        meal_style=data.get("dinnerType") or base.meal_style,
        ritual_placement=data.get("formalitiesTiming") or base.ritual_placement,
        ritual_overrides=dict(data.get("formalityTimings") or {}),
        concurrent=concurrent,
        first_look=bool(data.get("doingFirstLook", base.first_look)),
        buffer_minutes=int(data.get("bufferMinutes", base.buffer_minutes)),
    )
