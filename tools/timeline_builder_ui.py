# =========================
# file: tools/timeline_builder_ui.py
# =========================
from __future__ import annotations
from datetime import datetime

import streamlit as st

from core.catalog import ACTIVITIES, MEAL_STYLES, SECTIONS, Section, condition_met
from core.config import EVENT_ID, default_settings, load_defaults
from core.sun import estimate_sunset, sunset_window
from core.timeutils import safe_fmt_time
from tools import schedule
from tools.timeline_builder import (
    document_summary,
    golden_hour_warnings,
    summary_to_dataframe,
    summary_to_excel,
    summary_to_text,
)
from tools.timeline_store import TimelineStoreError, make_store, open_document

DOC_KEY = "timeline_doc"
REV_KEY = "timeline_rev"
DURATION_CHOICES = [5, 10, 15, 20, 25, 30, 45, 60, 90, 120]


# -------------------------
# Session helpers
# -------------------------
def _doc():
    return st.session_state[DOC_KEY]


def _apply(op, *args, **kwargs) -> None:
    """
    Run one schedule operation and bump the revision so widgets pick up recomputed times.
    """
    try:
        st.session_state[DOC_KEY] = op(_doc(), *args, **kwargs)
    except (ValueError, KeyError) as e:
        st.session_state["timeline_error"] = str(e)
        return
    st.session_state[REV_KEY] = st.session_state.get(REV_KEY, 0) + 1


def _key(name: str) -> str:
    return f"{name}-{st.session_state.get(REV_KEY, 0)}"


def _valid_hhmm(raw: str) -> bool:
    try:
        datetime.strptime(raw.strip(), "%H:%M")
        return True
    except ValueError:
        return False


def _on_time(activity_id: str, key: str) -> None:
    raw = (st.session_state.get(key) or "").strip()
    if not _valid_hhmm(raw):
        st.session_state["timeline_error"] = f"Use 24-hour HH:MM for times (got {raw!r})."
        return
    _apply(schedule.set_time, activity_id, raw)


def _on_setting(name: str, key: str, cast=lambda v: v) -> None:
    value = cast(st.session_state.get(key))
    if name in ("ceremony_time", "end_time") and not _valid_hhmm(value):
        st.session_state["timeline_error"] = f"Use 24-hour HH:MM for times (got {value!r})."
        return
    _apply(schedule.update_settings, **{name: value})


def _ensure_document() -> None:
    if DOC_KEY in st.session_state:
        return
    defaults = load_defaults()
    store = make_store()
    st.session_state["timeline_store"] = store
    st.session_state[DOC_KEY] = open_document(
        store,
        EVENT_ID,
        wedding_date=defaults.get("wedding_date"),
        defaults=default_settings(defaults),
    )
    st.session_state[REV_KEY] = 0


# -------------------------
# Rows & sections
# -------------------------
def _render_activity_row(activity_id: str) -> None:
    doc = _doc()
    a = ACTIVITIES[activity_id]
    entry = doc.entries[activity_id]
    settings = doc.settings

    if not condition_met(a, settings.offsite_ceremony):
        return

    c1, c2, c3 = st.columns([4, 2, 2])
    with c1:
        label = f"{a.icon} {a.name}"
        if a.can_be_concurrent and settings.is_concurrent(a.id):
            label += " · concurrent"
        st.checkbox(
            label,
            value=entry.included,
            key=_key(f"inc-{a.id}"),
            help=a.description or None,
            on_change=_apply,
            args=(schedule.toggle_activity, a.id),
        )
        if entry.included and a.tips:
            st.caption(f"💡 {a.tips}")

        if entry.included and a.can_be_concurrent:
            st.checkbox(
                "Happens during other prep",
                value=settings.is_concurrent(a.id),
                key=_key(f"conc-{a.id}"),
                on_change=lambda aid=a.id, k=_key(f"conc-{a.id}"): _apply(
                    schedule.set_concurrent, aid, bool(st.session_state.get(k))
                ),
            )

        if entry.included and a.can_choose_timing:
            options = ["before", "after"]
            st.selectbox(
                "When",
                options=options,
                index=options.index(settings.placement_for(a.id)) if settings.placement_for(a.id) in options else 1,
                format_func=lambda p: "Before dinner" if p == "before" else "After dinner",
                key=_key(f"place-{a.id}"),
                on_change=lambda aid=a.id, k=_key(f"place-{a.id}"): _apply(
                    schedule.set_ritual_placement, aid, st.session_state.get(k)
                ),
            )

    if not entry.included:
        return

    with c2:
        time_key = _key(f"time-{a.id}")
        st.text_input(
            "Time",
            value=entry.time,
            key=time_key,
            on_change=_on_time,
            args=(a.id, time_key),
        )
        caption = safe_fmt_time(entry.time)
        if entry.manual_time:
            caption += " · set by hand"
        st.caption(caption)

    with c3:
        if a.is_time_marker or a.id == "dinner":
            return
        choices = sorted(set(DURATION_CHOICES) | {entry.duration})
        dur_key = _key(f"dur-{a.id}")
        st.selectbox(
            "Minutes",
            options=choices,
            index=choices.index(entry.duration),
            key=dur_key,
            on_change=lambda aid=a.id, k=dur_key: _apply(schedule.set_duration, aid, int(st.session_state.get(k))),
        )


def _render_section(section: Section) -> None:
    settings = _doc().settings
    with st.expander(f"{section.icon} {section.title}", expanded=section.key in ("prep", "ceremony")):
        if section.key == "photos":
            if settings.first_look:
                st.caption("First look: portraits happen before the ceremony.")
            else:
                st.caption("No first look: portraits happen during cocktail hour, with shorter blocks.")
        if section.key == "dinner":
            meal = MEAL_STYLES.get(settings.meal_style)
            if meal:
                st.caption(f"{meal.name}: {meal.minutes} min")
        for a in section.activities:
            _render_activity_row(a.id)


def _on_add_custom() -> None:
    time = (st.session_state.get("custom_time") or "").strip()
    if time and not _valid_hhmm(time):
        st.session_state["timeline_error"] = f"Use 24-hour HH:MM for times (got {time!r})."
        return
    _apply(
        schedule.add_custom_entry,
        st.session_state.get("custom_name") or "",
        time,
        int(st.session_state.get("custom_minutes") or 0),
        st.session_state.get("custom_notes") or "",
    )


def _render_ad_hoc() -> None:
    doc = _doc()
    st.markdown("### Shuttles & extra moments")

    cols = st.columns(3)
    with cols[0]:
        st.button("Add shuttle arrival", on_click=_apply, args=(schedule.add_shuttle_arrival,))
    with cols[1]:
        st.button("Add shuttle departure", on_click=_apply, args=(schedule.add_shuttle_departure,))

    for entry in doc.ad_hoc():
        c1, c2, c3 = st.columns([2, 4, 1])
        with c1:
            tk = _key(f"adhoc-time-{entry.id}")
            st.text_input(
                "Time",
                value=entry.time,
                key=tk,
                on_change=lambda eid=entry.id, k=tk: _apply(
                    schedule.update_ad_hoc, eid, time=(st.session_state.get(k) or "").strip()
                ),
            )
        with c2:
            label = entry.name if entry.kind == "custom" else ("Shuttle arrival" if entry.kind == "arrival" else "Shuttle departure")
            nk = _key(f"adhoc-notes-{entry.id}")
            st.text_input(
                label,
                value=entry.notes,
                key=nk,
                on_change=lambda eid=entry.id, k=nk: _apply(schedule.update_ad_hoc, eid, notes=st.session_state.get(k) or ""),
            )
        with c3:
            st.button("Remove", key=_key(f"adhoc-rm-{entry.id}"), on_click=_apply, args=(schedule.remove_ad_hoc, entry.id))

    with st.form("custom_entry", clear_on_submit=True):
        st.markdown("#### Add a custom moment")
        st.text_input("Name", key="custom_name")
        st.text_input("Time (HH:MM)", key="custom_time")
        st.number_input("Minutes", min_value=0, max_value=240, value=15, key="custom_minutes")
        st.text_input("Notes", key="custom_notes")
        st.form_submit_button("Add", on_click=_on_add_custom)


# -------------------------
# Page
# -------------------------
def render_timeline_builder():
    _ensure_document()

    st.subheader("🗓️ Wedding Day Timeline")
    st.markdown(
        """
        Set the ceremony and end-of-night times, pick what's happening, and every time
        reflows around them. Times you type in by hand stay put.
        """
    )

    err = st.session_state.pop("timeline_error", None)
    if err:
        st.error(err)

    doc = _doc()
    s = doc.settings

    colA, colB = st.columns([1, 1])

    with colA:
        st.markdown("### The big decisions")

        dk = _key("wedding-date")
        st.text_input(
            "Wedding date (YYYY-MM-DD)",
            value=doc.wedding_date or "",
            key=dk,
            on_change=lambda: _apply(schedule.set_wedding_date, st.session_state.get(dk)),
        )

        ck = _key("ceremony-time")
        st.text_input("Ceremony start (HH:MM)", value=s.ceremony_time, key=ck,
                      on_change=_on_setting, args=("ceremony_time", ck, lambda v: (v or "").strip()))
        ek = _key("end-time")
        st.text_input("Reception ends (HH:MM)", value=s.end_time, key=ek,
                      on_change=_on_setting, args=("end_time", ek, lambda v: (v or "").strip()))

        fk = _key("first-look")
        st.toggle("First look", value=s.first_look, key=fk,
                  on_change=_on_setting, args=("first_look", fk, bool))
        ok = _key("offsite")
        st.toggle("Off-site ceremony", value=s.offsite_ceremony, key=ok,
                  on_change=_on_setting, args=("offsite_ceremony", ok, bool))

        meal_ids = list(MEAL_STYLES)
        mk = _key("meal")
        st.selectbox(
            "Dinner service",
            options=meal_ids,
            index=meal_ids.index(s.meal_style) if s.meal_style in meal_ids else 0,
            format_func=lambda m: f"{MEAL_STYLES[m].name} ({MEAL_STYLES[m].minutes} min)",
            key=mk,
            on_change=_on_setting,
            args=("meal_style", mk),
        )
        pk = _key("placement")
        st.radio(
            "Formalities by default",
            options=["before", "after"],
            index=0 if s.ritual_placement == "before" else 1,
            format_func=lambda p: "Before dinner" if p == "before" else "After dinner",
            horizontal=True,
            key=pk,
            on_change=_on_setting,
            args=("ritual_placement", pk),
        )

        st.button("Reset to auto times", on_click=_apply, args=(schedule.reset_to_auto_times,))

        for section in SECTIONS:
            _render_section(section)

        _render_ad_hoc()

    with colB:
        doc = _doc()
        sunset = estimate_sunset(doc.wedding_date)
        window = sunset_window(sunset)
        if window:
            st.info(f"🌅 Sunset around {safe_fmt_time(window.end)}. Golden hour photos {safe_fmt_time(window.start)}–{safe_fmt_time(window.end)}.")
            note = doc.entries["sunset-photos"].zone_note
            if note and doc.entries["sunset-photos"].included:
                st.caption(note)
        else:
            st.caption("Add a wedding date to see sunset timing.")

        for w in golden_hour_warnings(doc.entries, sunset):
            st.warning(w)

        st.markdown("### Your day at a glance")
        items = document_summary(doc)
        if not items:
            st.info("Select events to build your timeline.")
        else:
            st.dataframe(summary_to_dataframe(items), use_container_width=True, hide_index=True)
        st.caption(f"Ceremony: {safe_fmt_time(s.ceremony_time)} • Ends: {safe_fmt_time(s.end_time)}")

        st.markdown("### Notes")
        nk = _key("doc-notes")
        st.text_area(
            "Additional notes",
            value=doc.notes,
            key=nk,
            on_change=lambda: _apply(schedule.set_document_notes, st.session_state.get(nk) or ""),
        )

        if st.button("Save timeline", type="primary"):
            try:
                st.session_state["timeline_store"].save(EVENT_ID, _doc())
                st.success("Timeline saved.")
            except TimelineStoreError as e:
                st.error(f"Network/API error: {e}")

        st.markdown("### Exports")
        stem = (doc.wedding_date or "wedding").replace(" ", "_")
        c1, c2 = st.columns(2)
        with c1:
            st.download_button(
                "Download timeline CSV",
                data=summary_to_dataframe(items).to_csv(index=False).encode("utf-8"),
                file_name=f"{stem}_timeline.csv",
                mime="text/csv",
                use_container_width=True,
            )
        with c2:
            st.download_button(
                "Download timeline (Excel)",
                data=summary_to_excel(items),
                file_name=f"{stem}_timeline.xlsx",
                mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                use_container_width=True,
            )

        st.markdown("#### Copy/paste version")
        st.text_area("Timeline text", value=summary_to_text(items), height=320)
