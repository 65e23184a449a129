from unittest.mock import MagicMock

import pytest
import requests

from core.models import Settings
from tools import schedule
from tools.timeline_store import (
    HttpTimelineStore,
    MemoryTimelineStore,
    TimelineStoreError,
    make_store,
    open_document,
)


@pytest.fixture
def edited_doc():
    doc = schedule.new_document(Settings(), "2026-09-12")
    doc = schedule.toggle_activity(doc, "ceremony")
    doc = schedule.toggle_activity(doc, "sunset-photos")
    doc = schedule.set_time(doc, "bride-dress", "13:00")
    doc = schedule.set_concurrent(doc, "details-photos", True)
    doc = schedule.set_ritual_placement(doc, "toasts", "before")
    doc = schedule.update_settings(doc, first_look=False, meal_style="plated")
    doc = schedule.add_shuttle_arrival(doc, notes="Inn")
    doc = schedule.add_custom_entry(doc, "Fireworks", "21:30", 10)
    return schedule.set_document_notes(doc, "Rain plan: barn")


def test_memory_store_round_trip(edited_doc):
    store = MemoryTimelineStore()
    store.save("w1", edited_doc)

    loaded = open_document(store, "w1")
    assert loaded == edited_doc


def test_zero_buffer_survives_save_and_reload():
    store = MemoryTimelineStore()
    doc = schedule.new_document(Settings(buffer_minutes=0), "2026-06-20")
    doc = schedule.set_included(doc, "buffer-break", False)
    assert doc.entries["hair-makeup-done"].time == "14:15"
    store.save("w1", doc)

    loaded = open_document(store, "w1")
    assert loaded.settings.buffer_minutes == 0
    assert loaded == doc


def test_record_without_first_look_keeps_the_defaults_choice():
    store = MemoryTimelineStore()
    store._records["w1"] = {"ceremony_start": "15:00", "timeline_data": {"events": {}}}

    doc = open_document(store, "w1", defaults=Settings(first_look=False))
    assert doc.settings.first_look is False


def test_not_found_initializes_defaults():
    doc = open_document(MemoryTimelineStore(), "missing", wedding_date="2026-06-20")
    assert doc == schedule.new_document(Settings(), "2026-06-20")


def test_unknown_saved_activities_are_dropped():
    store = MemoryTimelineStore()
    store._records["w1"] = {
        "ceremony_start": "15:00",
        "timeline_data": {"events": {"lunch": {"included": True}, "ceremony": {"included": True}}},
    }
    doc = open_document(store, "w1")
    assert "lunch" not in doc.entries
    assert doc.entries["ceremony"].time == "15:00"


def test_http_load_reads_timeline_row():
    session = MagicMock()
    session.get.return_value.status_code = 200
    session.get.return_value.json.return_value = {"timeline": {"ceremony_start": "17:00"}}

    store = HttpTimelineStore("https://portal.example/", session=session)
    assert store.load("w1") == {"ceremony_start": "17:00"}
    session.get.assert_called_once_with("https://portal.example/api/timeline/w1", timeout=store.timeout)


def test_http_load_missing_timeline():
    session = MagicMock()
    session.get.return_value.status_code = 200
    session.get.return_value.json.return_value = {"timeline": None}
    assert HttpTimelineStore("https://portal.example", session=session).load("w1") is None

    session.get.return_value.status_code = 404
    assert HttpTimelineStore("https://portal.example", session=session).load("w1") is None


def test_http_errors_become_store_errors(edited_doc):
    session = MagicMock()
    session.get.side_effect = requests.ConnectionError("down")
    session.post.side_effect = requests.ConnectionError("down")
    store = HttpTimelineStore("https://portal.example", session=session)

    with pytest.raises(TimelineStoreError):
        store.load("w1")
    with pytest.raises(TimelineStoreError):
        store.save("w1", edited_doc)


def test_unreachable_store_falls_back_to_new_document():
    session = MagicMock()
    session.get.side_effect = requests.Timeout("slow")
    doc = open_document(HttpTimelineStore("https://portal.example", session=session), "w1")
    assert doc == schedule.new_document(Settings(), None)


def test_http_save_payload(edited_doc):
    session = MagicMock()
    store = HttpTimelineStore("https://portal.example", session=session)
    store.save("w1", edited_doc)

    url = session.post.call_args.args[0]
    payload = session.post.call_args.kwargs["json"]
    assert url == "https://portal.example/api/timeline"
    assert payload["weddingId"] == "w1"
    assert payload["ceremonyStart"] == "16:00"
    assert payload["receptionEnd"] == "22:00"
    assert payload["notes"] == "Rain plan: barn"

    data = payload["timelineData"]
    assert data["doingFirstLook"] is False
    assert data["dinnerType"] == "plated"
    assert data["formalityTimings"] == {"toasts": "before"}
    assert data["concurrentEvents"] == {"details-photos": {"isConcurrent": True}}
    assert data["events"]["bride-dress"]["manualTime"] is True
    assert data["customEvents"][0]["name"] == "Fireworks"


def test_make_store_picks_backend():
    assert isinstance(make_store(""), MemoryTimelineStore)
    assert isinstance(make_store("https://portal.example"), HttpTimelineStore)
