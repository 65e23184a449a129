from dataclasses import replace

from core.models import Settings
from core.timeutils import to_minutes
from tools.timeline_builder import lead_time_minutes, preparation_start, recompute

PORTRAITS = ("family-formals", "wedding-party-photos", "couple-portraits", "extended-family")
FORMALITIES = ("first-dance", "parent-dances", "toasts", "cake-cutting", "anniversary-dance", "newlywed-game")


def test_first_look_lead_time_scenario(only_state):
    state = only_state("ceremony", "couple-portraits")
    settings = Settings(ceremony_time="16:00", first_look=True, offsite_ceremony=False)

    # 45 base + 30 portraits + 25 buffer allowance (break not on the schedule)
    assert lead_time_minutes(state, settings) == 100
    assert preparation_start(state, settings) == "14:20"

    out = recompute(state, settings, None)
    assert out["ceremony"].time == "16:00"
    assert to_minutes(out["ceremony"].time) + out["ceremony"].duration == to_minutes("16:25")
    assert out["couple-portraits"].time == "14:45"


def test_photo_pushed_past_golden_hour(only_state):
    state = only_state("ceremony", "group-photo", "couple-portraits")
    settings = Settings(ceremony_time="18:30", first_look=False)

    out = recompute(state, settings, "19:30")

    # cocktail hour starts 19:00; 15 min would end 19:15, inside 19:10-19:30
    assert out["couple-portraits"].duration == 15
    assert out["couple-portraits"].time == "19:30"


def test_photo_that_fits_before_golden_hour_stays(only_state):
    state = only_state("ceremony", "couple-portraits")
    settings = Settings(ceremony_time="18:30", first_look=False)

    out = recompute(state, settings, "19:30")
    assert out["couple-portraits"].time == "18:55"


def test_end_of_night_counts_back_from_end(only_state):
    state = only_state("last-dance", "private-last-dance", "grand-exit", "bouquet-toss", "garter-toss")
    out = recompute(state, Settings(end_time="22:00"), None)

    assert out["last-dance"].time == "21:50"
    assert out["private-last-dance"].time == "21:55"
    assert out["grand-exit"].time == "21:45"
    assert out["bouquet-toss"].time == "21:00"
    assert out["garter-toss"].time == "21:05"


def test_recompute_is_deterministic_and_pure(only_state):
    state = only_state("ceremony", "cocktail-hour", "sunset-photos", "dinner", *PORTRAITS, *FORMALITIES)
    settings = Settings(first_look=False, ritual_placement="before")
    snapshot = dict(state)

    first = recompute(state, settings, "19:45")
    second = recompute(state, settings, "19:45")

    assert first == second
    assert state == snapshot
    assert first is not state


def test_prep_walks_forward_from_hair_and_makeup(only_state):
    state = only_state("hair-makeup-done", "buffer-break", "robe-photos", "bridesmaids-dressed", "bride-dress")
    out = recompute(state, Settings(ceremony_time="16:00"), None)

    # 45 + 20 robe + 30 bridesmaids + 30 bride + 30 break = 155 min before 16:00
    assert out["hair-makeup-done"].time == "13:25"
    assert out["buffer-break"].time == "13:25"
    assert out["robe-photos"].time == "13:55"
    assert out["bridesmaids-dressed"].time == "14:15"
    assert out["bride-dress"].time == "14:45"


def test_concurrent_prep_shares_sibling_start(only_state):
    state = only_state("hair-makeup-done", "bridesmaids-dressed", "groom-getting-ready", "details-photos", "bride-dress")
    sequential = Settings()
    concurrent = Settings(concurrent={"groom-getting-ready": True, "details-photos": True})

    assert lead_time_minutes(state, sequential) - lead_time_minutes(state, concurrent) == 50

    out = recompute(state, concurrent, None)
    assert out["groom-getting-ready"].time == out["bridesmaids-dressed"].time
    assert out["details-photos"].time == out["hair-makeup-done"].time
    # groom prep doesn't push the bride back
    assert to_minutes(out["bride-dress"].time) == to_minutes(out["bridesmaids-dressed"].time) + 30


def test_concurrency_flag_ignored_where_not_allowed(only_state):
    state = only_state("bridesmaids-dressed")
    assert lead_time_minutes(state, Settings(concurrent={"bridesmaids-dressed": True})) == lead_time_minutes(
        state, Settings()
    )


def test_offsite_activities_need_offsite_ceremony(only_state):
    state = only_state("ceremony", "travel-to-church", "travel-from-church", "cocktail-hour")

    onsite = recompute(state, Settings(offsite_ceremony=False), None)
    assert onsite["travel-to-church"].time == ""
    assert onsite["travel-from-church"].time == ""
    assert onsite["cocktail-hour"].time == "16:25"

    offsite = recompute(state, Settings(offsite_ceremony=True), None)
    assert offsite["travel-to-church"].time == "14:50"
    assert offsite["travel-from-church"].time == "16:25"
    assert offsite["cocktail-hour"].time == "16:55"
    assert lead_time_minutes(state, Settings(offsite_ceremony=True)) - lead_time_minutes(state, Settings()) == 30


def test_ceremony_fixed_points(only_state):
    state = only_state("ceremony", "guests-arrive", "ceremony-music", "hide-bride", "last-shuttle")
    out = recompute(state, Settings(ceremony_time="17:00"), None)

    assert out["ceremony"].time == "17:00"
    assert out["guests-arrive"].time == "16:30"
    assert out["ceremony-music"].time == "16:45"
    assert out["last-shuttle"].time == "16:45"
    assert out["hide-bride"].time == "16:00"


def test_formalities_split_around_dinner(only_state):
    state = only_state("ceremony", "cocktail-hour", "dinner", "open-dancing", "first-dance", "toasts", "cake-cutting")
    settings = Settings(ritual_placement="after", ritual_overrides={"first-dance": "before"}, meal_style="plated")

    out = recompute(state, settings, None)

    # cocktail 16:25-17:15, first dance before dinner
    assert out["first-dance"].time == "17:15"
    assert out["dinner"].time == "17:20"
    assert out["dinner"].duration == 90
    assert out["toasts"].time == "18:50"
    assert out["cake-cutting"].time == "19:05"
    assert out["open-dancing"].time == "19:15"


def test_before_dinner_chain_is_monotonic(only_state):
    state = only_state("dinner", *FORMALITIES)
    out = recompute(state, Settings(ritual_placement="before"), None)

    for prev, cur in zip(FORMALITIES, FORMALITIES[1:]):
        assert to_minutes(out[cur].time) >= to_minutes(out[prev].time) + out[prev].duration

    last = FORMALITIES[-1]
    assert to_minutes(out["dinner"].time) == to_minutes(out[last].time) + out[last].duration


def test_portraits_never_run_through_golden_hour(only_state):
    state = only_state("ceremony", "group-photo", "cocktail-hour", *PORTRAITS)
    settings = Settings(ceremony_time="17:00", first_look=False)

    for sunset_minutes in range(18 * 60, 20 * 60 + 31, 5):
        sunset = f"{sunset_minutes // 60:02d}:{sunset_minutes % 60:02d}"
        out = recompute(state, settings, sunset)
        w_start, w_end = sunset_minutes - 20, sunset_minutes
        for aid in PORTRAITS:
            start = to_minutes(out[aid].time)
            end = start + out[aid].duration
            assert end <= w_start or start >= w_end, (sunset, aid, out[aid].time)


def test_first_look_cocktail_extras_never_run_through_golden_hour(only_state):
    extras = ("remaining-photos", "extended-family")
    state = only_state("ceremony", "group-photo", "cocktail-hour", *extras)
    settings = Settings(ceremony_time="17:00", first_look=True)

    for sunset_minutes in range(18 * 60, 20 * 60 + 31, 5):
        sunset = f"{sunset_minutes // 60:02d}:{sunset_minutes % 60:02d}"
        out = recompute(state, settings, sunset)
        w_start, w_end = sunset_minutes - 20, sunset_minutes
        for aid in extras:
            start = to_minutes(out[aid].time)
            end = start + out[aid].duration
            assert end <= w_start or start >= w_end, (sunset, aid, out[aid].time)

        first, second = (out[aid] for aid in extras)
        assert to_minutes(second.time) >= to_minutes(first.time) + first.duration


def test_golden_hour_photos_start_twenty_minutes_before_sunset(only_state):
    state = only_state("ceremony", "sunset-photos")
    out = recompute(state, Settings(), "19:42")
    assert out["sunset-photos"].time == "19:22"


def test_golden_hour_zone_tags(only_state):
    state = only_state("ceremony", "cocktail-hour", "dinner", "sunset-photos")

    # cocktail 16:25-17:15, buffet dinner 17:15-18:15
    assert recompute(state, Settings(), "18:00")["sunset-photos"].zone == "dinner"
    assert recompute(state, Settings(), "19:00")["sunset-photos"].zone == "dancing"
    assert recompute(state, Settings(), "16:40")["sunset-photos"].zone == "safe"
    assert recompute(state, Settings(first_look=False), "16:40")["sunset-photos"].zone == "scheduled"

    early = recompute(state, Settings(ceremony_time="18:00"), "17:00")["sunset-photos"]
    assert early.zone == "early"
    assert "before ceremony" in early.zone_note


def test_no_sunset_no_zone(only_state):
    state = only_state("ceremony", "sunset-photos")
    out = recompute(state, Settings(), None)
    assert out["sunset-photos"].time == ""
    assert out["sunset-photos"].zone is None


def test_manual_time_is_left_alone_but_its_duration_still_counts(only_state):
    state = only_state("dinner", "toasts", "cake-cutting")
    settings = Settings(ritual_placement="after")
    baseline = recompute(state, settings, None)

    state = dict(baseline)
    state["toasts"] = replace(state["toasts"], time="12:00", manual_time=True)
    out = recompute(state, settings, None)

    assert out["toasts"].time == "12:00"
    assert out["cake-cutting"].time == baseline["cake-cutting"].time


def test_excluded_entries_keep_their_time(only_state):
    state = only_state("ceremony", "group-photo")
    out = recompute(state, Settings(), None)
    assert out["group-photo"].time == "16:25"

    out["group-photo"] = replace(out["group-photo"], included=False)
    again = recompute(out, Settings(ceremony_time="17:00"), None)
    assert again["group-photo"].time == "16:25"


def test_path_switch_changes_portrait_lengths(only_state):
    state = only_state("couple-portraits", "wedding-party-photos")
    no_first_look = recompute(state, Settings(first_look=False), None)
    assert no_first_look["couple-portraits"].duration == 15
    assert no_first_look["wedding-party-photos"].duration == 20

    first_look = recompute(no_first_look, Settings(first_look=True), None)
    assert first_look["couple-portraits"].duration == 30
    assert first_look["wedding-party-photos"].duration == 30


def test_strange_anchors_still_produce_times(only_state):
    state = only_state("hair-makeup-done", "ceremony", "last-dance")
    out = recompute(state, Settings(ceremony_time="01:00", end_time="00:05"), None)

    assert out["hair-makeup-done"].time == "23:50"
    assert out["last-dance"].time == "23:55"
