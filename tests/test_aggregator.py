from datetime import date, datetime, time, timedelta

import pytest

from danceup.aggregator import (
    HORIZON_WEEKS,
    aggregate,
    expand_class,
    parse_duration,
    parse_time,
    weekday_index,
)
from danceup.entities import ClassEntry, EventEntry, WorkshopEntry

TODAY = date(2025, 7, 9)  # Wednesday


def mk_class(id="c1", day="Monday", time="18:00", duration="1 hour", active=True):
    return ClassEntry(
        id=id, owner_id="o1", name="Salsa", instructor="Maria",
        day=day, time=time, duration=duration, location="Room A", is_active=active,
    )


def mk_event(id="e1", date="2025-07-15", time="10:00"):
    return EventEntry(id=id, owner_id="o1", title="Recital", date=date, time=time, location="Theater")


def mk_workshop(id="w1", date="2025-09-01", time="2:30 PM", duration="3 hours"):
    return WorkshopEntry(
        id=id, owner_id="o1", title="Heels", instructor="Kim",
        date=date, time=time, duration=duration, location="Room B",
    )


@pytest.mark.parametrize("day", ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"])
def test_class_expands_to_twelve_weekly_occurrences(day):
    occ = expand_class(mk_class(day=day), TODAY)

    assert len(occ) == HORIZON_WEEKS == 12
    for o in occ:
        assert o.start.weekday() == weekday_index(day)
        assert o.end > o.start
        assert o.start.date() >= TODAY
    for a, b in zip(occ, occ[1:]):
        assert b.start - a.start == timedelta(days=7)


def test_class_horizon_starts_today_when_weekday_matches():
    occ = expand_class(mk_class(day="Wednesday", time="7:00 PM"), TODAY)
    assert occ[0].start == datetime(2025, 7, 9, 19, 0)
    assert occ[-1].start == datetime(2025, 9, 24, 19, 0)


def test_class_horizon_starts_at_next_matching_day():
    occ = expand_class(mk_class(day="Monday"), TODAY)
    assert occ[0].start == datetime(2025, 7, 14, 18, 0)


def test_class_occurrence_ids_carry_week_offset():
    occ = expand_class(mk_class(id="abc"), TODAY)
    assert [o.id for o in occ] == [f"abc-{w}" for w in range(12)]
    assert len({o.id for o in occ}) == 12


def test_unknown_weekday_yields_nothing():
    assert expand_class(mk_class(day="Funday"), TODAY) == []
    assert aggregate([mk_class(day="")], [], [], today=TODAY) == []


def test_weekday_names_are_case_insensitive():
    assert len(expand_class(mk_class(day=" friday "), TODAY)) == 12


def test_event_is_one_hour():
    [o] = aggregate([], [mk_event()], [], today=TODAY)
    assert o.kind == "event"
    assert o.id == "e1"
    assert o.start == datetime(2025, 7, 15, 10, 0)
    assert o.end == o.start + timedelta(minutes=60)


def test_workshop_is_two_hours_whatever_its_duration():
    [o] = aggregate([], [], [mk_workshop()], today=TODAY)
    assert o.kind == "workshop"
    assert o.start == datetime(2025, 9, 1, 14, 30)
    assert o.end == o.start + timedelta(minutes=120)


def test_event_with_bad_date_is_skipped():
    assert aggregate([], [mk_event(date="15/07/2025")], [], today=TODAY) == []


def test_class_duration_sets_length():
    [first, *_] = expand_class(mk_class(duration="90 minutes"), TODAY)
    assert first.end - first.start == timedelta(minutes=90)

    [first, *_] = expand_class(mk_class(duration="garbage"), TODAY)
    assert first.end - first.start == timedelta(minutes=60)


def test_inactive_classes_are_ignored():
    assert aggregate([mk_class(active=False)], [], [], today=TODAY) == []


def test_aggregate_concatenates_all_sources():
    occ = aggregate([mk_class()], [mk_event()], [mk_workshop()], today=TODAY)
    kinds = [o.kind for o in occ]
    assert kinds.count("class") == 12
    assert kinds.count("event") == 1
    assert kinds.count("workshop") == 1
    assert all(o.end > o.start for o in occ)


def test_aggregate_is_repeatable_for_same_day():
    args = ([mk_class(), mk_class(id="c2", day="Saturday")], [mk_event()], [mk_workshop()])
    first = aggregate(*args, today=TODAY)
    second = aggregate(*args, today=TODAY)
    assert [(o.id, o.start, o.end) for o in first] == [(o.id, o.start, o.end) for o in second]


def test_occurrence_points_back_to_source():
    cls = mk_class()
    [o, *_] = aggregate([cls], [], [], today=TODAY)
    assert o.source is cls
    assert o.location == "Room A"
    assert o.to_dict()["source_id"] == "c1"


@pytest.mark.parametrize("text,expected", [
    ("14:30", time(14, 30)),
    ("9:05", time(9, 5)),
    ("2:30 PM", time(14, 30)),
    ("7:05 pm", time(19, 5)),
    ("12:00 PM", time(12, 0)),
    ("12:15 AM", time(0, 15)),
    ("10:00 AM", time(10, 0)),
    ("25:00", time(0, 0)),
    ("noon", time(0, 0)),
    ("", time(0, 0)),
    (None, time(0, 0)),
])
def test_parse_time(text, expected):
    assert parse_time(text) == expected


@pytest.mark.parametrize("text,expected", [
    ("1 hour", 60),
    ("2 hours", 120),
    ("90 minutes", 90),
    ("45 min", 45),
    ("1 Hour 30 min", 60),
    # only the digits right before the unit count
    ("1.5 hours", 300),
    ("2.5 min", 5),
    ("garbage", 60),
    ("0 minutes", 60),
    ("", 60),
    (None, 60),
])
def test_parse_duration(text, expected):
    assert parse_duration(text) == expected
