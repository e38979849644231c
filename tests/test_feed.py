"""Tests für Zeit-Hilfsfunktionen und die Aufbereitung der Raumpläne."""

from datetime import date

import pytest

from models.remote import RemoteClass, RemoteRoom
from sync.feed import DropReason, check_entry, flatten_room_schedules
from sync.helpers import (
    day_lookup,
    format_untis_date,
    get_duration,
    get_start_time,
    get_weekday,
    parse_untis_date,
    room_display_name,
)


def _entry(kl=(1,), te=("Schmidt",), su=("Mathematik",), ro=(101,),
           day=20240902, start=800, end=845) -> dict:
    return {
        "date": day,
        "startTime": start,
        "endTime": end,
        "kl": [{"id": k, "longname": f"K{k}"} for k in kl],
        "te": [{"id": i, "longname": t} for i, t in enumerate(te)],
        "su": [{"id": i, "longname": s} for i, s in enumerate(su)],
        "ro": [{"id": r} for r in ro],
    }


# ─── ZEIT-HILFSFUNKTIONEN ─────────────────────────────────────────────────────

class TestHelpers:
    def test_parse_untis_date(self):
        assert parse_untis_date(20240902) == date(2024, 9, 2)
        assert parse_untis_date("20250131") == date(2025, 1, 31)

    def test_parse_untis_date_invalid(self):
        with pytest.raises(ValueError):
            parse_untis_date(2024092)

    def test_format_untis_date(self):
        assert format_untis_date(date(2024, 8, 1)) == 20240801

    def test_weekday_monday_is_zero(self):
        assert get_weekday(20240902) == 0   # Montag
        assert get_weekday(20240904) == 2   # Mittwoch
        assert get_weekday(date(2024, 9, 8)) == 6

    def test_start_time(self):
        assert get_start_time(800) == "08:00"
        assert get_start_time(1345) == "13:45"

    def test_duration(self):
        assert get_duration(800, 845) == 45
        assert get_duration(955, 1130) == 95

    def test_invalid_time_raises(self):
        with pytest.raises(ValueError):
            get_start_time(875)

    def test_day_lookup(self):
        assert day_lookup(1) == "Sonntag"
        assert day_lookup(2) == "Montag"
        assert day_lookup(7) == "Samstag"
        with pytest.raises(ValueError):
            day_lookup(8)

    def test_room_display_name(self):
        assert room_display_name(
            {"name": "101", "longName": "Room", "building": "Bldg"}
        ) == "101 (Room, Bldg)"
        assert room_display_name(
            {"name": "102", "longName": "Raum", "building": ""}
        ) == "102 (Raum)"


# ─── FILTER ───────────────────────────────────────────────────────────────────

class TestCheckEntry:
    def test_valid_entry(self):
        assert check_entry(_entry(), 101) == (True, None)

    def test_multiple_classes_ok(self):
        assert check_entry(_entry(kl=(1, 2)), 101)[0] is True

    @pytest.mark.parametrize("kwargs, reason", [
        ({"ro": ()}, DropReason.ROOM_COUNT),
        ({"ro": (101, 102)}, DropReason.ROOM_COUNT),
        ({"ro": (102,)}, DropReason.ROOM_MISMATCH),
        ({"kl": ()}, DropReason.NO_CLASS),
        ({"te": ()}, DropReason.TEACHER_COUNT),
        ({"te": ("A", "B")}, DropReason.TEACHER_COUNT),
        ({"su": ()}, DropReason.SUBJECT_COUNT),
        ({"su": ("Mathematik", "Physik")}, DropReason.SUBJECT_COUNT),
    ])
    def test_rejected(self, kwargs, reason):
        assert check_entry(_entry(**kwargs), 101) == (False, reason)


class TestFlatten:
    def test_entries_distributed_to_classes(self):
        classes = [RemoteClass(id=1, name="5a"), RemoteClass(id=2, name="5b")]
        rooms = [RemoteRoom(id=101, name="101 (Raum)")]
        dropped = flatten_room_schedules(classes, rooms, {101: [_entry(kl=(1, 2))]})

        assert not dropped
        for klass in classes:
            assert len(klass.timetable) == 1
            e = klass.timetable[0]
            assert e.subject == "Mathematik"
            assert e.teacher == "Schmidt"
            assert e.room == "101 (Raum)"
            assert e.date == date(2024, 9, 2)

    def test_invalid_entries_excluded_even_with_valid_class(self):
        classes = [RemoteClass(id=1, name="5a")]
        rooms = [RemoteRoom(id=101, name="101")]
        schedule = [_entry(te=("A", "B")), _entry(su=()), _entry(ro=(101, 102)), _entry()]
        dropped = flatten_room_schedules(classes, rooms, {101: schedule})

        assert len(classes[0].timetable) == 1
        assert dropped == {"teacher_count": 1, "subject_count": 1, "room_count": 1}

    def test_unknown_class_skipped(self):
        classes = [RemoteClass(id=1, name="5a")]
        rooms = [RemoteRoom(id=101, name="101")]
        dropped = flatten_room_schedules(classes, rooms, {101: [_entry(kl=(99,))]})

        assert classes[0].timetable == []
        assert not dropped

    def test_room_without_schedule(self):
        classes = [RemoteClass(id=1, name="5a")]
        rooms = [RemoteRoom(id=101, name="101"), RemoteRoom(id=102, name="102")]
        flatten_room_schedules(classes, rooms, {101: [_entry()]})
        assert len(classes[0].timetable) == 1

    def test_feed_order_kept(self):
        classes = [RemoteClass(id=1, name="5a")]
        rooms = [RemoteRoom(id=102, name="102"), RemoteRoom(id=101, name="101")]
        flatten_room_schedules(classes, rooms, {
            101: [_entry(ro=(101,), su=("Deutsch",))],
            102: [_entry(ro=(102,), su=("Englisch",))],
        })
        assert [e.subject for e in classes[0].timetable] == ["Englisch", "Deutsch"]

    def test_existing_timetable_replaced(self):
        classes = [RemoteClass(id=1, name="5a")]
        rooms = [RemoteRoom(id=101, name="101")]
        schedule = {101: [_entry()]}
        flatten_room_schedules(classes, rooms, schedule)
        flatten_room_schedules(classes, rooms, schedule)
        assert len(classes[0].timetable) == 1
