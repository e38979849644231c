"""Tests für den Schuljahres-Sync pro Schule (mit generiertem Feed)."""

import asyncio

import pytest

from config.defaults import default_school
from config.schema import SchoolEntry, SyncConfig
from data.fake_feed import FakeTimetableSource
from data.store import MemoryStore
from sync.errors import NoConfiguration, UpstreamUnavailable
from sync.syncer import RunStatus, SchoolyearSyncer, SyncRunReport


# ─── Hilfsfunktionen ──────────────────────────────────────────────────────────

def _syncer(store: MemoryStore, source, **config_kwargs) -> SchoolyearSyncer:
    config = SyncConfig(schools=[default_school()], **config_kwargs)
    return SchoolyearSyncer(config, store.classes, store.courses, lambda: source)


class FailingSource(FakeTimetableSource):
    """Feed, dessen Raumabfrage fehlschlägt."""

    async def get_rooms(self) -> list[dict]:
        self.calls.append("getRooms")
        raise UpstreamUnavailable("503 Service Unavailable")


class BrokenYearSource(FakeTimetableSource):
    """Feed mit unvollständigem Schuljahr."""

    async def get_current_schoolyear(self) -> dict:
        return {"id": 1, "name": "kaputt"}


class MalformedEntrySource(FakeTimetableSource):
    """Feed, in dem ein Raumplan-Eintrag ein ungültiges Datum trägt."""

    async def get_customizable_timetable_for(self, element_type, element_id, options):
        entries = [dict(e) for e in await super().get_customizable_timetable_for(
            element_type, element_id, options)]
        if entries:
            entries[0]["date"] = 0
        return entries


@pytest.fixture
def source() -> FakeTimetableSource:
    return FakeTimetableSource(seed=7, num_classes=3, num_rooms=4)


# ─── SYNC ─────────────────────────────────────────────────────────────────────

class TestSchoolyearSyncer:
    def test_responds_to(self):
        assert SchoolyearSyncer.responds_to("webuntis-schoolyear")
        assert not SchoolyearSyncer.responds_to("ldap")

    def test_full_run(self, source: FakeTimetableSource):
        store = MemoryStore()
        report = asyncio.run(_syncer(store, source).run(default_school()))

        assert report.status in (RunStatus.SUCCESS, RunStatus.WARNING)
        assert report.stats.success is True
        assert report.stats.classes.created_count == 3
        assert len(store.data.classes) == 3
        assert store.data.courses
        assert any(c.times for c in store.data.courses)
        assert source.calls[0] == "login"
        assert source.calls[-1] == "logout"
        assert source.logged_in is False

    def test_every_kept_time_recurs(self, source: FakeTimetableSource):
        store = MemoryStore()
        asyncio.run(_syncer(store, source).run(default_school()))
        for course in store.data.courses:
            keys = [(t.weekday, t.start_time, t.duration, t.room) for t in course.times]
            assert len(keys) == len(set(keys))
            assert all(t.event_id is None for t in course.times)

    def test_team_teaching_entries_dropped(self):
        source = FakeTimetableSource(seed=1, num_classes=2, num_rooms=2, team_teaching_rate=0.5)
        report = asyncio.run(_syncer(MemoryStore(), source).run(default_school()))
        assert report.stats.dropped.get("teacher_count", 0) > 0

    def test_second_run_reuses(self, source: FakeTimetableSource):
        store = MemoryStore()
        syncer = _syncer(store, source)
        asyncio.run(syncer.run(default_school()))
        n_courses = len(store.data.courses)

        report = asyncio.run(syncer.run(default_school()))
        assert report.stats.classes.created_count == 0
        assert report.stats.classes.reused_count == 3
        assert report.stats.courses.created_count == 0
        assert len(store.data.courses) == n_courses

    def test_room_limit(self, source: FakeTimetableSource):
        store = MemoryStore()
        asyncio.run(_syncer(store, source, room_limit=1).run(default_school()))
        assert source.calls.count("getTimetable") == 1

    def test_no_configuration(self, source: FakeTimetableSource):
        school = SchoolEntry(id="s2", name="Ohne WebUntis")
        store = MemoryStore()
        syncer = _syncer(store, source)

        with pytest.raises(NoConfiguration, match="No WebUntis configuration"):
            asyncio.run(syncer.steps(school, SyncRunReport(school=school.name, started_at="2024-09-01T00:00:00Z")))

        report = asyncio.run(syncer.run(school))
        assert report.status == RunStatus.ERROR
        assert report.stats.success is False
        assert source.calls == []

    def test_upstream_failure_aborts_and_logs_out(self):
        source = FailingSource(seed=3, num_classes=2, num_rooms=2)
        store = MemoryStore()
        report = asyncio.run(_syncer(store, source).run(default_school()))

        assert report.status == RunStatus.ERROR
        assert "503" in report.error
        assert store.data.classes == []
        assert source.calls[-1] == "logout"

    def test_authentication_failure(self):
        source = FakeTimetableSource(seed=3, num_classes=2, num_rooms=2, password="geheim")
        report = asyncio.run(_syncer(MemoryStore(), source).run(default_school()))
        assert report.status == RunStatus.ERROR
        assert "abgelehnt" in report.error

    def test_malformed_answer_is_upstream_error(self):
        source = BrokenYearSource(seed=3, num_classes=2, num_rooms=2)
        with pytest.raises(UpstreamUnavailable):
            asyncio.run(_syncer(MemoryStore(), source).steps(
                default_school(),
                SyncRunReport(school="x", started_at="2024-09-01T00:00:00Z"),
            ))

    def test_run_all_keeps_schools_apart(self):
        store_a, store_b = MemoryStore(), MemoryStore()
        school_b = default_school().model_copy(update={"id": "b", "name": "Schule B"})
        syncer_a = _syncer(store_a, FakeTimetableSource(seed=1, num_classes=2, num_rooms=2))
        syncer_b = _syncer(store_b, FakeTimetableSource(seed=2, num_classes=3, num_rooms=2))

        async def both():
            return await asyncio.gather(
                syncer_a.run_all([default_school()]),
                syncer_b.run_all([school_b]),
            )

        (ra,), (rb,) = asyncio.run(both())
        assert ra.school == "Muster-Gymnasium"
        assert rb.school == "Schule B"
        assert len(store_a.data.classes) == 2
        assert len(store_b.data.classes) == 3
        assert all(c.school_id == "b" for c in store_b.data.classes)

    def test_report_log_and_json(self, source: FakeTimetableSource):
        report = asyncio.run(_syncer(MemoryStore(), source).run(default_school(), dry_run=True))
        assert report.dry_run is True
        assert any("WebUntis-Konfiguration" in line for line in report.log)
        restored = SyncRunReport.model_validate_json(report.model_dump_json())
        assert restored.stats.classes.created_count == 3

    def test_malformed_entry_fails_only_its_school(self):
        store = MemoryStore()
        school_b = default_school().model_copy(update={"id": "b", "name": "Schule B"})
        sources = iter([
            FakeTimetableSource(seed=1, num_classes=2, num_rooms=2),
            MalformedEntrySource(seed=2, num_classes=2, num_rooms=2),
        ])
        config = SyncConfig(schools=[default_school(), school_b])
        syncer = SchoolyearSyncer(config, store.classes, store.courses, lambda: next(sources))

        ra, rb = asyncio.run(syncer.run_all([default_school(), school_b]))

        assert ra.status in (RunStatus.SUCCESS, RunStatus.WARNING)
        assert ra.stats.success is True
        assert rb.status == RunStatus.ERROR
        assert "Datum" in rb.error
        assert rb.stats.success is False
        assert any(c.school_id == "muster-gymnasium" for c in store.data.classes)

    def test_later_system_failure_resets_success(self):
        school = default_school()
        school = school.model_copy(update={"systems": school.systems * 2})
        sources = iter([
            FakeTimetableSource(seed=1, num_classes=2, num_rooms=2),
            FailingSource(seed=2, num_classes=2, num_rooms=2),
        ])
        store = MemoryStore()
        config = SyncConfig(schools=[school])
        syncer = SchoolyearSyncer(config, store.classes, store.courses, lambda: next(sources))

        report = asyncio.run(syncer.run(school))

        assert report.status == RunStatus.ERROR
        assert report.stats.success is False
        assert report.stats.classes.created_count == 2
