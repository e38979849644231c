"""Abgleich eines WebUntis-Schuljahres mit den lokalen Klassen und Kursen.

Ablauf pro Schule:
  1. Raumpläne auf die Klassen verteilen (``sync.feed``)
  2. Pro Klasse: lokale Klasse über den Namen finden oder anlegen
  3. Pro Stundenplan-Eintrag: Kurs "<Fach> <Klasse>" finden oder anlegen,
     Vorkommen zu wiederkehrenden Terminen zusammenfassen
  4. Pro Kurs: ``times`` durch alle Termine mit ausreichend Vorkommen ersetzen

Zuordnung über Namen: bei mehreren Treffern gewinnt der erste.
"""

import logging
from dataclasses import dataclass, field

from pydantic import BaseModel, Field

from models.local import CourseTime, LocalClass, LocalCourse, School
from models.remote import RemoteClass, RemoteRoom
from models.timeslot import RecurringSlot
from sync.services import ClassService, CourseService
from sync.feed import flatten_room_schedules
from sync.helpers import get_duration, get_start_time, get_weekday

logger = logging.getLogger(__name__)


class EntityStats(BaseModel):
    created_count: int = 0
    reused_count: int = 0

    @property
    def count(self) -> int:
        return self.created_count + self.reused_count


class TimesStats(BaseModel):
    # Anzahl unterschiedlicher Terminmuster
    count: int = 0


class SyncStats(BaseModel):
    """Kennzahlen eines Abgleichs."""

    classes: EntityStats = Field(default_factory=EntityStats)
    courses: EntityStats = Field(default_factory=EntityStats)
    times: TimesStats = Field(default_factory=TimesStats)
    # Verworfene Raumplan-Einträge je Grund
    dropped: dict[str, int] = Field(default_factory=dict)
    # Namenssuchen mit mehr als einem Treffer
    ambiguous_matches: int = 0
    success: bool = False


@dataclass
class SubjectAccumulator:
    """Kurs und gesammelte Termine eines Fachs innerhalb einer Klasse."""

    course: LocalCourse
    slots: list[RecurringSlot] = field(default_factory=list)

    def add(self, slot: RecurringSlot) -> bool:
        """Zählt das Vorkommen; True wenn ein neues Terminmuster entsteht."""
        for existing in self.slots:
            if existing.matches(slot):
                existing.count += 1
                return False
        self.slots.append(slot)
        return True

    def course_times(self, min_occurrences: int = 2) -> list[CourseTime]:
        return [
            CourseTime(
                weekday=s.weekday,
                start_time=s.start_time,
                duration=s.duration,
                event_id=None,
                room=s.room,
            )
            for s in self.slots
            if s.count >= min_occurrences
        ]


class TimetableReconciler:
    """Überführt einen Schuljahres-Feed in Klassen und Kurse mit Terminen."""

    def __init__(
        self,
        class_service: ClassService,
        course_service: CourseService,
        min_occurrences: int = 2,
    ) -> None:
        self.class_service = class_service
        self.course_service = course_service
        self.min_occurrences = min_occurrences

    async def reconcile(
        self,
        school: School,
        classes: list[RemoteClass],
        rooms: list[RemoteRoom],
        room_schedules: dict[int, list[dict]],
        stats: SyncStats | None = None,
    ) -> SyncStats:
        """Führt den Abgleich für eine Schule durch.

        Fehler der Ablage werden nicht abgefangen; bereits abgeglichene
        Klassen bleiben erhalten.
        """
        stats = stats if stats is not None else SyncStats()

        dropped = flatten_room_schedules(classes, rooms, room_schedules)
        for reason, n in dropped.items():
            stats.dropped[reason] = stats.dropped.get(reason, 0) + n

        for klass in classes:
            await self._reconcile_class(school, klass, stats)

        logger.info(
            f"{school.name}: Klassen {stats.classes.created_count} neu / "
            f"{stats.classes.reused_count} vorhanden, Kurse "
            f"{stats.courses.created_count} neu / {stats.courses.reused_count} vorhanden, "
            f"{stats.times.count} Terminmuster"
        )
        return stats

    # ─── Klassen ───

    async def _resolve_class(self, school: School, name: str, stats: SyncStats) -> LocalClass:
        found = await self.class_service.find(name)
        if len(found) > 1:
            stats.ambiguous_matches += 1
            logger.warning(f"Klasse '{name}' mehrfach vorhanden ({len(found)}×) – verwende ersten Treffer")
        if found:
            stats.classes.reused_count += 1
            return found[0]

        klass = await self.class_service.create({
            "name": name,
            "school_id": school.id,
            "name_format": "static",
            "year": school.current_year,
        })
        stats.classes.created_count += 1
        return klass

    async def _reconcile_class(self, school: School, klass: RemoteClass, stats: SyncStats) -> None:
        logger.info(f"Bearbeite Klasse {klass.name}")
        local_class = await self._resolve_class(school, klass.name, stats)

        subjects: dict[str, SubjectAccumulator] = {}
        for entry in klass.timetable:
            acc = subjects.get(entry.subject)
            if acc is None:
                course = await self._resolve_course(school, local_class, entry.subject, stats)
                acc = subjects[entry.subject] = SubjectAccumulator(course)

            slot = RecurringSlot(
                weekday=get_weekday(entry.date),
                start_time=get_start_time(entry.start_time),
                duration=get_duration(entry.start_time, entry.end_time),
                room=entry.room,
            )
            if acc.add(slot):
                stats.times.count += 1

        for acc in subjects.values():
            times = acc.course_times(self.min_occurrences)
            acc.course = await self.course_service.patch(acc.course.id, times)
            logger.debug(f"{acc.course.name}: {len(times)} von {len(acc.slots)} Terminen übernommen")

    # ─── Kurse ───

    async def _resolve_course(
        self, school: School, local_class: LocalClass, subject: str, stats: SyncStats
    ) -> LocalCourse:
        course_name = f"{subject} {local_class.name}"
        logger.info(f"Bearbeite Kurs {course_name}")
        found = await self.course_service.find(course_name, local_class.id, school.id)
        if len(found) > 1:
            stats.ambiguous_matches += 1
            logger.warning(f"Kurs '{course_name}' mehrfach vorhanden ({len(found)}×) – verwende ersten Treffer")
        if found:
            stats.courses.reused_count += 1
            return found[0]

        course = await self.course_service.create({
            "name": course_name,
            "class_ids": [local_class.id],
            "school_id": school.id,
            "teacher_ids": [],
        })
        stats.courses.created_count += 1
        return course
