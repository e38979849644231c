"""Schuljahres-Sync aus WebUntis pro Schule.

Schritte:
  * WebUntis-Systeme der Schule prüfen (keins → ``NoConfiguration``)
  * Login, Schuljahr/Zeitraster/Klassen/Räume/Raumpläne abholen, Logout
  * Abgleich mit Klassen und Kursen (``TimetableReconciler``)

Annahmen: höchstens ein WebUntis-System je Schule; der Sync wird für jede
Schule einzeln angestoßen. Zwischen Schulen gibt es keinen gemeinsamen
Zustand, mehrere Schulen dürfen also gleichzeitig laufen.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel, Field

from config.defaults import TIMETABLE_FIELDS
from config.schema import DirectorySystem, SchoolEntry, SyncConfig
from models.local import School
from models.remote import FetchedData, RemoteClass, RemoteRoom, SchoolYear, TimeGridDay
from sync.services import ClassService, CourseService, TimetableSource
from sync.errors import NoConfiguration, SyncError, UpstreamUnavailable
from sync.helpers import day_lookup, format_untis_date, parse_untis_date, room_display_name
from sync.reconciler import SyncStats, TimetableReconciler

logger = logging.getLogger(__name__)


class RunStatus(str, Enum):
    SUCCESS = "Success"
    WARNING = "Warning"
    ERROR = "Error"


class SyncRunReport(BaseModel):
    """Protokoll eines Sync-Laufs für eine Schule."""

    school: str
    started_at: datetime
    duration_seconds: float = 0.0
    status: RunStatus = RunStatus.SUCCESS
    dry_run: bool = False
    error: Optional[str] = None
    log: list[str] = Field(default_factory=list)
    stats: SyncStats = Field(default_factory=SyncStats)

    def print_rich(self) -> None:
        """Gibt den Bericht formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        color = {
            RunStatus.SUCCESS: "green",
            RunStatus.WARNING: "yellow",
            RunStatus.ERROR: "red",
        }[self.status]
        s = self.stats
        lines = [
            f"[bold {color}]{self.status.value}[/bold {color}]"
            + ("  [dim](Probelauf)[/dim]" if self.dry_run else ""),
            f"Klassen: [green]{s.classes.created_count} neu[/green] / "
            f"{s.classes.reused_count} vorhanden",
            f"Kurse:   [green]{s.courses.created_count} neu[/green] / "
            f"{s.courses.reused_count} vorhanden",
            f"Terminmuster: {s.times.count}",
            f"[dim]Dauer: {self.duration_seconds:.1f}s[/dim]",
        ]
        if s.dropped:
            lines.append(f"[dim]Verworfene Einträge: {sum(s.dropped.values())} "
                         f"({', '.join(f'{k}={v}' for k, v in sorted(s.dropped.items()))})[/dim]")
        if s.ambiguous_matches:
            lines.append(f"[yellow]• {s.ambiguous_matches} mehrdeutige Namenstreffer "
                         "(erster Treffer verwendet)[/yellow]")
        if self.error:
            lines.append(f"[red]• {self.error}[/red]")
        console.print(Panel("\n".join(lines), title=f"Sync: {self.school}", border_style="cyan"))


class SchoolyearSyncer:
    """Synchronisiert das aktuelle WebUntis-Schuljahr einer Schule."""

    def __init__(
        self,
        config: SyncConfig,
        class_service: ClassService,
        course_service: CourseService,
        source_factory: Optional[Callable[[], TimetableSource]] = None,
    ) -> None:
        self.config = config
        self.reconciler = TimetableReconciler(
            class_service, course_service, min_occurrences=config.min_occurrences,
        )
        if source_factory is None:
            from data.webuntis_client import WebUntisClient

            def source_factory():
                return WebUntisClient(timeout=config.request_timeout)
        self.source_factory = source_factory

    @staticmethod
    def responds_to(target: str) -> bool:
        return target == "webuntis-schoolyear"

    # ─── Lauf ───

    async def run(self, school: SchoolEntry, dry_run: bool = False) -> SyncRunReport:
        """Führt den Sync für eine Schule aus und protokolliert das Ergebnis.

        Sync-Fehler werden im Bericht als Status ``Error`` festgehalten.
        """
        report = SyncRunReport(
            school=school.name,
            started_at=datetime.now(timezone.utc),
            dry_run=dry_run,
        )
        t0 = time.monotonic()
        try:
            await self.steps(school, report)
        except SyncError as e:
            report.status = RunStatus.ERROR
            report.error = str(e)
            self._log(report, f"Sync für {school.name} fehlgeschlagen: {e}", logging.ERROR)
        else:
            if report.stats.ambiguous_matches:
                report.status = RunStatus.WARNING
        report.duration_seconds = time.monotonic() - t0
        return report

    async def run_all(self, schools: list[SchoolEntry], dry_run: bool = False) -> list[SyncRunReport]:
        """Startet den Sync für mehrere Schulen gleichzeitig."""
        return list(await asyncio.gather(*(self.run(s, dry_run) for s in schools)))

    async def steps(self, school: SchoolEntry, report: SyncRunReport) -> None:
        systems = school.webuntis_systems
        if not systems:
            raise NoConfiguration("No WebUntis configuration for associated school.")
        self._log(report, f"{len(systems)} WebUntis-Konfiguration(en) für Schule {school.name} gefunden.")
        for system in systems:
            await self.sync_from_system(system, report.stats, school, report)

    async def sync_from_system(
        self,
        system: DirectorySystem,
        stats: SyncStats,
        school: SchoolEntry,
        report: Optional[SyncRunReport] = None,
    ) -> None:
        stats.success = False
        cfg = system.webuntis_config
        source = self.source_factory()
        try:
            await source.login(cfg.url, cfg.schoolname, cfg.user, cfg.password)
            try:
                data = await self.fetch_information(source)
            except (KeyError, TypeError, ValueError) as e:
                raise UpstreamUnavailable(f"Unerwartete WebUntis-Antwort: {e!r}") from e
        except UpstreamUnavailable as e:
            logger.error(f"WebUntis für Schule {school.name} nicht erreichbar: {e}")
            raise
        finally:
            await self._safe_logout(source, school)

        if report is not None:
            self._log(report, f"{len(data.classes)} Klassen, {len(data.rooms)} Räume "
                              f"im Schuljahr {data.current_school_year.name} abgerufen.")
        try:
            await self.reconciler.reconcile(
                School(id=school.id, name=school.name, current_year=school.current_year),
                data.classes,
                data.rooms,
                data.room_schedules,
                stats,
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Fehlerhafter WebUntis-Stundenplan für Schule {school.name}: {e!r}")
            raise UpstreamUnavailable(f"Fehlerhafter WebUntis-Stundenplan: {e!r}") from e
        stats.success = True

    async def _safe_logout(self, source: TimetableSource, school: SchoolEntry) -> None:
        try:
            await source.logout()
        except UpstreamUnavailable as e:
            logger.warning(f"WebUntis-Logout für Schule {school.name} fehlgeschlagen: {e}")

    # ─── Abruf ───

    async def fetch_information(self, source: TimetableSource) -> FetchedData:
        """Holt Schuljahr, Zeitraster, Klassen, Räume und alle Raumpläne."""
        raw_year = await source.get_current_schoolyear()
        if not raw_year:
            raise UpstreamUnavailable("WebUntis liefert kein aktuelles Schuljahr")
        year = SchoolYear(
            id=raw_year["id"],
            name=raw_year.get("name", ""),
            start_date=parse_untis_date(raw_year["startDate"]),
            end_date=parse_untis_date(raw_year["endDate"]),
        )
        raw_grid = await source.get_timegrid()
        raw_classes = await source.get_classes(year.id)
        raw_rooms = await source.get_rooms()

        classes = [
            RemoteClass(id=k["id"], name=k.get("longName") or k["name"])
            for k in raw_classes
        ]
        time_grid = [
            TimeGridDay(day=day_lookup(d["day"]), time_units=d.get("timeUnits", []))
            for d in raw_grid
        ]
        rooms = [RemoteRoom(id=r["id"], name=room_display_name(r)) for r in raw_rooms]
        if self.config.room_limit is not None:
            rooms = rooms[: self.config.room_limit]

        room_schedules: dict[int, list[dict]] = {}
        for room in rooms:
            room_schedules[room.id] = await source.get_customizable_timetable_for(
                self.config.timetable_element_type,
                room.id,
                {
                    "startDate": format_untis_date(year.start_date),
                    "endDate": format_untis_date(year.end_date),
                    "onlyBaseTimetable": True,
                    **TIMETABLE_FIELDS,
                },
            )

        return FetchedData(
            current_school_year=year,
            time_grid=time_grid,
            classes=classes,
            rooms=rooms,
            room_schedules=room_schedules,
        )

    def _log(self, report: SyncRunReport, message: str, level: int = logging.INFO) -> None:
        logger.log(level, message)
        report.log.append(message)
