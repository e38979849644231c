"""Gemeinsame Hilfsfunktionen für den Export."""

from collections import defaultdict
from datetime import date

from models.local import CourseTime, LocalCourse

# ─── Farbpalette (RRGGBB, ohne #) ─────────────────────────────────────────────

COLORS: dict[str, str] = {
    "lesson":  "B3D4FF",
    "free":    "F5F5F5",
    "empty":   "FFB3B3",
    "header":  "4472C4",
}

DAY_SHORT = ["Mo", "Di", "Mi", "Do", "Fr", "Sa", "So"]


def today_str() -> str:
    """Gibt das heutige Datum als DD.MM.YYYY zurück."""
    return date.today().strftime("%d.%m.%Y")


def subject_of(course: LocalCourse, class_name: str) -> str:
    """Fachname aus dem Kursnamen "<Fach> <Klasse>"."""
    suffix = f" {class_name}"
    if course.name.endswith(suffix):
        return course.name[: -len(suffix)]
    return course.name


def end_time(t: CourseTime) -> str:
    """Ende eines Termins als "HH:MM"."""
    h, m = (int(x) for x in t.start_time.split(":"))
    total = h * 60 + m + t.duration
    return f"{total // 60:02d}:{total % 60:02d}"


def build_week_grid(
    courses: list[LocalCourse], class_name: str
) -> tuple[list[str], list[int], dict[tuple[str, int], list[str]]]:
    """Baut das Wochenraster einer Klasse auf.

    Returns:
        (Startzeiten sortiert, Wochentage sortiert (mind. Mo–Fr),
         {(start_time, weekday): ["Fach\\nRaum", ...]})
    """
    grid: dict[tuple[str, int], list[str]] = defaultdict(list)
    days = set(range(5))
    for course in courses:
        subject = subject_of(course, class_name)
        for t in course.times:
            grid[(t.start_time, t.weekday)].append(f"{subject}\n{t.room}")
            days.add(t.weekday)
    starts = sorted({k[0] for k in grid})
    return starts, sorted(days), dict(grid)
