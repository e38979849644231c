"""Datenmodelle für die lokalen Klassen und Kurse (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, Field


class School(BaseModel):
    """Schule, für die synchronisiert wird."""

    id: str
    name: str
    current_year: Optional[str] = None


class LocalClass(BaseModel):
    """Klasse in der Schul-Cloud. Abgleich erfolgt über den Namen."""

    id: str
    name: str
    school_id: str
    name_format: str = "static"
    year: Optional[str] = None


class CourseTime(BaseModel):
    """Wiederkehrender Termin eines Kurses (wöchentlich)."""

    weekday: int                   # 0=Montag ... 6=Sonntag
    start_time: str                # "HH:MM"
    duration: int                  # Minuten
    event_id: Optional[str] = None # für spätere Kalender-Verknüpfung, hier immer None
    room: str

    @property
    def weekday_name(self) -> str:
        from config.defaults import WEEKDAY_NAMES
        return WEEKDAY_NAMES[self.weekday]


class LocalCourse(BaseModel):
    """Kurs in der Schul-Cloud: ein Fach innerhalb einer Klasse (z.B. "Mathematik 5a")."""

    id: str
    name: str
    class_ids: list[str]
    school_id: str
    teacher_ids: list[str] = Field(default_factory=list)
    times: list[CourseTime] = Field(default_factory=list)
