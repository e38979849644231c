"""Datenmodelle für den entfernten Stundenplan-Feed (WebUntis, Pydantic v2)."""

from datetime import date

from pydantic import BaseModel, Field


class SchoolYear(BaseModel):
    """Aktuelles Schuljahr im entfernten System."""

    id: int
    name: str = ""
    start_date: date
    end_date: date


class TimeGridDay(BaseModel):
    """Ein Tag im Zeitraster des entfernten Systems."""

    day: str                                            # "Montag" ... "Sonntag"
    time_units: list[dict] = Field(default_factory=list)


class RemoteRoom(BaseModel):
    """Raum im entfernten System."""

    id: int
    name: str        # Anzeigename, z.B. "101 (Raum, Haus A)"


class RemoteTimetableEntry(BaseModel):
    """Ein einzelnes Vorkommen einer Stunde an einem Kalenderdatum."""

    date: date
    start_time: int   # HHMM, z.B. 800 = 08:00
    end_time: int     # HHMM
    teacher: str
    subject: str
    room: str


class RemoteClass(BaseModel):
    """Klasse im entfernten System.

    ``timetable`` wird beim Durchlaufen der Raumpläne schrittweise befüllt.
    """

    id: int
    name: str
    timetable: list[RemoteTimetableEntry] = Field(default_factory=list)


class FetchedData(BaseModel):
    """Alle für einen Sync-Lauf abgeholten Daten einer Schule."""

    current_school_year: SchoolYear
    time_grid: list[TimeGridDay] = Field(default_factory=list)
    classes: list[RemoteClass]
    rooms: list[RemoteRoom]
    # Raum-ID → Rohdaten des Raumplans (Liste von WebUntis-Einträgen)
    room_schedules: dict[int, list[dict]] = Field(default_factory=dict)
