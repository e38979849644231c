"""Ablage der lokalen Klassen und Kurse.

Die Services bilden die Schnittstelle der Schul-Cloud-Dienste ``classes`` und
``courses`` nach (find/create/patch, asynchron). ``MemoryStore`` hält alles im
Speicher, ``JsonStore`` schreibt den Stand zusätzlich in eine JSON-Datei.
"""

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from models.local import CourseTime, LocalClass, LocalCourse
from sync.errors import PersistenceFailure

logger = logging.getLogger(__name__)


class StoreData(BaseModel):
    """Gesamter Bestand an Klassen und Kursen."""

    classes: list[LocalClass] = Field(default_factory=list)
    courses: list[LocalCourse] = Field(default_factory=list)
    modified_at: Optional[datetime] = None


def _new_id() -> str:
    return uuid.uuid4().hex


class MemoryClassService:
    def __init__(self, data: StoreData) -> None:
        self._data = data

    async def find(self, name: str) -> list[LocalClass]:
        return [c.model_copy(deep=True) for c in self._data.classes if c.name == name]

    async def create(self, data: dict) -> LocalClass:
        try:
            klass = LocalClass(id=_new_id(), **data)
        except ValidationError as e:
            raise PersistenceFailure(f"Klasse ungültig: {e}") from e
        self._data.classes.append(klass)
        logger.debug(f"Klasse angelegt: {klass.name} ({klass.id})")
        return klass.model_copy(deep=True)


class MemoryCourseService:
    def __init__(self, data: StoreData) -> None:
        self._data = data

    async def find(self, name: str, class_id: str, school_id: str) -> list[LocalCourse]:
        return [
            c.model_copy(deep=True) for c in self._data.courses
            if c.name == name and class_id in c.class_ids and c.school_id == school_id
        ]

    async def create(self, data: dict) -> LocalCourse:
        try:
            course = LocalCourse(id=_new_id(), **data)
        except ValidationError as e:
            raise PersistenceFailure(f"Kurs ungültig: {e}") from e
        self._data.courses.append(course)
        logger.debug(f"Kurs angelegt: {course.name} ({course.id})")
        return course.model_copy(deep=True)

    async def patch(self, course_id: str, times: list[CourseTime]) -> LocalCourse:
        for course in self._data.courses:
            if course.id == course_id:
                course.times = [t.model_copy() for t in times]
                return course.model_copy(deep=True)
        raise PersistenceFailure(f"Kurs nicht gefunden: {course_id}")


class MemoryStore:
    """Klassen- und Kurs-Services auf einem gemeinsamen ``StoreData``."""

    def __init__(self, data: Optional[StoreData] = None) -> None:
        self.data = data if data is not None else StoreData()
        self.classes = MemoryClassService(self.data)
        self.courses = MemoryCourseService(self.data)

    def copy(self) -> "MemoryStore":
        """Unabhängige Kopie (z.B. für Probeläufe)."""
        return MemoryStore(self.data.model_copy(deep=True))

    def courses_for_class(self, class_id: str) -> list[LocalCourse]:
        return [c for c in self.data.courses if class_id in c.class_ids]


class JsonStore(MemoryStore):
    """Wie ``MemoryStore``, mit Laden/Speichern als JSON-Datei."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        super().__init__(self._read())

    def _read(self) -> StoreData:
        if not self.path.exists():
            return StoreData()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return StoreData.model_validate_json(f.read())
        except (OSError, ValidationError) as e:
            raise PersistenceFailure(f"Ablage nicht lesbar: {self.path}: {e}") from e

    def save(self) -> None:
        """Speichert den kompletten Bestand als JSON-Datei."""
        self.data.modified_at = datetime.now(timezone.utc)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                f.write(self.data.model_dump_json(indent=2))
        except OSError as e:
            raise PersistenceFailure(f"Ablage nicht schreibbar: {self.path}: {e}") from e
        logger.info(
            f"Ablage gespeichert: {self.path} "
            f"({len(self.data.classes)} Klassen, {len(self.data.courses)} Kurse)"
        )
