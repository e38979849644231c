"""Schnittstellen der externen Dienste, die der Sync verwendet."""

from typing import Protocol

from models.local import CourseTime, LocalClass, LocalCourse


class ClassService(Protocol):
    """Klassen der Schul-Cloud (Suche über den Namen)."""

    async def find(self, name: str) -> list[LocalClass]: ...

    async def create(self, data: dict) -> LocalClass: ...


class CourseService(Protocol):
    """Kurse der Schul-Cloud (Suche über Name, Klasse und Schule)."""

    async def find(self, name: str, class_id: str, school_id: str) -> list[LocalCourse]: ...

    async def create(self, data: dict) -> LocalCourse: ...

    async def patch(self, course_id: str, times: list[CourseTime]) -> LocalCourse: ...


class TimetableSource(Protocol):
    """Entferntes Stundenplan-System (WebUntis)."""

    async def login(self, url: str, institution: str, user: str, password: str) -> None: ...

    async def logout(self) -> None: ...

    async def get_current_schoolyear(self) -> dict: ...

    async def get_timegrid(self) -> list[dict]: ...

    async def get_classes(self, schoolyear_id: int) -> list[dict]: ...

    async def get_rooms(self) -> list[dict]: ...

    async def get_customizable_timetable_for(
        self, element_type: int, element_id: int, options: dict
    ) -> list[dict]: ...
