from models.remote import (
    FetchedData,
    RemoteClass,
    RemoteRoom,
    RemoteTimetableEntry,
    SchoolYear,
    TimeGridDay,
)
from models.local import CourseTime, LocalClass, LocalCourse, School
from models.timeslot import RecurringSlot

__all__ = [
    "FetchedData",
    "RemoteClass",
    "RemoteRoom",
    "RemoteTimetableEntry",
    "SchoolYear",
    "TimeGridDay",
    "CourseTime",
    "LocalClass",
    "LocalCourse",
    "School",
    "RecurringSlot",
]
