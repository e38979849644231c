"""Aufbereitung der Raumpläne zu Klassen-Stundenplänen.

Ein Raumplan-Eintrag wird nur übernommen, wenn er eindeutig zuzuordnen ist:
genau ein Raum (der abgefragte), mindestens eine Klasse, genau eine Lehrkraft
und genau ein Fach. Alles andere wird ohne Fehler verworfen.
"""

import logging
from collections import Counter
from enum import Enum
from typing import Optional

from models.remote import RemoteClass, RemoteRoom, RemoteTimetableEntry
from sync.helpers import parse_untis_date

logger = logging.getLogger(__name__)


class DropReason(str, Enum):
    ROOM_COUNT = "room_count"
    ROOM_MISMATCH = "room_mismatch"
    NO_CLASS = "no_class"
    TEACHER_COUNT = "teacher_count"
    SUBJECT_COUNT = "subject_count"


def check_entry(entry: dict, room_id: int) -> tuple[bool, Optional[DropReason]]:
    """Prüft, ob ein Raumplan-Eintrag eindeutig zugeordnet werden kann.

    Returns:
        ``(True, None)`` bei Übernahme, sonst ``(False, Grund)``.
    """
    rooms = entry.get("ro") or []
    if len(rooms) != 1:
        return False, DropReason.ROOM_COUNT
    if rooms[0].get("id") != room_id:
        return False, DropReason.ROOM_MISMATCH
    if len(entry.get("kl") or []) == 0:
        return False, DropReason.NO_CLASS
    if len(entry.get("te") or []) != 1:
        return False, DropReason.TEACHER_COUNT
    if len(entry.get("su") or []) != 1:
        return False, DropReason.SUBJECT_COUNT
    return True, None


def flatten_room_schedules(
    classes: list[RemoteClass],
    rooms: list[RemoteRoom],
    room_schedules: dict[int, list[dict]],
) -> Counter:
    """Verteilt die Raumpläne auf die ``timetable``-Listen der Klassen.

    Räume und Einträge werden in Feed-Reihenfolge verarbeitet. Einträge für
    Klassen, die nicht in ``classes`` stehen, werden übersprungen. Vorhandene
    ``timetable``-Listen werden zuvor geleert.

    Returns:
        Anzahl verworfener Einträge je ``DropReason``-Wert.
    """
    by_id = {k.id: k for k in classes}
    for klass in classes:
        klass.timetable = []
    dropped: Counter = Counter()

    for room in rooms:
        for entry in room_schedules.get(room.id, []):
            ok, reason = check_entry(entry, room.id)
            if not ok:
                dropped[reason.value] += 1
                continue

            for kl in entry["kl"]:
                klass = by_id.get(kl.get("id"))
                if klass is None:
                    logger.debug(f"Unbekannte Klasse {kl.get('id')} in Raum {room.name} – übersprungen")
                    continue
                klass.timetable.append(RemoteTimetableEntry(
                    date=parse_untis_date(entry["date"]),
                    start_time=entry["startTime"],
                    end_time=entry["endTime"],
                    teacher=entry["te"][0]["longname"],
                    subject=entry["su"][0]["longname"],
                    room=room.name,
                ))

    if dropped:
        logger.info(f"Verworfene Raumplan-Einträge: {dict(dropped)}")
    return dropped
