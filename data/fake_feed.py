"""Testdaten-Generator für einen WebUntis-Schuljahres-Feed.

Erzeugt einen plausiblen Feed mit absichtlichen Störungen:
  1. Vertretungen: einzelne Stunden werden an einem Datum verlegt (Einzeltermin)
  2. Team-Teaching: Einträge mit zwei Lehrkräften (nicht eindeutig zuzuordnen)
  3. Fremde Klassen: Einträge für Klassen, die nicht in der Klassenliste stehen

Die Klasse erfüllt dieselbe Schnittstelle wie ``WebUntisClient`` und kann daher
direkt im ``SchoolyearSyncer`` verwendet werden.
"""

import random
from datetime import date, timedelta
from typing import Optional

from sync.errors import AuthenticationFailed, UpstreamUnavailable
from sync.helpers import format_untis_date, parse_untis_date

# ─── Namens-Listen ────────────────────────────────────────────────────────────

_LAST_NAMES = [
    "Müller", "Schmidt", "Schneider", "Fischer", "Weber", "Meyer",
    "Wagner", "Becker", "Schulz", "Hoffmann", "Schäfer", "Koch",
    "Bauer", "Richter", "Klein", "Wolf", "Schröder", "Neumann",
]

_SUBJECTS = [
    "Deutsch", "Mathematik", "Englisch", "Biologie", "Erdkunde",
    "Geschichte", "Kunst", "Musik", "Sport", "Physik",
]

# Stundenraster (HHMM)
_TIME_UNITS = [
    (800, 845), (850, 935), (955, 1040), (1045, 1130), (1150, 1235), (1240, 1325),
]


class FakeTimetableSource:
    """Simuliert ein WebUntis-System mit einem generierten Schuljahr."""

    def __init__(
        self,
        seed: Optional[int] = 42,
        num_classes: int = 4,
        num_rooms: int = 6,
        lessons_per_week: int = 12,
        start_date: date = date(2024, 8, 12),
        end_date: date = date(2025, 6, 27),
        substitution_rate: float = 0.03,
        team_teaching_rate: float = 0.02,
        password: Optional[str] = None,
    ) -> None:
        self.rng = random.Random(seed)
        self.num_classes = num_classes
        self.num_rooms = num_rooms
        self.lessons_per_week = lessons_per_week
        self.start_date = start_date
        self.end_date = end_date
        self.substitution_rate = substitution_rate
        self.team_teaching_rate = team_teaching_rate
        self.password = password
        self.logged_in = False
        self.calls: list[str] = []

        self._classes: list[dict] = []
        self._rooms: list[dict] = []
        self._schedules: dict[int, list[dict]] = {}
        self._generate()

    # ─── Generierung ───

    def _generate(self) -> None:
        grades = [5, 5, 6, 6, 7, 7, 8, 8, 9, 9]
        labels = "abcdefgh"
        for i in range(self.num_classes):
            name = f"{grades[i % len(grades)]}{labels[i // len(grades) * 2 + i % 2]}"
            self._classes.append({"id": i + 1, "name": name, "longName": name})

        for i in range(self.num_rooms):
            self._rooms.append({
                "id": 100 + i,
                "name": f"{101 + i}",
                "longName": "Raum",
                "building": "Haus A" if i % 2 == 0 else "",
            })
        self._schedules = {r["id"]: [] for r in self._rooms}

        teachers = {
            s: {"id": j + 1, "longname": self.rng.choice(_LAST_NAMES)}
            for j, s in enumerate(_SUBJECTS)
        }
        subjects = {s: {"id": j + 1, "longname": s} for j, s in enumerate(_SUBJECTS)}

        # Wochenplan je Klasse: (Wochentag, Stunde) → (Fach, Raum)
        weekly: list[tuple[dict, int, int, str, dict]] = []
        for klass in self._classes:
            free = [(d, u) for d in range(5) for u in range(len(_TIME_UNITS))]
            self.rng.shuffle(free)
            for d, u in free[: self.lessons_per_week]:
                subject = self.rng.choice(_SUBJECTS)
                room = self.rng.choice(self._rooms)
                weekly.append((klass, d, u, subject, room))

        # Fremde Klasse (nicht in getKlassen enthalten)
        ghost = {"id": 999, "longName": "Gast"}

        day = self.start_date
        while day <= self.end_date:
            for klass, d, u, subject, room in weekly:
                if day.weekday() != d:
                    continue
                when, unit = day, u
                if self.rng.random() < self.substitution_rate:
                    unit = self.rng.randrange(len(_TIME_UNITS))
                    when = day + timedelta(days=self.rng.choice([1, 2]))
                te = [teachers[subject]]
                if self.rng.random() < self.team_teaching_rate:
                    te = te + [{"id": 99, "longname": "Referendar"}]
                kl = [{"id": klass["id"], "longname": klass["longName"]}]
                if klass["id"] == 1 and d == 0 and u == 0:
                    kl.append({"id": ghost["id"], "longname": ghost["longName"]})
                start, end = _TIME_UNITS[unit]
                self._schedules[room["id"]].append({
                    "id": len(self._schedules[room["id"]]) + 1,
                    "date": format_untis_date(when),
                    "startTime": start,
                    "endTime": end,
                    "kl": kl,
                    "te": te,
                    "su": [subjects[subject]],
                    "ro": [{"id": room["id"]}],
                })
            day += timedelta(days=1)

    # ─── Schnittstelle ───

    def _require_login(self, method: str) -> None:
        self.calls.append(method)
        if not self.logged_in:
            raise UpstreamUnavailable(f"WebUntis-Aufruf '{method}' ohne Login")

    async def login(self, url: str, institution: str, user: str, password: str) -> None:
        self.calls.append("login")
        if self.password is not None and password != self.password:
            raise AuthenticationFailed(f"WebUntis-Login für '{institution}' abgelehnt")
        self.logged_in = True

    async def logout(self) -> None:
        self.calls.append("logout")
        self.logged_in = False

    async def get_current_schoolyear(self) -> dict:
        self._require_login("getCurrentSchoolyear")
        return {
            "id": 1,
            "name": f"{self.start_date.year}/{self.end_date.year}",
            "startDate": format_untis_date(self.start_date),
            "endDate": format_untis_date(self.end_date),
        }

    async def get_timegrid(self) -> list[dict]:
        self._require_login("getTimegridUnits")
        units = [
            {"name": str(i + 1), "startTime": s, "endTime": e}
            for i, (s, e) in enumerate(_TIME_UNITS)
        ]
        return [{"day": d, "timeUnits": units} for d in range(2, 7)]

    async def get_classes(self, schoolyear_id: int) -> list[dict]:
        self._require_login("getKlassen")
        return [dict(k) for k in self._classes]

    async def get_rooms(self) -> list[dict]:
        self._require_login("getRooms")
        return [dict(r) for r in self._rooms]

    async def get_customizable_timetable_for(
        self, element_type: int, element_id: int, options: dict
    ) -> list[dict]:
        self._require_login("getTimetable")
        start = parse_untis_date(options["startDate"])
        end = parse_untis_date(options["endDate"])
        return [
            e for e in self._schedules.get(element_id, [])
            if start <= parse_untis_date(e["date"]) <= end
        ]
