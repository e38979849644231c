"""Hilfsfunktionen zur Normalisierung von WebUntis-Datums- und Zeitwerten.

WebUntis kodiert Daten als ``YYYYMMDD`` und Uhrzeiten als ``HHMM`` (Integer).
"""

from datetime import date
from typing import Union

from config.defaults import WEBUNTIS_DAY_NAMES


def parse_untis_date(value: Union[int, str, date]) -> date:
    """Wandelt ``20240916`` in ein ``date`` um."""
    if isinstance(value, date):
        return value
    raw = str(value).strip()
    if len(raw) != 8 or not raw.isdigit():
        raise ValueError(f"Ungültiges WebUntis-Datum: {value!r}")
    return date(int(raw[:4]), int(raw[4:6]), int(raw[6:]))


def format_untis_date(value: date) -> int:
    """Wandelt ein ``date`` in das WebUntis-Format ``YYYYMMDD`` um."""
    return value.year * 10000 + value.month * 100 + value.day


def _split_untis_time(value: int) -> tuple[int, int]:
    hours, minutes = divmod(int(value), 100)
    if not (0 <= hours <= 24 and 0 <= minutes < 60):
        raise ValueError(f"Ungültige WebUntis-Uhrzeit: {value!r}")
    return hours, minutes


def get_weekday(value: Union[int, str, date]) -> int:
    """Wochentag eines Datums (0=Montag ... 6=Sonntag)."""
    return parse_untis_date(value).weekday()


def get_start_time(value: int) -> str:
    """``800`` → ``"08:00"``."""
    hours, minutes = _split_untis_time(value)
    return f"{hours:02d}:{minutes:02d}"


def get_duration(start: int, end: int) -> int:
    """Dauer in Minuten zwischen zwei WebUntis-Uhrzeiten."""
    sh, sm = _split_untis_time(start)
    eh, em = _split_untis_time(end)
    return (eh * 60 + em) - (sh * 60 + sm)


def day_lookup(untis_day: int) -> str:
    """WebUntis-Tagesnummer (1=Sonntag) → Tagesname."""
    try:
        return WEBUNTIS_DAY_NAMES[int(untis_day)]
    except KeyError:
        raise ValueError(f"Ungültiger WebUntis-Wochentag: {untis_day!r}")


def room_display_name(room: dict) -> str:
    """Anzeigename eines Raums, z.B. ``"101 (Raum, Haus A)"``."""
    building = room.get("building") or ""
    suffix = f", {building}" if building else ""
    return f"{room['name']} ({room.get('longName', '')}{suffix})"
