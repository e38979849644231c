"""Datenmodell für einen wiederkehrenden Wochentermin."""

from dataclasses import dataclass


@dataclass
class RecurringSlot:
    """Aggregat aller Vorkommen mit gleichem Wochentag, Beginn, Dauer und Raum.

    ``count`` zählt die beobachteten Kalenderdaten im Schuljahr und wird nur
    erhöht, nie verringert.
    """

    # Wochentag (0=Montag, ..., 6=Sonntag)
    weekday: int
    # Beginn im Format "HH:MM"
    start_time: str
    # Dauer in Minuten
    duration: int
    room: str
    count: int = 1

    @property
    def key(self) -> tuple[int, str, int, str]:
        return (self.weekday, self.start_time, self.duration, self.room)

    def matches(self, other: "RecurringSlot") -> bool:
        """True wenn Wochentag, Beginn, Dauer und Raum übereinstimmen."""
        return self.key == other.key

    @property
    def day_name(self) -> str:
        """Abgekürzter Tagesname."""
        names = ["Mo", "Di", "Mi", "Do", "Fr", "Sa", "So"]
        return names[self.weekday]

    def __str__(self) -> str:
        return f"{self.day_name} {self.start_time} ({self.duration} min, {self.room}) ×{self.count}"
