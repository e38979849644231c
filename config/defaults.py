from config.schema import (
    DirectorySystem,
    SchoolEntry,
    SyncConfig,
    SystemType,
    WebUntisConfig,
)

# Wochentage in Schul-Cloud-Zählung (0=Montag)
WEEKDAY_NAMES: list[str] = [
    "Montag", "Dienstag", "Mittwoch", "Donnerstag",
    "Freitag", "Samstag", "Sonntag",
]

# WebUntis zählt 1=Sonntag ... 7=Samstag
WEBUNTIS_DAY_NAMES: dict[int, str] = {
    1: "Sonntag",
    2: "Montag",
    3: "Dienstag",
    4: "Mittwoch",
    5: "Donnerstag",
    6: "Freitag",
    7: "Samstag",
}

# Elementtypen der WebUntis-API
ELEMENT_CLASS = 1
ELEMENT_TEACHER = 2
ELEMENT_SUBJECT = 3
ELEMENT_ROOM = 4
ELEMENT_STUDENT = 5

# Felder, die pro Stundenplan-Eintrag angefordert werden
TIMETABLE_FIELDS: dict[str, list[str]] = {
    "klasseFields": ["id", "longname"],
    "subjectFields": ["id", "longname"],
    "teacherFields": ["id", "longname"],
}

WEBUNTIS_CLIENT_ID = "schulcloud-sync"


def default_school() -> SchoolEntry:
    """Beispielschule mit einem WebUntis-System."""
    return SchoolEntry(
        id="muster-gymnasium",
        name="Muster-Gymnasium",
        current_year="2024/25",
        systems=[
            DirectorySystem(
                type=SystemType.WEBUNTIS,
                webuntis_config=WebUntisConfig(
                    url="https://mese.webuntis.com",
                    schoolname="muster-gym",
                    user="sync",
                    password="",
                ),
            ),
        ],
    )


def default_sync_config() -> SyncConfig:
    """Vollständige Default-Konfiguration."""
    return SyncConfig(schools=[default_school()])
