from pydantic import BaseModel, Field, model_validator
from typing import Optional
from enum import Enum


class SystemType(str, Enum):
    WEBUNTIS = "webuntis"
    LDAP = "ldap"


# ─── VERZEICHNISSYSTEME ───

class WebUntisConfig(BaseModel):
    """Zugangsdaten für ein WebUntis-System."""
    # Basis-URL, z.B. "https://mese.webuntis.com"
    url: str
    # Schulname im WebUntis-System (Login-Parameter "school")
    schoolname: str
    user: str
    password: str = Field("", repr=False)


class DirectorySystem(BaseModel):
    """Ein an die Schule angebundenes Verzeichnissystem."""
    type: SystemType = Field(SystemType.WEBUNTIS)
    # Nur für type=webuntis gesetzt
    webuntis_config: Optional[WebUntisConfig] = None

    @model_validator(mode='after')
    def validate_webuntis_config(self):
        """WebUntis-Systeme brauchen Zugangsdaten."""
        if self.type == SystemType.WEBUNTIS and self.webuntis_config is None:
            raise ValueError("WebUntis-System ohne webuntis_config")
        return self


# ─── SCHULEN ───

class SchoolEntry(BaseModel):
    """Eine zu synchronisierende Schule."""
    # Interne Schul-ID in der Schul-Cloud
    id: str
    name: str
    # Aktuelles Schuljahr in der Schul-Cloud (wird neuen Klassen zugeordnet)
    current_year: Optional[str] = None
    systems: list[DirectorySystem] = Field(default_factory=list)

    @property
    def webuntis_systems(self) -> list[DirectorySystem]:
        return [s for s in self.systems if s.type == SystemType.WEBUNTIS]


# ─── GESAMT-CONFIG ───

class SyncConfig(BaseModel):
    """Gesamtkonfiguration des Schuljahres-Syncs."""
    schools: list[SchoolEntry] = Field(default_factory=list)
    # Ablage der lokalen Klassen/Kurse (JSON)
    store_path: str = Field("output/store.json",
        description="Pfad der lokalen Klassen-/Kursdatenbank")
    # Ab wie vielen Vorkommen im Schuljahr gilt ein Termin als wiederkehrend
    min_occurrences: int = Field(2, ge=1,
        description="Mindestanzahl Vorkommen für einen wiederkehrenden Termin")
    # Nur die ersten N Räume abfragen (None = alle)
    room_limit: Optional[int] = Field(None, ge=1,
        description="Maximale Anzahl abgefragter Räume (None = alle)")
    # WebUntis-Elementtyp für Raumpläne (4 = Raum)
    timetable_element_type: int = Field(4,
        description="WebUntis-Elementtyp für Raumpläne")
    # HTTP-Timeout für WebUntis-Aufrufe in Sekunden
    request_timeout: float = Field(30.0, gt=0,
        description="HTTP-Timeout für WebUntis in Sekunden")
    log_level: str = Field("INFO",
        description="Log-Level (DEBUG, INFO, WARNING, ERROR)")

    @model_validator(mode='after')
    def validate_unique_schools(self):
        """Schul-IDs müssen eindeutig sein."""
        seen: set[str] = set()
        for s in self.schools:
            if s.id in seen:
                raise ValueError(f"Schul-ID '{s.id}' ist doppelt vergeben")
            seen.add(s.id)
        return self

    def get_school(self, key: str) -> Optional[SchoolEntry]:
        """Sucht eine Schule über ID oder Namen."""
        for s in self.schools:
            if s.id == key or s.name == key:
                return s
        return None
