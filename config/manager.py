"""Konfigurationsmanager für den Schuljahres-Sync.

Die Konfiguration liegt als kommentierte YAML-Datei (ruamel.yaml) vor und wird
beim Laden über Pydantic validiert. WebUntis-Passwörter dürfen in der Datei
fehlen und werden dann aus der Umgebung gelesen:

    WEBUNTIS_PASSWORD_<SCHUL_ID>   (Großbuchstaben, "-" → "_")
"""

import json
import logging
import os
from datetime import date
from pathlib import Path
from typing import Optional

from rich.console import Console
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.schema import SyncConfig

logger = logging.getLogger(__name__)

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120

PASSWORD_ENV_PREFIX = "WEBUNTIS_PASSWORD_"


# ─── KOPF UND ABSCHNITTE ───

def _file_header() -> str:
    return (
        "# ============================================\n"
        "# Schuljahres-Sync — Konfiguration\n"
        f"# Stand: {date.today().isoformat()}\n"
        "# ============================================\n"
    )


# Schlüssel → (Überschrift, Erläuterung)
_SECTIONS: dict[str, tuple[str, Optional[str]]] = {
    "schools": ("Schulen", "Pro Schule die angebundenen Verzeichnissysteme (WebUntis)."),
    "store_path": ("Ablage", None),
    "min_occurrences": (
        "Abgleich",
        "Termine mit weniger Vorkommen im Schuljahr gelten als Vertretung/Einzeltermin.",
    ),
    "request_timeout": ("WebUntis", None),
    "log_level": ("Logging", None),
}


def password_env_name(school_id: str) -> str:
    """Name der Umgebungsvariable mit dem WebUntis-Passwort einer Schule."""
    return PASSWORD_ENV_PREFIX + school_id.upper().replace("-", "_")


class ConfigManager:
    DEFAULT_CONFIG = Path("config") / "sync_config.yaml"

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else self.DEFAULT_CONFIG

    def first_run_check(self) -> bool:
        """True, solange noch keine Konfigurationsdatei angelegt wurde."""
        return not self.path.exists()

    # ─── Laden ───

    def load(self, path: Optional[Path] = None) -> SyncConfig:
        """Liest und validiert die Konfiguration.

        Raises:
            FileNotFoundError: Datei fehlt.
            ValueError: Inhalt ist kein gültiges ``SyncConfig``.
        """
        source = Path(path) if path is not None else self.path
        if not source.exists():
            raise FileNotFoundError(
                f"Keine Konfiguration unter {source}.\n"
                f"Einrichtung mit 'python main.py setup' oder 'python main.py config init'."
            )
        with open(source, "r", encoding="utf-8") as f:
            raw = yaml.load(f) or {}

        # CommentedMap → einfache dicts/lists für Pydantic
        plain = json.loads(json.dumps(raw))
        try:
            config = SyncConfig.model_validate(plain)
        except Exception as e:
            raise ValueError(f"Konfigurationsdatei ungültig: {source}\n{e}") from e

        self._apply_env_passwords(config)
        return config

    def _apply_env_passwords(self, config: SyncConfig) -> None:
        for school in config.schools:
            secret = os.environ.get(password_env_name(school.id))
            if not secret:
                continue
            for system in school.webuntis_systems:
                if not system.webuntis_config.password:
                    system.webuntis_config.password = secret
                    logger.debug(f"WebUntis-Passwort für {school.id} aus der Umgebung übernommen")

    # ─── Speichern ───

    def save(self, config: SyncConfig, path: Optional[Path] = None,
             include_passwords: bool = True) -> None:
        """Schreibt die Konfiguration als kommentierte YAML-Datei.

        Mit ``include_passwords=False`` bleiben die Passwortfelder leer, sie
        kommen dann beim Laden aus der Umgebung.
        """
        target = Path(path) if path is not None else self.path
        target.parent.mkdir(parents=True, exist_ok=True)

        doc = self._to_commented_map(config, include_passwords)
        with open(target, "w", encoding="utf-8") as f:
            f.write(_file_header() + "\n")
            yaml.dump(doc, f)

        console.print(f"[green]✓[/green] Konfiguration gespeichert: {target}")

    def _to_commented_map(self, config: SyncConfig, include_passwords: bool) -> CommentedMap:
        data = json.loads(config.model_dump_json())
        if not include_passwords:
            for school in data["schools"]:
                for system in school["systems"]:
                    if system.get("webuntis_config"):
                        system["webuntis_config"]["password"] = ""

        doc = CommentedMap(data)
        for key, (title, note) in _SECTIONS.items():
            if key in doc:
                text = f"\n─── {title} ───"
                if note:
                    text += f"\n{note}"
                doc.yaml_set_comment_before_after_key(key, before=text)
        return doc
