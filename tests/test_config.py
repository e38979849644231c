"""Tests für das Konfigurationssystem."""

from pathlib import Path

import pytest

from config.schema import (
    DirectorySystem,
    SchoolEntry,
    SyncConfig,
    SystemType,
    WebUntisConfig,
)
from config.defaults import (
    WEBUNTIS_DAY_NAMES,
    WEEKDAY_NAMES,
    default_school,
    default_sync_config,
)
from config.manager import ConfigManager, password_env_name


def _webuntis(**kw) -> DirectorySystem:
    cfg = dict(url="https://mese.webuntis.com", schoolname="s", user="u", password="p")
    cfg.update(kw)
    return DirectorySystem(type=SystemType.WEBUNTIS, webuntis_config=WebUntisConfig(**cfg))


# ─── DEFAULT-KONFIGURATION ────────────────────────────────────────────────────

class TestDefaultConfig:
    def test_default_school_valid(self):
        school = default_school()
        assert school.id == "muster-gymnasium"
        assert len(school.webuntis_systems) == 1

    def test_default_sync_config(self):
        config = default_sync_config()
        assert config.min_occurrences == 2
        assert config.room_limit is None
        assert config.timetable_element_type == 4
        assert len(config.schools) == 1

    def test_weekday_tables(self):
        assert WEEKDAY_NAMES[0] == "Montag"
        assert WEBUNTIS_DAY_NAMES[1] == "Sonntag"
        assert WEBUNTIS_DAY_NAMES[7] == "Samstag"


# ─── VALIDIERUNG ──────────────────────────────────────────────────────────────

class TestValidation:
    def test_webuntis_requires_config(self):
        with pytest.raises(Exception, match="webuntis_config"):
            DirectorySystem(type=SystemType.WEBUNTIS)

    def test_ldap_without_config(self):
        system = DirectorySystem(type=SystemType.LDAP)
        assert system.webuntis_config is None

    def test_webuntis_systems_filtered(self):
        school = SchoolEntry(
            id="a", name="A",
            systems=[DirectorySystem(type=SystemType.LDAP), _webuntis()],
        )
        assert [s.type for s in school.webuntis_systems] == [SystemType.WEBUNTIS]

    def test_duplicate_school_ids(self):
        with pytest.raises(Exception, match="doppelt"):
            SyncConfig(schools=[
                SchoolEntry(id="a", name="A"),
                SchoolEntry(id="a", name="B"),
            ])

    def test_min_occurrences_positive(self):
        with pytest.raises(Exception):
            SyncConfig(min_occurrences=0)

    def test_get_school_by_id_or_name(self):
        config = SyncConfig(schools=[SchoolEntry(id="a", name="Alpha")])
        assert config.get_school("a").name == "Alpha"
        assert config.get_school("Alpha").id == "a"
        assert config.get_school("x") is None

    def test_password_hidden_in_repr(self):
        cfg = WebUntisConfig(url="u", schoolname="s", user="u", password="geheim")
        assert "geheim" not in repr(cfg)


# ─── CONFIG-MANAGER ───────────────────────────────────────────────────────────

class TestConfigManager:
    def test_first_run(self, tmp_path: Path):
        mgr = ConfigManager(tmp_path / "sync_config.yaml")
        assert mgr.first_run_check()

    def test_save_and_load(self, tmp_path: Path):
        path = tmp_path / "sync_config.yaml"
        mgr = ConfigManager(path)
        config = default_sync_config()
        config.room_limit = 3
        mgr.save(config)

        assert not mgr.first_run_check()
        loaded = mgr.load()
        assert loaded == config
        assert loaded.schools[0].webuntis_systems[0].webuntis_config.url == "https://mese.webuntis.com"

    def test_yaml_has_comments(self, tmp_path: Path):
        path = tmp_path / "sync_config.yaml"
        ConfigManager(path).save(default_sync_config())
        text = path.read_text(encoding="utf-8")
        assert "Schuljahres-Sync" in text
        assert "─── Abgleich ───" in text
        assert "min_occurrences: 2" in text

    def test_load_missing(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            ConfigManager(tmp_path / "fehlt.yaml").load()

    def test_load_invalid(self, tmp_path: Path):
        path = tmp_path / "sync_config.yaml"
        path.write_text("schools:\n  - id: a\n    name: A\n  - id: a\n    name: B\n", encoding="utf-8")
        with pytest.raises(ValueError, match="ungültig"):
            ConfigManager(path).load()

    def test_password_from_environment(self, tmp_path: Path, monkeypatch):
        path = tmp_path / "sync_config.yaml"
        config = default_sync_config()
        config.schools[0].systems[0].webuntis_config.password = "geheim"
        ConfigManager(path).save(config, include_passwords=False)
        assert "geheim" not in path.read_text(encoding="utf-8")

        monkeypatch.setenv(password_env_name("muster-gymnasium"), "aus-env")
        loaded = ConfigManager(path).load()
        assert loaded.schools[0].systems[0].webuntis_config.password == "aus-env"

    def test_env_does_not_override_file_password(self, tmp_path: Path, monkeypatch):
        path = tmp_path / "sync_config.yaml"
        config = default_sync_config()
        config.schools[0].systems[0].webuntis_config.password = "aus-datei"
        ConfigManager(path).save(config)

        monkeypatch.setenv(password_env_name("muster-gymnasium"), "aus-env")
        loaded = ConfigManager(path).load()
        assert loaded.schools[0].systems[0].webuntis_config.password == "aus-datei"

    def test_password_env_name(self):
        assert password_env_name("muster-gymnasium") == "WEBUNTIS_PASSWORD_MUSTER_GYMNASIUM"
