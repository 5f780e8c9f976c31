# tests/test_config.py
from pathlib import Path

import pytest

from multitoken.config import DEFAULT_STATE_PATH, LedgerSettings, load_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("MULTITOKEN_CONFIG", "MULTITOKEN_GUARD_ALL", "MULTITOKEN_LOG_LEVEL", "MULTITOKEN_STATE"):
        monkeypatch.delenv(key, raising=False)


class TestDefaults:
    def test_no_file_no_env(self):
        assert load_settings() == LedgerSettings()

    def test_default_values(self):
        s = LedgerSettings()
        assert s.guard_all_mutations is False
        assert s.log_level == "INFO"
        assert s.state_path == DEFAULT_STATE_PATH


class TestYaml:
    def test_reads_all_keys(self, tmp_path):
        cfg = tmp_path / "ledger.yaml"
        cfg.write_text(
            "guard_all_mutations: true\nlog_level: debug\nstate_path: /var/lib/ledger.json\n",
            encoding="utf-8",
        )
        s = load_settings(cfg)
        assert s.guard_all_mutations is True
        assert s.log_level == "DEBUG"
        assert s.state_path == Path("/var/lib/ledger.json")

    def test_empty_file_gives_defaults(self, tmp_path):
        cfg = tmp_path / "ledger.yaml"
        cfg.write_text("", encoding="utf-8")
        assert load_settings(cfg) == LedgerSettings()

    def test_unknown_key_rejected(self, tmp_path):
        cfg = tmp_path / "ledger.yaml"
        cfg.write_text("supply_cap: 10\n", encoding="utf-8")
        with pytest.raises(ValueError, match="unknown settings"):
            load_settings(cfg)

    def test_non_mapping_rejected(self, tmp_path):
        cfg = tmp_path / "ledger.yaml"
        cfg.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_settings(cfg)

    def test_bad_level_rejected(self, tmp_path):
        cfg = tmp_path / "ledger.yaml"
        cfg.write_text("log_level: chatty\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_settings(cfg)

    def test_config_path_from_env(self, tmp_path, monkeypatch):
        cfg = tmp_path / "ledger.yaml"
        cfg.write_text("guard_all_mutations: yes\n", encoding="utf-8")
        monkeypatch.setenv("MULTITOKEN_CONFIG", str(cfg))
        assert load_settings().guard_all_mutations is True


class TestEnvOverrides:
    def test_env_beats_file(self, tmp_path, monkeypatch):
        cfg = tmp_path / "ledger.yaml"
        cfg.write_text("guard_all_mutations: true\nlog_level: DEBUG\n", encoding="utf-8")
        monkeypatch.setenv("MULTITOKEN_GUARD_ALL", "0")
        monkeypatch.setenv("MULTITOKEN_LOG_LEVEL", "warning")
        monkeypatch.setenv("MULTITOKEN_STATE", str(tmp_path / "s.json"))
        s = load_settings(cfg)
        assert s.guard_all_mutations is False
        assert s.log_level == "WARNING"
        assert s.state_path == tmp_path / "s.json"

    def test_bad_bool_rejected(self, monkeypatch):
        monkeypatch.setenv("MULTITOKEN_GUARD_ALL", "maybe")
        with pytest.raises(ValueError):
            load_settings()
