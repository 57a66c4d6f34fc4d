"""Tests for configuration and the engine factory."""

from decimal import Decimal
from pathlib import Path

import pytest

from ledger.config import LedgerSettings, get_settings
from ledger.engine import create_engine
from ledger.models.entities import AccountType


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in [
        "LEDGER_DATA_DIR",
        "LEDGER_DATA_FILE_NAME",
        "LEDGER_BACKGROUND_PERSISTENCE",
        "LEDGER_EXPORT_DIR",
        "LEDGER_LOG_LEVEL",
    ]:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """LedgerSettings loading."""

    def test_defaults(self):
        settings = LedgerSettings(_env_file=None)
        assert settings.data_file_name == "appdata_v1.json"
        assert settings.background_persistence is True
        assert settings.log_level == "INFO"
        assert settings.data_file_path.name == "appdata_v1.json"

    def test_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LEDGER_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("LEDGER_BACKGROUND_PERSISTENCE", "false")
        monkeypatch.setenv("LEDGER_LOG_LEVEL", "debug")

        settings = LedgerSettings(_env_file=None)

        assert settings.data_file_path == tmp_path / "appdata_v1.json"
        assert settings.background_persistence is False
        assert settings.log_level == "DEBUG"

    def test_rejects_bad_values(self):
        with pytest.raises(ValueError):
            LedgerSettings(_env_file=None, log_level="loud")
        with pytest.raises(ValueError):
            LedgerSettings(_env_file=None, data_file_name="nested/file.json")
        with pytest.raises(ValueError):
            LedgerSettings(_env_file=None, flush_timeout_seconds=0)

    def test_export_directory_fallback(self, tmp_path):
        assert isinstance(LedgerSettings(_env_file=None).export_directory, Path)
        settings = LedgerSettings(_env_file=None, export_dir=tmp_path)
        assert settings.export_directory == tmp_path

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestCreateEngine:
    """The factory wires a file-backed engine."""

    @pytest.mark.parametrize("background", [True, False])
    def test_state_survives_restart(self, tmp_path, background):
        settings = LedgerSettings(
            _env_file=None,
            data_dir=tmp_path,
            background_persistence=background,
            log_json=False,
        )

        engine = create_engine(settings)
        checking = engine.add_account("Checking", AccountType.CHECKING)
        groceries = engine.add_category("Groceries")
        engine.set_budget(groceries.id, "2026-02", Decimal("300"))
        assert engine.close() is True

        reopened = create_engine(settings)

        assert reopened.accounts == (checking,)
        assert reopened.categories == (groceries,)
        assert reopened.budget_for(groceries.id, "2026-02") == Decimal("300")
        reopened.close()

    def test_fresh_install_is_empty(self, tmp_path):
        settings = LedgerSettings(_env_file=None, data_dir=tmp_path / "new")
        engine = create_engine(settings)
        assert engine.snapshot().is_empty
        assert not settings.data_file_path.exists()
        engine.close()
