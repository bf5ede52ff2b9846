"""Tests for src/config: Settings validation and logging setup."""

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from src.config import Settings, configure_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    level, handlers = root.level, list(root.handlers)
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.save_backend == "file"
        assert settings.save_path == Path("saves/incredicer_save.json")
        assert settings.autosave_interval == 60.0
        assert settings.prestige_base_requirement == 1000.0

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("AUTOSAVE_INTERVAL", "15")
        monkeypatch.setenv("PLAYER_ID", "player-7")
        settings = Settings(_env_file=None)
        assert settings.autosave_interval == 15.0
        assert settings.player_id == "player-7"

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, autosave_interval=0)

    def test_rejects_unknown_backend(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, save_backend="floppy")

    def test_rejects_flat_scaling_factor(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, prestige_scaling_factor=1.0)

    def test_cloud_backend_requires_credentials(self):
        with pytest.raises(ValidationError, match="SUPABASE_URL"):
            Settings(_env_file=None, save_backend="supabase")

    def test_cloud_backend_with_credentials(self):
        settings = Settings(
            _env_file=None,
            save_backend="supabase",
            supabase_url="https://example.supabase.co",
            supabase_anon_key="anon",
        )
        assert settings.save_backend == "supabase"


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_debug_overrides_level(self):
        level = configure_logging(Settings(_env_file=None, debug=True, log_level="ERROR"))
        assert level == logging.DEBUG
        assert logging.getLogger().level == logging.DEBUG

    def test_named_level(self):
        assert configure_logging(Settings(_env_file=None, log_level="warning")) == logging.WARNING

    def test_unknown_level_falls_back_to_info(self):
        assert configure_logging(Settings(_env_file=None, log_level="chatty")) == logging.INFO
