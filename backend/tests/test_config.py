"""Environment-driven settings."""

from pathlib import Path

import pytest

from bloxcore.config import get_settings


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "TESTING",
        "ENVIRONMENT",
        "BLOX_VALIDATE_STATE",
        "BLOX_STORAGE_DIR",
        "BLOX_DATABASE_URL",
        "BLOX_LOG_LEVEL",
        "BLOX_MAX_LOG_ENTRIES",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    settings = get_settings()

    assert settings.testing is False
    assert settings.validate_state is True
    assert settings.database_url == "sqlite:///./bloxcore.db"
    assert settings.log_level == "INFO"
    assert settings.max_log_entries == 200
    assert settings.storage_dir == Path("~/.bloxcore").expanduser()


def test_validation_defaults_off_in_production(clean_env):
    clean_env.setenv("ENVIRONMENT", "production")
    assert get_settings().validate_state is False

    clean_env.setenv("BLOX_VALIDATE_STATE", "yes")
    assert get_settings().validate_state is True


def test_values_are_read_on_every_call(clean_env, tmp_path):
    clean_env.setenv("TESTING", "1")
    clean_env.setenv("BLOX_STORAGE_DIR", str(tmp_path))
    clean_env.setenv("BLOX_MAX_LOG_ENTRIES", "25")

    settings = get_settings()
    assert settings.testing is True
    assert settings.storage_dir == tmp_path
    assert settings.max_log_entries == 25

    clean_env.setenv("BLOX_MAX_LOG_ENTRIES", "not-a-number")
    assert get_settings().max_log_entries == 200

    clean_env.setenv("BLOX_MAX_LOG_ENTRIES", "0")
    assert get_settings().max_log_entries == 1


def test_override_rejects_unknown_fields(settings):
    settings.override(max_log_entries=10)
    assert settings.max_log_entries == 10

    with pytest.raises(AttributeError):
        settings.override(nonsense=True)
