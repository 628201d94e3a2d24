"""
Tests for configuration loading (sheetround/config/settings.py).

Environment variables are patched with monkeypatch; reset_settings() clears
the cached singleton around every test.
"""

import pytest

from sheetround.config.settings import (
    DEFAULT_SOURCE_URL,
    ExportSettings,
    Settings,
    SourceSettings,
    get_settings,
    reset_settings,
)

ENV_VARS = [
    "SHEETROUND_SOURCE_URL",
    "SHEETROUND_TIMEOUT_SECONDS",
    "SHEETROUND_USER_AGENT",
    "SHEETROUND_EXPORT_FORMAT",
    "SHEETROUND_SHEET_NAME",
    "SHEETROUND_EXPORT_FILENAME",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


def test_defaults():
    settings = Settings.from_env()

    assert settings.source.url == DEFAULT_SOURCE_URL
    assert settings.source.timeout_seconds == 30
    assert settings.export.format_tag == "xlsx"
    assert settings.export.sheet_name == "Sheet1"
    assert settings.export.filename == "president.xlsx"
    assert settings.log_level == "INFO"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("SHEETROUND_SOURCE_URL", "https://sheets.test/data.csv")
    monkeypatch.setenv("SHEETROUND_TIMEOUT_SECONDS", "5")
    monkeypatch.setenv("SHEETROUND_EXPORT_FORMAT", " .CSV ")
    monkeypatch.setenv("SHEETROUND_SHEET_NAME", "Presidents")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings.from_env()

    assert settings.source.url == "https://sheets.test/data.csv"
    assert settings.source.timeout_seconds == 5
    assert settings.export.format_tag == "csv"
    assert settings.export.sheet_name == "Presidents"
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize("name, value", [
    ("SHEETROUND_TIMEOUT_SECONDS", "soon"),
    ("SHEETROUND_TIMEOUT_SECONDS", "0"),
    ("SHEETROUND_EXPORT_FORMAT", "ods"),
    ("SHEETROUND_SHEET_NAME", "x" * 32),
    ("LOG_LEVEL", "LOUD"),
])
def test_invalid_env_fails_fast(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError) as exc_info:
        Settings.from_env()
    assert name in str(exc_info.value) or "timeout_seconds" in str(exc_info.value)


def test_direct_construction_validates():
    with pytest.raises(ValueError):
        SourceSettings(url="")
    with pytest.raises(ValueError):
        ExportSettings(sheet_name="")
    with pytest.raises(ValueError):
        ExportSettings(filename="")


def test_get_settings_is_cached_until_reset(monkeypatch):
    first = get_settings()
    assert get_settings() is first

    monkeypatch.setenv("SHEETROUND_SHEET_NAME", "Reloaded")
    assert get_settings().export.sheet_name == "Sheet1"

    reset_settings()
    assert get_settings().export.sheet_name == "Reloaded"


def test_export_formats_follow_codec_formats():
    from sheetround.config import settings as settings_module
    from sheetround.data import io as io_module

    assert settings_module.SUPPORTED_FORMATS is io_module.SUPPORTED_FORMATS
    for format_tag in io_module.SUPPORTED_FORMATS:
        assert ExportSettings(format_tag=format_tag).format_tag == format_tag
