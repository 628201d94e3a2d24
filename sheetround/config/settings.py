"""
Configuration settings for the sheet round-trip pipeline.

**Conceptual**: This module provides strongly-typed configuration objects that
load from environment variables (via .env files). All settings are validated
when they are built, so a bad timeout or an unknown export format fails at
startup instead of halfway through an export.

**Why centralized config?**
  - Single source of truth for the source URL, export format, sheet name, etc.
  - Easy to test (inject fake settings instead of reading from environment).
  - Fail-fast validation (unknown format -> clear error at startup).

This module uses python-dotenv to load .env files and dataclasses for type safety.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from sheetround.data.io import SUPPORTED_FORMATS

# Load .env from project root (dev/local environments). Missing file is fine.
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


# Default sample sheet (same presidents sheet the demo UI fetched)
DEFAULT_SOURCE_URL = "https://sheetjs.com/pres.xlsx"


@dataclass(frozen=True)
class SourceSettings:
    """
    Configuration for fetching sheet bytes over HTTP.

    **Conceptual**: The loader itself only needs bytes and a format tag. How
    those bytes are fetched (URL, timeout, user agent) is configured here and
    consumed by HttpSheetSource.

    Attributes:
        url: Default URL to fetch when no explicit source is given.
        timeout_seconds: HTTP request timeout in seconds (default 30).
        user_agent: User-Agent header sent with every request.
    """
    url: str = DEFAULT_SOURCE_URL
    timeout_seconds: int = 30
    user_agent: str = "sheetround/1.0"

    def __post_init__(self):
        """Validate settings after initialization."""
        if not self.url:
            raise ValueError(
                "SHEETROUND_SOURCE_URL is empty. "
                "Unset it to use the default sample sheet or point it at a spreadsheet URL."
            )
        if self.timeout_seconds <= 0:
            raise ValueError(
                f"timeout_seconds must be positive, got: {self.timeout_seconds}"
            )

    @classmethod
    def from_env(cls) -> "SourceSettings":
        """
        Load source settings from environment variables.

        **Environment variables**:
          - SHEETROUND_SOURCE_URL (optional): default sheet URL.
          - SHEETROUND_TIMEOUT_SECONDS (optional): HTTP timeout, defaults to 30.
          - SHEETROUND_USER_AGENT (optional): defaults to "sheetround/1.0".

        Raises:
            ValueError: If the timeout is not a positive integer.
        """
        url = os.getenv("SHEETROUND_SOURCE_URL", DEFAULT_SOURCE_URL)
        timeout_str = os.getenv("SHEETROUND_TIMEOUT_SECONDS", "30")
        user_agent = os.getenv("SHEETROUND_USER_AGENT", "sheetround/1.0")

        try:
            timeout_seconds = int(timeout_str)
        except ValueError:
            raise ValueError(
                f"SHEETROUND_TIMEOUT_SECONDS must be an integer, got: {timeout_str}"
            )

        return cls(
            url=url,
            timeout_seconds=timeout_seconds,
            user_agent=user_agent,
        )


@dataclass(frozen=True)
class ExportSettings:
    """
    Configuration for writing the edited table back out.

    Attributes:
        format_tag: Output container format ("xlsx" or "csv").
        sheet_name: Name of the single sheet written to xlsx output.
        filename: Default output file name used by the actions.
    """
    format_tag: str = "xlsx"
    sheet_name: str = "Sheet1"
    filename: str = "president.xlsx"

    def __post_init__(self):
        """Validate settings after initialization."""
        if self.format_tag not in SUPPORTED_FORMATS:
            raise ValueError(
                f"SHEETROUND_EXPORT_FORMAT must be one of {list(SUPPORTED_FORMATS)}, "
                f"got: {self.format_tag!r}"
            )
        if not self.sheet_name:
            raise ValueError("SHEETROUND_SHEET_NAME cannot be empty")
        # Excel caps sheet titles at 31 characters
        if len(self.sheet_name) > 31:
            raise ValueError(
                f"SHEETROUND_SHEET_NAME must be at most 31 characters, got {len(self.sheet_name)}"
            )
        if not self.filename:
            raise ValueError("SHEETROUND_EXPORT_FILENAME cannot be empty")

    @classmethod
    def from_env(cls) -> "ExportSettings":
        """
        Load export settings from environment variables.

        **Environment variables**:
          - SHEETROUND_EXPORT_FORMAT (optional): "xlsx" (default) or "csv".
          - SHEETROUND_SHEET_NAME (optional): defaults to "Sheet1".
          - SHEETROUND_EXPORT_FILENAME (optional): defaults to "president.xlsx".
        """
        return cls(
            format_tag=os.getenv("SHEETROUND_EXPORT_FORMAT", "xlsx").strip().lower().lstrip("."),
            sheet_name=os.getenv("SHEETROUND_SHEET_NAME", "Sheet1"),
            filename=os.getenv("SHEETROUND_EXPORT_FILENAME", "president.xlsx"),
        )


@dataclass(frozen=True)
class Settings:
    """
    Global settings for sheetround.

    **Usage pattern**:
      ```python
      from sheetround.config.settings import get_settings

      settings = get_settings()
      source = HttpSheetSource(settings.source)
      ```

    Attributes:
        source: HTTP source settings.
        export: Export settings.
        log_level: Root logging level name (default "INFO").
    """
    source: SourceSettings = field(default_factory=SourceSettings)
    export: ExportSettings = field(default_factory=ExportSettings)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Load global settings from environment variables.

        Raises:
            ValueError: If any subsystem setting is invalid.
        """
        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"LOG_LEVEL must be a logging level name, got: {log_level}")

        return cls(
            source=SourceSettings.from_env(),
            export=ExportSettings.from_env(),
            log_level=log_level,
        )


# Lazily loaded singleton. Tests can build Settings(...) directly instead.
_default_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the global settings singleton.

    Settings are loaded from environment on first call, then cached for reuse.
    Call reset_settings() to force a reload (tests do this after patching
    environment variables).
    """
    global _default_settings

    if _default_settings is None:
        _default_settings = Settings.from_env()

    return _default_settings


def reset_settings():
    """Reset the global settings singleton (for testing)."""
    global _default_settings
    _default_settings = None
