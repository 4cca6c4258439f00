"""Configuration management for the Signal media dump."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env early so BaseSettings can pick values up seamlessly.
load_dotenv()

DATABASE_FILENAME = "database.sqlite"


def _split_list(value: str | Sequence[str] | None) -> list[str]:
    """Turn delimiter-separated env strings into cleaned lists."""
    if value is None:
        return []
    if isinstance(value, str):
        items = re.split(r"[;,]", value)
    else:
        items = list(value)
    cleaned: list[str] = []
    for item in items:
        trimmed = str(item).strip()
        if trimmed:
            cleaned.append(trimmed)
    return cleaned


class Settings(BaseSettings):
    """App configuration derived from environment variables."""

    backup_dir: Path | None = Field(None, alias="SIGNAL_BACKUP_DIR")
    database_path: Path | None = Field(None, alias="SIGNAL_DATABASE")
    output_dir: Path | None = Field(None, alias="MEDIA_OUTPUT_DIR")
    date_ranges_raw: str = Field("", alias="MEDIA_DATE_RANGES")
    threads_raw: str = Field("", alias="MEDIA_THREADS")
    overwrite: bool = Field(False, alias="MEDIA_OVERWRITE")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    verbose: bool = Field(False, alias="VERBOSE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("backup_dir", "database_path", "output_dir", mode="before")
    @classmethod
    def _empty_str_to_none(cls, value):
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    @property
    def database_file(self) -> Path | None:
        """Explicit database path, or the one inside the decrypted backup dir."""
        if self.database_path:
            return self.database_path
        if self.backup_dir:
            return self.backup_dir / DATABASE_FILENAME
        return None

    @property
    def date_ranges(self) -> list[str]:
        # Dates contain no delimiter characters, so splitting keeps each token intact.
        return _split_list(self.date_ranges_raw)

    @property
    def threads(self) -> list[int]:
        return [int(item) for item in _split_list(self.threads_raw)]
