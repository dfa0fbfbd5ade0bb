# core/config.py
from __future__ import annotations

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.events import DEFAULT_MAX_DATA_SIZE

# Project root
BASE_DIR = Path(__file__).resolve().parents[1]


class UnexpectedChunkPolicy(str, Enum):
    skip = "skip"
    abort = "abort"


class Settings(BaseSettings):
    """
    SMF decoder settings.

    Reads from:
    - environment variables
    - .env in project root
    """

    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    # ---- Environment / server ----
    app_env: str = Field(default="development", validation_alias="APP_ENV")
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=8000, validation_alias="PORT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    cors_allow_origins: Optional[str] = Field(default=None, validation_alias="CORS_ALLOW_ORIGINS")

    # ---- Decoder ----
    max_event_data_size: int = Field(default=DEFAULT_MAX_DATA_SIZE, validation_alias="MAX_EVENT_DATA_SIZE")
    unexpected_chunk_policy: UnexpectedChunkPolicy = Field(
        default=UnexpectedChunkPolicy.skip, validation_alias="UNEXPECTED_CHUNK_POLICY"
    )
    sysex_mode: Literal["scan", "length"] = Field(default="scan", validation_alias="SYSEX_MODE")

    # ---- Upload safety ----
    max_upload_size_mb: int = Field(default=10, validation_alias="MAX_UPLOAD_SIZE_MB")

    def model_post_init(self, __context) -> None:
        if self.max_event_data_size <= 0:
            self.max_event_data_size = DEFAULT_MAX_DATA_SIZE

        if self.max_upload_size_mb <= 0:
            self.max_upload_size_mb = 10

        self.log_level = (self.log_level or "INFO").strip().upper()

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
