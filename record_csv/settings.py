from __future__ import annotations

import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    max_upload_bytes: int = Field(default=5 * 1024 * 1024, validation_alias="RECORD_CSV_MAX_UPLOAD_BYTES")
    log_level: str = Field(default="INFO", validation_alias="RECORD_CSV_LOG_LEVEL")
    allowed_origins: str = Field(default="*", validation_alias="RECORD_CSV_ALLOWED_ORIGINS")


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
