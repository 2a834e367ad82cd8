import os
from functools import lru_cache
from typing import Literal

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings

CountingMode = Literal["combined", "modules_only"]


class Settings(BaseSettings):
    counting_mode: CountingMode = Field("combined", alias="PROGRESSION_COUNTING_MODE")
    log_level: str = Field("INFO", alias="PROGRESSION_LOG_LEVEL")
    telemetry_logging: bool = Field(True, alias="PROGRESSION_TELEMETRY_LOGGING")
    ungrouped_label: str = Field("this skill", alias="PROGRESSION_UNGROUPED_LABEL")

    class Config:
        env_file = os.getenv("ENV_FILE", ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache
def get_settings() -> Settings:
    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as exc:
        raise RuntimeError(f"Invalid progression configuration: {exc}") from exc
