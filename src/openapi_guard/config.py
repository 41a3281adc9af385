"""Runtime configuration read from environment variables or a .env file.

Priority: environment variables > .env file > defaults.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="OPENAPI_GUARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    CONTRACT_PATH: Path | None = Field(
        default=None,
        description="OpenAPI contract (YAML or JSON) the traffic is checked against",
    )
    PATH_PREFIX: str = Field(
        default="",
        description="Prefix stripped from every request path before contract lookup",
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}")
        return v_upper

    @property
    def path_prefix_bytes(self) -> bytes:
        return self.PATH_PREFIX.encode("utf-8")


@lru_cache
def get_settings() -> Settings:
    return Settings()
