"""Runtime settings, read from ``CARTSYNC_*`` environment variables or ``.env``."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_prefix="CARTSYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Resolved against the working directory of the running process
    data_dir: Path = Field(default_factory=lambda: Path.cwd() / "data")
    cart_backend: Literal["json", "sql"] = "json"
    database_url: str | None = None

    suspicious_quantity_threshold: int = Field(default=10, ge=1)
    quantity_hard_cap: int = Field(default=50, ge=1)
    suspicious_reset_quantity: int = Field(default=1, ge=1)

    log_level: str = "INFO"
    log_json: bool = False

    @model_validator(mode="after")
    def _check_thresholds(self) -> Settings:
        if self.quantity_hard_cap < self.suspicious_quantity_threshold:
            raise ValueError("quantity_hard_cap must be >= suspicious_quantity_threshold")
        if self.suspicious_reset_quantity > self.suspicious_quantity_threshold:
            raise ValueError(
                "suspicious_reset_quantity must be <= suspicious_quantity_threshold"
            )
        return self

    @property
    def resolved_database_url(self) -> str:
        return self.database_url or f"sqlite:///{self.data_dir / 'cart.db'}"


@lru_cache
def get_settings() -> Settings:
    return Settings()
