"""Application configuration loaded from environment variables."""

import logging
import sys
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All configuration is loaded from environment variables (or .env file)."""

    # --- Logging ---
    log_level: str = "INFO"

    # --- Breeding engine ---
    breeding_config_path: Path | None = None  # replaces the bundled breeding_config.yaml

    model_config = {"env_prefix": "LADOUM_", "env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Install the root log handler for processes embedding the engine."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )
