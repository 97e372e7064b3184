"""Configuration for the credential prover.

Circuit constants are fixed by the deployed circuit. Runtime settings
(artifact locations, backend binary, logging) come from the environment
with the ``ZKCRED_`` prefix or from a ``.env`` file.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Circuit constants
ACCOUNTS_TREE_HEIGHT = 20
REGISTRY_TREE_HEIGHT = 20

DEFAULT_WASM_PATH = Path("/img/hydra-s1.wasm")
DEFAULT_ZKEY_PATH = Path("/img/hydra-s1.zkey")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Runtime settings."""

    model_config = SettingsConfigDict(
        env_prefix="ZKCRED_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    wasm_path: Path = Field(default=DEFAULT_WASM_PATH, description="Witness generator program")
    zkey_path: Path = Field(default=DEFAULT_ZKEY_PATH, description="Proving key file")
    snarkjs_binary: str = Field(default="snarkjs", description="snarkjs executable")
    log_level: str = Field(default="INFO", description="Root log level")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, loaded once."""
    return Settings()


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure root logging from settings."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
