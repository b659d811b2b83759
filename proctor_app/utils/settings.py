"""Runtime settings, overridable through ``PROCTOR_*`` environment variables or a ``.env`` file."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from proctor_app.constants.assessment_constants import (
    CLASSIFICATION_DURATION_S,
    CLASSIFICATION_FEEDBACK_S,
)
from proctor_app.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT


class ProctorSettings(BaseSettings):
    """Configuration for the proctor console and candidate server."""

    model_config = SettingsConfigDict(
        env_prefix="PROCTOR_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    HOST: str = DEFAULT_HOST
    PORT: int = DEFAULT_PORT
    LOG_LEVEL: str = "INFO"

    # Completion webhook (empty disables notification)
    WEBHOOK_URL: str = ""
    WEBHOOK_TIMEOUT_S: float = 10.0

    # Classification phase
    CLASSIFICATION_DURATION_S: int = CLASSIFICATION_DURATION_S
    CLASSIFICATION_FEEDBACK_S: int = CLASSIFICATION_FEEDBACK_S

    # Store snapshot (empty keeps data in memory only)
    DATA_FILE: str = ""

    @property
    def data_path(self) -> Path | None:
        return Path(self.DATA_FILE).expanduser() if self.DATA_FILE else None


@lru_cache(maxsize=1)
def get_settings() -> ProctorSettings:
    return ProctorSettings()
