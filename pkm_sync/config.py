from __future__ import annotations

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings

from pkm_sync.pipeline_config import ErrorStrategy, ThreadMode


class Settings(BaseSettings):
    """Application settings validated via Pydantic.

    Values are loaded from ``PKM_SYNC_*`` environment variables and/or a
    .env file. They supply the defaults for pipeline and transformer
    options that a sync configuration leaves out.
    """

    log_level: str = "INFO"

    # Pipeline defaults
    error_strategy: ErrorStrategy = ErrorStrategy.FAIL_FAST

    # Content cleanup
    signature_detection_threshold: int = 10

    # Thread grouping
    thread_mode: ThreadMode = ThreadMode.INDIVIDUAL
    thread_summary_length: int = 5

    model_config = {
        "env_prefix": "PKM_SYNC_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load the ``PKM_SYNC_*`` settings once per process.

    An unreadable .env file is skipped and only the environment is used.
    Call ``get_settings.cache_clear()`` after changing the environment.
    """
    try:
        return Settings()
    except OSError:
        # If .env is unreadable, build settings from env vars only.
        return Settings(_env_file=None)  # type: ignore[call-arg]


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for command-line use of the package."""
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
