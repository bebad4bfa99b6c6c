"""Application settings loaded from environment variables.

Uses Pydantic Settings v2 for validated, type-safe configuration.
The task service address and every other tunable are accessed exclusively
through this module; never call ``os.getenv`` directly elsewhere in the
codebase.

Usage::

    from scrape_bridge.config.settings import get_settings

    settings = get_settings()
    base_url = settings.task_api_url
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application-wide configuration backed by environment variables and an optional .env file.

    Every field has a development default, so the bridge starts without any
    environment.  In deployment at least ``TASK_API_URL`` is expected to be set.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Remote task service
    # ------------------------------------------------------------------

    task_api_url: str = "http://localhost:8000"
    """Base address of the remote scrape task service.

    The bridge calls ``POST {task_api_url}/tasks`` and
    ``GET {task_api_url}/tasks/{task_id}``.
    """

    task_api_timeout: float = 30.0
    """Seconds to wait for the task service before failing the request."""

    # ------------------------------------------------------------------
    # Uploads
    # ------------------------------------------------------------------

    upload_dir: str = "uploads"
    """Directory that holds uploaded spreadsheets while their URLs are read.

    Files are deleted as soon as decoding finishes; the directory itself is
    created on first use.
    """

    max_upload_bytes: int = 50 * 1024 * 1024
    """Largest accepted upload in bytes.  Larger files are rejected with HTTP 400."""

    # ------------------------------------------------------------------
    # Downloads
    # ------------------------------------------------------------------

    download_filename_prefix: str = "carrefour_data"
    """Prefix of the result download filename (``<prefix>_<task_id>.xlsx``)."""

    # ------------------------------------------------------------------
    # Application behaviour
    # ------------------------------------------------------------------

    app_name: str = "Scrape Bridge"
    """Human-readable application name shown in the OpenAPI docs."""

    debug: bool = False
    """Enable FastAPI debug mode.  Never True in production."""

    log_level: str = "INFO"
    """Logging verbosity.  One of: DEBUG, INFO, WARNING, ERROR, CRITICAL."""

    static_dir: str = "public"
    """Directory of static UI assets served at ``/``.  Skipped when missing."""

    allowed_origins: list[str] = ["*"]
    """Origins permitted by the CORS middleware."""

    host: str = "0.0.0.0"
    """Interface bound by ``python -m scrape_bridge``."""

    port: int = 3000
    """Port bound by ``python -m scrape_bridge``."""


@lru_cache
def get_settings() -> Settings:
    """Return the cached application settings singleton.

    Uses ``functools.lru_cache`` so that Pydantic Settings reads the environment
    and .env file exactly once per process lifetime.  In tests, call
    ``get_settings.cache_clear()`` after patching environment variables.

    Returns:
        Settings: The validated settings object.
    """
    return Settings()
