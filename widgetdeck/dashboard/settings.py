"""Dashboard configuration loaded from WIDGETDECK_* environment variables."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DashboardSettings(BaseSettings):
    """Widgetdeck settings.

    All fields are read from environment variables with the ``WIDGETDECK_``
    prefix.  For example, ``WIDGETDECK_USE_LOCAL_STORAGE=false`` maps to
    ``use_local_storage``.
    """

    model_config = SettingsConfigDict(
        env_prefix="WIDGETDECK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"

    # -- Backend selection -----------------------------------------------------
    use_local_storage: bool = True
    """Prefer the embedded backend.  Ignored (forced on) without remote credentials."""

    remote_url: str | None = None
    """Base URL of the remote SQL service; ``/query`` and ``/execute`` are appended."""

    remote_token: SecretStr | None = None
    remote_database_id: str | None = None

    remote_timeout: float | None = None
    """Seconds before a remote call gives up.  ``None`` waits indefinitely."""

    # -- Embedded image --------------------------------------------------------
    data_root: str = "./data"
    db_file: str = "db/dashboard.sqlite"
    """Embedded image location, relative to ``data_root``."""

    seed_sample_data: bool = True

    image_sink: Literal["local", "http", "s3"] = "local"

    # HTTP (only when image_sink = "http")
    persist_url: str | None = None
    """Base URL of a SQL service exposing ``/api/save-db`` and ``/db/dashboard.sqlite``."""

    # S3 (only when image_sink = "s3")
    s3_endpoint: str | None = None
    s3_bucket: str | None = None
    s3_region: str | None = None
    s3_access_key: str | None = None
    s3_secret_key: SecretStr | None = None
    s3_path_style: bool = False
    s3_key: str = "db/dashboard.sqlite"

    # -- SQL service -----------------------------------------------------------
    service_db_file: str = "service/remote.sqlite"
    auth_token: str | None = None
    """Bearer token required by the SQL service.  Open access if empty."""

    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8000

    # -- Helpers ---------------------------------------------------------------

    @property
    def remote_configured(self) -> bool:
        return bool(self.remote_url) and self.remote_token is not None and bool(self.remote_token.get_secret_value())

    @property
    def db_path(self) -> Path:
        return Path(self.data_root) / self.db_file

    @property
    def service_db_path(self) -> Path:
        return Path(self.data_root) / self.service_db_file


def get_settings() -> DashboardSettings:
    """Return a cached settings instance.

    Reads from environment variables and ``.env`` on first call, then returns
    the same object.  Call ``_get_settings_cached.cache_clear()`` in tests to force a
    re-read after overriding env vars.
    """
    return _get_settings_cached()


@lru_cache(maxsize=1)
def _get_settings_cached() -> DashboardSettings:
    return DashboardSettings()
