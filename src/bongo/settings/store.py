"""Store settings for Bongo."""

from pydantic_settings import SettingsConfigDict

from bongo.settings.base import BaseAppSettings


class StoreSettings(BaseAppSettings):
    """Settings for the SQLite-backed document store."""

    model_config = SettingsConfigDict(env_prefix="BONGO_")

    path: str = "data/bongo"
    echo_sql: bool = False
    log_level: str = "INFO"
