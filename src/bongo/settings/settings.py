"""Aggregated settings for Bongo."""

from functools import lru_cache
from typing import Optional

from bongo.settings.store import StoreSettings


class Settings:
    """Aggregated settings for all Bongo components."""

    def __init__(
        self,
        store: Optional[StoreSettings] = None,
    ):
        self.store = store or StoreSettings()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
