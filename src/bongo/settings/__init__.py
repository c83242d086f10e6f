"""Settings module for Bongo."""

from bongo.settings.base import BaseAppSettings
from bongo.settings.store import StoreSettings
from bongo.settings.settings import Settings, get_settings

__all__ = [
    "BaseAppSettings",
    "StoreSettings",
    "Settings",
    "get_settings",
]
