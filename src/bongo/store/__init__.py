"""Store module for Bongo.

This module provides:
- Bongo, the document store facade
- BongoService, a holder for services owning a store
"""

from bongo.store.store import Bongo, BongoService, normalize_path

__all__ = [
    "Bongo",
    "BongoService",
    "normalize_path",
]
