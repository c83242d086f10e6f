"""Collision-resistant, lexically sortable document ids.

An id is three fixed-width lowercase hex fields:

    tttttttt rrrrrrrr cccccc
    seconds  random   counter

so plain string comparison orders ids by creation second.
"""

from __future__ import annotations

import secrets
import threading
import time
from typing import Callable, Optional

TIMESTAMP_BITS = 32
RANDOM_BITS = 32
COUNTER_BITS = 24

_COUNTER_MODULUS = 1 << COUNTER_BITS
_TIMESTAMP_MASK = (1 << TIMESTAMP_BITS) - 1


class IdGenerator:
    """Generates `_id` values without any cross-process coordination.
    
    The counter is shared by every caller of one generator instance and
    wraps modulo 2**24. It starts at a random offset so that two processes
    started in the same second are unlikely to walk the same sequence.
    
    Example:
        ```python
        generator = IdGenerator()
        generator.generate()  # '6710c2f49a1b3c7d00a4f1'
        ```
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the generator.
        
        Args:
            seed: Initial counter value (random if not provided)
            clock: Returns the current Unix time in seconds
        """
        if seed is None:
            seed = secrets.randbelow(_COUNTER_MODULUS)
        self._counter = seed % _COUNTER_MODULUS
        self._clock = clock
        self._lock = threading.Lock()

    def _next_sequence(self) -> int:
        with self._lock:
            value = self._counter
            self._counter = (self._counter + 1) % _COUNTER_MODULUS
        return value

    def generate(self) -> str:
        """Generate a new id.
        
        Returns:
            22-character lowercase hex string
        """
        timestamp = int(self._clock()) & _TIMESTAMP_MASK
        random_value = secrets.randbits(RANDOM_BITS)
        sequence = self._next_sequence()

        return f"{timestamp:08x}{random_value:08x}{sequence:06x}"

    __call__ = generate


_default_generator = IdGenerator()


def generate_id() -> str:
    """Generate an id from the process-wide generator."""
    return _default_generator.generate()


KEY_LENGTH = 4


def derive_key(document_id: str) -> str:
    """Short display key for a document: the last 4 characters of its id."""
    if len(document_id) > KEY_LENGTH:
        return document_id[-KEY_LENGTH:]
    return document_id
