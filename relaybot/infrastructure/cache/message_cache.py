"""
Bounded TTL cache for per-message data (reasoning text, full rendered content).
"""

from __future__ import annotations
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple


@dataclass
class TTLMessageCache:
    max_items: int = 1024
    ttl_seconds: float = 86400.0
    clock: Callable[[], float] = time.monotonic
    _store: Dict[str, Tuple[str, float]] = field(default_factory=dict)

    def set(self, key: str, value: str) -> None:
        self._store.pop(key, None)
        self._store[key] = (value, self.clock())
        # Insertion order doubles as age order; drop the oldest beyond capacity
        while len(self._store) > self.max_items:
            oldest = next(iter(self._store))
            self._store.pop(oldest, None)

    def get(self, key: str) -> Optional[str]:
        entry = self._store.get(key)
        if entry is None:
            return None
        value, stored_at = entry
        if self.clock() - stored_at > self.ttl_seconds:
            self._store.pop(key, None)
            return None
        return value

    def __len__(self) -> int:
        return len(self._store)
