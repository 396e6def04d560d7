"""
Message cache protocol interface.
"""

from __future__ import annotations
from typing import Optional, Protocol


class MessageCache(Protocol):
    """String values keyed by platform message id, with eviction left to the implementation."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...
