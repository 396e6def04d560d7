"""
Stream domain models - Provider deltas and the cumulative snapshots built from them.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Usage:
    """Token accounting reported once near the end of a stream."""
    total_tokens: int = 0
    reasoning_tokens: int = 0

    def footer_text(self) -> str:
        return f"Total Tokens: {self.total_tokens} | Reasoning Tokens: {self.reasoning_tokens}"

    @classmethod
    def from_api(cls, data: Any) -> Optional[Usage]:
        """Build from an OpenAI-style usage object or dict."""
        if data is None:
            return None
        if isinstance(data, dict):
            total = data.get("total_tokens") or 0
            details = data.get("completion_tokens_details") or {}
            reasoning = details.get("reasoning_tokens") if isinstance(details, dict) else None
        else:
            total = getattr(data, "total_tokens", 0) or 0
            details = getattr(data, "completion_tokens_details", None)
            reasoning = getattr(details, "reasoning_tokens", None) if details is not None else None
        return cls(total_tokens=int(total), reasoning_tokens=int(reasoning or 0))


@dataclass(frozen=True)
class StreamDelta:
    """One incremental event from the provider stream."""
    content: str = ""
    reasoning: str = ""
    usage: Optional[Usage] = None

    @property
    def is_empty(self) -> bool:
        return not self.content and not self.reasoning and self.usage is None


@dataclass(frozen=True)
class StreamSnapshot:
    """Cumulative view of a stream after one or more deltas."""
    content: str = ""
    reasoning: str = ""
    usage: Optional[Usage] = None
    final: bool = False
