"""
LLM client protocol interface.
Defines the contract for model provider implementations.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Protocol, List, Dict, Any, Optional, AsyncIterator

from ..models.stream import StreamDelta


@dataclass(frozen=True)
class ReasoningOptions:
    """Provider reasoning parameters sent when reasoning mode is on."""
    effort: str = "medium"
    enabled: bool = True
    exclude: bool = False

    def to_api_format(self) -> Dict[str, Any]:
        return {"effort": self.effort, "enabled": self.enabled, "exclude": self.exclude}


class LLMClient(Protocol):
    """Protocol for LLM client implementations."""

    def stream_chat(
        self,
        messages: List[Dict[str, Any]],
        model: str,
        reasoning: Optional[ReasoningOptions] = None
    ) -> AsyncIterator[StreamDelta]:
        """Open one streaming completion and yield deltas in arrival order.

        Transport failures raise ``StreamTransportError``.
        """
        ...

    async def complete_structured(
        self,
        messages: List[Dict[str, Any]],
        model: str,
        schema_name: str,
        schema: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Run a non-streaming completion constrained to a JSON schema and return the parsed object."""
        ...

    async def close(self) -> None:
        """Release the underlying HTTP connections."""
        ...
