"""
Stream consumer - Domain service folding provider deltas into cumulative snapshots.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..errors import StreamTransportError
from ..interfaces.llm_client import LLMClient, ReasoningOptions
from ..models.stream import StreamDelta, StreamSnapshot, Usage


UpdateCallback = Callable[[StreamSnapshot], Awaitable[None]]


@dataclass
class ConsumerState:
    """Cumulative values built up while iterating one stream."""
    content: str = ""
    reasoning: str = ""
    usage: Optional[Usage] = None
    deltas: int = 0

    def fold(self, delta: StreamDelta) -> None:
        self.content += delta.content
        self.reasoning += delta.reasoning
        if delta.usage is not None:
            self.usage = delta.usage
        self.deltas += 1

    def snapshot(self, final: bool = False) -> StreamSnapshot:
        return StreamSnapshot(
            content=self.content,
            reasoning=self.reasoning,
            usage=self.usage,
            final=final,
        )


class StreamConsumer:
    """Drives one streaming completion and reports cumulative state after every delta."""

    def __init__(self, llm_client: LLMClient, logger: Optional[logging.Logger] = None):
        self._llm_client = llm_client
        self._logger = logger or logging.getLogger(__name__)

    async def consume(
        self,
        messages: List[Dict[str, Any]],
        model: str,
        on_update: UpdateCallback,
        reasoning: Optional[ReasoningOptions] = None
    ) -> StreamSnapshot:
        """Iterate the stream to exhaustion, then report once more with ``final=True``.

        Transport failures abort the stream and propagate as ``StreamTransportError``;
        nothing is retried here. Errors raised by ``on_update`` propagate unchanged.
        The provider stream is closed on every exit path.
        """
        state = ConsumerState()
        iterator = self._llm_client.stream_chat(messages, model, reasoning).__aiter__()

        try:
            while True:
                try:
                    delta = await iterator.__anext__()
                except StopAsyncIteration:
                    break
                except StreamTransportError:
                    raise
                except Exception as e:
                    self._logger.error(f"Stream transport failed after {state.deltas} deltas: {e}")
                    raise StreamTransportError(f"Stream failed: {e}") from e

                state.fold(delta)
                await on_update(state.snapshot())
        finally:
            aclose = getattr(iterator, "aclose", None)
            if aclose is not None:
                await aclose()

        final = state.snapshot(final=True)
        await on_update(final)

        self._logger.debug(
            f"Stream finished - Deltas: {state.deltas}, Content: {len(state.content)} chars, "
            f"Reasoning: {len(state.reasoning)} chars"
        )
        return final
