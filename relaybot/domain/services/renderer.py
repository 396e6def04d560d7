"""
Incremental renderer - Domain service turning a growing stream into ordered output units.

The renderer is a pure state machine: feed it cumulative snapshots with ``step`` and
it returns the units that became emittable since the previous accepted cycle. It
never performs I/O, and time comes from an injectable clock so tests can drive
the throttle deterministically.
"""

from __future__ import annotations
import logging
import re
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..models.output import CodeUnit, FinalizationUnit, OutputUnit, ProseUnit
from ..models.stream import StreamSnapshot


FENCE_MARKER = "```"

# First complete fenced block: opening fence, optional language tag, body, closing fence.
# A single newline right after the closing fence belongs to the fence.
_FENCE_RE = re.compile(r"(```([\w+#.-]*)[ \t]*\n?(.*?)```)(\n?)", re.DOTALL)


@dataclass
class RenderConfig:
    """Size and rate limits imposed by the destination platform."""
    throttle_ms: int = 2000
    prose_max_chars: int = 4096
    code_inline_max_chars: int = 1800
    reasoning_preview_chars: int = 3000


@dataclass
class StreamState:
    """Tracks renderer progress through one in-flight response."""
    processed_index: int = 0
    is_reasoning_phase: bool = True
    last_cycle_at: float = 0.0
    cycles: int = 0
    finalized: bool = False


class IncrementalRenderer:
    """Converts the unprocessed suffix of cumulative content into output units."""

    def __init__(
        self,
        reasoning_enabled: bool = False,
        config: Optional[RenderConfig] = None,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None
    ):
        self._reasoning_enabled = reasoning_enabled
        self._config = config or RenderConfig()
        self._clock = clock
        self._logger = logger or logging.getLogger(__name__)
        self.state = StreamState(last_cycle_at=clock())

    @property
    def processed_index(self) -> int:
        return self.state.processed_index

    def step(self, snapshot: StreamSnapshot) -> List[OutputUnit]:
        """Run one render cycle and return the units it produced, in order."""
        state = self.state
        if state.finalized:
            return []

        if state.is_reasoning_phase and snapshot.content.strip():
            state.is_reasoning_phase = False

        now = self._clock()
        if not snapshot.final and (now - state.last_cycle_at) * 1000 < self._config.throttle_ms:
            return []
        state.last_cycle_at = now
        state.cycles += 1

        if len(snapshot.content) < state.processed_index:
            self._logger.warning(
                f"Content shrank below processed index ({len(snapshot.content)} < {state.processed_index})"
            )
            return []

        preview = self._reasoning_preview(snapshot)

        if not snapshot.final:
            # At most one fence per non-final cycle
            units = self._take_fence(snapshot.content, preview)
            if units:
                return units
            return self._take_tail(snapshot.content, preview, final=False)

        units: List[OutputUnit] = []
        while True:
            fence_units = self._take_fence(snapshot.content, None)
            if not fence_units:
                break
            units.extend(fence_units)
        units.extend(self._take_tail(snapshot.content, None, final=True))
        units.append(FinalizationUnit(
            usage=snapshot.usage,
            reasoning_available=self._reasoning_enabled and bool(snapshot.reasoning),
        ))
        state.finalized = True
        self._logger.debug(
            f"Renderer finalized after {state.cycles} cycles at index {state.processed_index}"
        )
        return units

    def _reasoning_preview(self, snapshot: StreamSnapshot) -> Optional[str]:
        if snapshot.final or not self._reasoning_enabled:
            return None
        if not self.state.is_reasoning_phase or not snapshot.reasoning:
            return None
        limit = self._config.reasoning_preview_chars
        if len(snapshot.reasoning) > limit:
            return "... " + snapshot.reasoning[-limit:]
        return snapshot.reasoning

    def _take_fence(self, content: str, preview: Optional[str]) -> List[OutputUnit]:
        suffix = content[self.state.processed_index:]
        match = _FENCE_RE.search(suffix)
        if not match:
            return []

        units: List[OutputUnit] = list(self._seal_chunks(suffix[:match.start()], preview))
        source = match.group(1)
        code = CodeUnit(
            language=match.group(2),
            code=match.group(3),
            source=source,
            separator=match.group(4),
            inline=len(source) < self._config.code_inline_max_chars,
        )
        units.append(code)
        self.state.processed_index += code.consumed
        return units

    def _take_tail(self, content: str, preview: Optional[str], final: bool) -> List[OutputUnit]:
        text = content[self.state.processed_index:]
        if not final:
            partial = text.find(FENCE_MARKER)
            if partial != -1:
                text = text[:partial]
            # Trailing backticks may open a fence still in flight
            text = text.rstrip("`")

        limit = self._config.prose_max_chars
        units: List[OutputUnit] = []
        while len(text) > limit:
            units.append(self._seal(text[:limit], preview))
            preview = None
            text = text[limit:]

        if final:
            if text:
                units.append(self._seal(text, None))
        elif text or preview:
            units.append(ProseUnit(text=text, sealed=False, reasoning_preview=preview))
        return units

    def _seal_chunks(self, text: str, preview: Optional[str]) -> List[ProseUnit]:
        limit = self._config.prose_max_chars
        units = []
        for start in range(0, len(text), limit):
            units.append(self._seal(text[start:start + limit], preview))
            preview = None
        return units

    def _seal(self, text: str, preview: Optional[str]) -> ProseUnit:
        self.state.processed_index += len(text)
        return ProseUnit(text=text, sealed=True, reasoning_preview=preview)
