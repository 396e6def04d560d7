"""Pytest session bootstrap for this repository.

Responsibilities:
- Ensure the `relaybot` package is importable
- Provide in-memory fakes for the provider and the destination channel
"""

import os
import sys
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pytest

HERE = os.path.dirname(__file__)
ROOT = os.path.abspath(os.path.join(HERE, '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from relaybot.domain.errors import DeliveryError, StreamTransportError  # noqa: E402
from relaybot.domain.models.stream import StreamDelta  # noqa: E402


@dataclass
class FakeHandle:
    id: str


class FakeChannel:
    """Records every platform operation; individual operations can be made to fail."""

    def __init__(self):
        self.ops: List[tuple] = []
        self.messages: Dict[str, Any] = {}
        self.fail_edits = 0
        self.fail_sends = 0
        self.fail_deletes = 0
        self.edit_error: Optional[Exception] = None
        self._next = 0

    def _new(self, payload) -> FakeHandle:
        self._next += 1
        handle = FakeHandle(id=f"m{self._next}")
        self.messages[handle.id] = payload
        return handle

    async def send_initial(self, payload):
        if self.fail_sends:
            self.fail_sends -= 1
            raise DeliveryError("send", "rejected")
        handle = self._new(payload)
        self.ops.append(("send_initial", handle.id, payload))
        return handle

    async def reply(self, to, payload):
        if self.fail_sends:
            self.fail_sends -= 1
            raise DeliveryError("reply", "rejected")
        handle = self._new(payload)
        self.ops.append(("reply", handle.id, payload, to.id))
        return handle

    async def edit(self, handle, payload):
        if self.edit_error is not None:
            raise self.edit_error
        if self.fail_edits:
            self.fail_edits -= 1
            raise DeliveryError("edit", "rejected")
        self.messages[handle.id] = payload
        self.ops.append(("edit", handle.id, payload))
        return handle

    async def delete(self, handle):
        if self.fail_deletes:
            self.fail_deletes -= 1
            raise DeliveryError("delete", "rejected")
        self.messages.pop(handle.id, None)
        self.ops.append(("delete", handle.id))

    def op_names(self) -> List[str]:
        return [op[0] for op in self.ops]


class FakeLLM:
    """Scripted provider: yields the given deltas, optionally failing afterwards."""

    def __init__(self, deltas: Optional[List[StreamDelta]] = None, fail_after: Optional[int] = None,
                 classifier_payloads: Optional[Dict[str, Any]] = None):
        self.deltas = deltas or []
        self.fail_after = fail_after
        self.classifier_payloads = classifier_payloads or {}
        self.stream_calls: List[Dict[str, Any]] = []
        self.structured_calls: List[Dict[str, Any]] = []
        self.stream_closed = False
        self.closed = False

    async def stream_chat(self, messages, model, reasoning=None):
        self.stream_calls.append({"messages": messages, "model": model, "reasoning": reasoning})
        try:
            for index, delta in enumerate(self.deltas):
                if self.fail_after is not None and index >= self.fail_after:
                    raise StreamTransportError("connection reset")
                yield delta
            if self.fail_after is not None and self.fail_after >= len(self.deltas):
                raise StreamTransportError("connection reset")
        finally:
            self.stream_closed = True

    async def complete_structured(self, messages, model, schema_name, schema):
        self.structured_calls.append({"messages": messages, "model": model, "schema_name": schema_name})
        payload = self.classifier_payloads.get(schema_name)
        if isinstance(payload, Exception):
            raise payload
        if payload is None:
            raise RuntimeError(f"no scripted payload for {schema_name}")
        return payload

    async def close(self):
        self.closed = True


class FakeClock:
    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


async def no_sleep(_seconds: float) -> None:
    return None


@pytest.fixture
def channel():
    return FakeChannel()


@pytest.fixture
def clock():
    return FakeClock()
