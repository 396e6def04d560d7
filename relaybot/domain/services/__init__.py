"""Domain services package."""

from .classifier_gate import ClassifierGate, GateDecision, ModelSelection
from .renderer import IncrementalRenderer, RenderConfig, StreamState
from .session_service import SessionService
from .stream_consumer import StreamConsumer

__all__ = [
    "ClassifierGate",
    "GateDecision",
    "ModelSelection",
    "IncrementalRenderer",
    "RenderConfig",
    "StreamState",
    "SessionService",
    "StreamConsumer",
]
