"""Domain models package."""

from .conversation import MessageRole, Turn, Session
from .stream import Usage, StreamDelta, StreamSnapshot
from .output import (
    ProseUnit,
    CodeUnit,
    FinalizationUnit,
    OutputUnit,
    OutboundMessage,
    MessageKind,
    ActionControl,
    FileAttachment,
)

__all__ = [
    "MessageRole",
    "Turn",
    "Session",
    "Usage",
    "StreamDelta",
    "StreamSnapshot",
    "ProseUnit",
    "CodeUnit",
    "FinalizationUnit",
    "OutputUnit",
    "OutboundMessage",
    "MessageKind",
    "ActionControl",
    "FileAttachment",
]
