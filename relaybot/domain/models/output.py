"""
Output domain models - Logical output units and platform-neutral message payloads.

The renderer produces units; the multiplexer turns units into ``OutboundMessage``
payloads; a platform adapter turns payloads into concrete platform objects.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import List, Optional, Union
from enum import Enum

from .languages import extension_for
from .stream import Usage


SHOW_REASONING_ID = "show_reasoning"
TOGGLE_COLLAPSE_ID = "toggle_collapse"
NEW_CHAT_PREFIX = "new_chat"


@dataclass(frozen=True)
class ProseUnit:
    """A chunk of plain text.

    Sealed units are committed: they advance the renderer's high-water mark and
    close the message they land in. An unsealed unit is the live tail of the
    stream, shown in the open message and replaced on the next cycle.
    """
    text: str
    sealed: bool = True
    reasoning_preview: Optional[str] = None

    @property
    def consumed(self) -> int:
        return len(self.text) if self.sealed else 0


@dataclass(frozen=True)
class CodeUnit:
    """A complete fenced code block.

    ``source`` is the block exactly as streamed (fences included); ``separator`` is
    the line break swallowed after the closing fence.
    """
    language: str
    code: str
    source: str
    separator: str = ""
    inline: bool = True

    @property
    def consumed(self) -> int:
        return len(self.source) + len(self.separator)

    @property
    def filename(self) -> str:
        return f"snippet.{extension_for(self.language)}"

    @property
    def label(self) -> str:
        return self.language or "txt"


@dataclass(frozen=True)
class FinalizationUnit:
    """Terminal marker: usage footer and action controls for the last message."""
    usage: Optional[Usage] = None
    reasoning_available: bool = False

    @property
    def consumed(self) -> int:
        return 0


OutputUnit = Union[ProseUnit, CodeUnit, FinalizationUnit]


class ActionStyle(Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


@dataclass(frozen=True)
class ActionControl:
    """A button attached to a message."""
    custom_id: str
    label: str
    emoji: str
    style: ActionStyle = ActionStyle.SECONDARY


def show_reasoning_action() -> ActionControl:
    return ActionControl(SHOW_REASONING_ID, "Show Reasoning", "🧠")


def collapse_action(collapsed: bool = False) -> ActionControl:
    if collapsed:
        return ActionControl(TOGGLE_COLLAPSE_ID, "Expand", "▶️")
    return ActionControl(TOGGLE_COLLAPSE_ID, "Collapse", "🔽")


def new_chat_action(owner_id: str) -> ActionControl:
    return ActionControl(f"{NEW_CHAT_PREFIX}_{owner_id}", "Start New Chat", "🔄", ActionStyle.PRIMARY)


class MessageKind(Enum):
    PLACEHOLDER = "placeholder"
    PROSE = "prose"
    CODE = "code"
    ERROR = "error"
    NOTICE = "notice"


@dataclass(frozen=True)
class FileAttachment:
    filename: str
    data: bytes


@dataclass(frozen=True)
class OutboundMessage:
    """Everything a platform adapter needs to draw one message."""
    kind: MessageKind
    body: str = ""
    title: Optional[str] = None
    reasoning_preview: Optional[str] = None
    content: str = ""
    attachment: Optional[FileAttachment] = None
    footer: Optional[str] = None
    actions: List[ActionControl] = field(default_factory=list)

    def with_finalization(self, footer: Optional[str], actions: List[ActionControl]) -> OutboundMessage:
        return replace(self, footer=footer, actions=list(actions))

    @property
    def is_empty(self) -> bool:
        return not (self.body or self.reasoning_preview or self.content or self.attachment
                    or self.footer or self.actions or self.title)

    @classmethod
    def placeholder(cls) -> OutboundMessage:
        return cls(kind=MessageKind.PLACEHOLDER, title="Thinking...", body="Initializing request...")

    @classmethod
    def prose(cls, text: str, reasoning_preview: Optional[str] = None) -> OutboundMessage:
        return cls(kind=MessageKind.PROSE, body=text, reasoning_preview=reasoning_preview)

    @classmethod
    def code(cls, unit: CodeUnit) -> OutboundMessage:
        if unit.inline:
            return cls(kind=MessageKind.CODE, content=unit.source)
        return cls(
            kind=MessageKind.CODE,
            content=f"📄 **Code Snippet ({unit.label})**",
            attachment=FileAttachment(unit.filename, unit.code.encode("utf-8")),
        )

    @classmethod
    def error(cls, text: str = "Sorry, I encountered an error processing your request.") -> OutboundMessage:
        return cls(kind=MessageKind.ERROR, body=text)
