"""
Interaction service - Application service behind the action buttons on finished replies.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional

from ..domain.interfaces.cache import MessageCache
from ..domain.models.output import (
    NEW_CHAT_PREFIX,
    FileAttachment,
    MessageKind,
    OutboundMessage,
)
from ..domain.services.session_service import SessionService
from ..utils import collapse_preview


REASONING_MISSING = "❌ Reasoning data not found (might have expired)."
CONTENT_MISSING = "❌ Original content not found in cache."
NOT_OWNER = "❌ Only the user who started this conversation can reset it."
NEW_CHAT_STARTED = "✅ New chat started! Context cleared for this channel."
TOGGLE_FAILED = "❌ An error occurred while toggling content."


def notice(text: str) -> OutboundMessage:
    return OutboundMessage(kind=MessageKind.NOTICE, content=text)


@dataclass(frozen=True)
class CollapseResult:
    """New state of a collapsible message, or a notice when it cannot change."""
    body: Optional[str] = None
    collapsed: bool = False
    notice: Optional[OutboundMessage] = None


def owner_from_custom_id(custom_id: str) -> Optional[str]:
    """Owner id encoded in a ``new_chat_<owner>`` button id, if any."""
    prefix = f"{NEW_CHAT_PREFIX}_"
    if not custom_id.startswith(prefix):
        return None
    return custom_id[len(prefix):] or None


class InteractionService:
    """Handles reveal-reasoning, collapse/expand and reset-conversation actions."""

    def __init__(
        self,
        sessions: SessionService,
        reasoning_cache: MessageCache,
        content_cache: MessageCache,
        reveal_inline_max_chars: int = 2000,
        logger: Optional[logging.Logger] = None
    ):
        self._sessions = sessions
        self._reasoning_cache = reasoning_cache
        self._content_cache = content_cache
        self._reveal_inline_max_chars = reveal_inline_max_chars
        self._logger = logger or logging.getLogger(__name__)

    def reveal_reasoning(self, message_id: str) -> OutboundMessage:
        """Full reasoning for a reply: an embed when short, a text file when long."""
        reasoning = self._reasoning_cache.get(message_id)
        if not reasoning:
            return notice(REASONING_MISSING)

        if len(reasoning) > self._reveal_inline_max_chars:
            return OutboundMessage(
                kind=MessageKind.NOTICE,
                content="Here is the full reasoning process:",
                attachment=FileAttachment("reasoning.txt", reasoning.encode("utf-8")),
            )
        return OutboundMessage(kind=MessageKind.NOTICE, title="🧠 Full Reasoning", body=reasoning)

    def toggle_collapse(self, message_id: str, current_body: str, collapsing: bool) -> CollapseResult:
        """Collapse caches the full body and shortens it; expand restores it from the cache."""
        if collapsing:
            self._content_cache.set(message_id, current_body)
            return CollapseResult(body=collapse_preview(current_body), collapsed=True)

        full = self._content_cache.get(message_id)
        if not full:
            return CollapseResult(collapsed=True, notice=notice(CONTENT_MISSING))
        return CollapseResult(body=full, collapsed=False)

    def start_new_chat(self, custom_id: str, user_id: str, scope_id: str) -> OutboundMessage:
        """Reset the clicking user's session, provided they own the conversation."""
        owner = owner_from_custom_id(custom_id)
        if owner is not None and owner != user_id:
            return notice(NOT_OWNER)

        self._logger.info(f"[Button] User {user_id} clicked new_chat in scope {scope_id}")
        self._sessions.reset_session(user_id, scope_id)
        return notice(NEW_CHAT_STARTED)
