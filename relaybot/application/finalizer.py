"""
Finalizer - Application service recording the outcome of a completed exchange.
"""

from __future__ import annotations
import logging
from typing import Optional

from ..domain.interfaces.cache import MessageCache
from ..domain.models.conversation import Session
from ..domain.models.stream import StreamSnapshot
from .multiplexer import SentMessage


class Finalizer:
    """Appends the assistant turn and fills the interaction caches."""

    def __init__(
        self,
        reasoning_cache: MessageCache,
        content_cache: MessageCache,
        logger: Optional[logging.Logger] = None
    ):
        self._reasoning_cache = reasoning_cache
        self._content_cache = content_cache
        self._logger = logger or logging.getLogger(__name__)

    def finalize(
        self,
        session: Session,
        snapshot: StreamSnapshot,
        last_message: Optional[SentMessage],
        user_label: str
    ) -> None:
        """Record a final snapshot once every unit has been delivered."""
        if snapshot.usage is not None:
            self._logger.info(
                f"[Usage] User {user_label} used {snapshot.usage.total_tokens} tokens "
                f"(Reasoning: {snapshot.usage.reasoning_tokens})"
            )

        session.add_assistant_turn(snapshot.content)

        if last_message is None:
            self._logger.warning("No message delivered for this exchange; nothing cached")
            return

        # Buttons live on the last message, so both caches key on its id
        if snapshot.reasoning:
            self._reasoning_cache.set(last_message.id, snapshot.reasoning)
        if last_message.payload.body:
            self._content_cache.set(last_message.id, last_message.payload.body)
