"""
Session service - Domain service holding per (user, scope) conversation sessions.
Process-lifetime only; nothing is persisted.
"""

from __future__ import annotations
import logging
from typing import Dict, Optional

from ..models.conversation import DEFAULT_MAX_HISTORY, Session


class SessionService:
    """Creates, returns and resets sessions keyed by user and conversation scope."""

    def __init__(self, max_history: int = DEFAULT_MAX_HISTORY, logger: Optional[logging.Logger] = None):
        self._max_history = max_history
        self._logger = logger or logging.getLogger(__name__)
        self._sessions: Dict[str, Session] = {}

    @staticmethod
    def _key(user_id: str, scope_id: str) -> str:
        return f"{user_id}-{scope_id}"

    def get_session(self, user_id: str, scope_id: str) -> Session:
        """Get or create the session for a user in a specific scope."""
        key = self._key(user_id, scope_id)
        session = self._sessions.get(key)
        if session is None:
            session = Session(max_history=self._max_history)
            self._sessions[key] = session
            self._logger.debug(f"Created session {key} with max_history={self._max_history}")
        return session

    def reset_session(self, user_id: str, scope_id: str) -> Session:
        """Replace the session wholesale with a fresh one."""
        key = self._key(user_id, scope_id)
        session = Session(max_history=self._max_history)
        self._sessions[key] = session
        self._logger.debug(f"Reset session {key}")
        return session

    def toggle_reasoning(self, user_id: str, scope_id: str) -> bool:
        """Flip the session's default reasoning mode and return the new value."""
        session = self.get_session(user_id, scope_id)
        session.reasoning_enabled = not session.reasoning_enabled
        return session.reasoning_enabled
