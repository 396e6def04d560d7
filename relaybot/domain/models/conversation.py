"""
Conversation domain models - Turns and per-user sessions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Dict, Any
from datetime import datetime
from enum import Enum


DEFAULT_MAX_HISTORY = 20


class MessageRole(Enum):
    """Message roles in conversation."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class Turn:
    """Represents a single message in conversation."""
    role: MessageRole
    content: str
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format for API calls."""
        return {
            "role": self.role.value,
            "content": self.content,
        }


@dataclass
class Session:
    """Per (user, scope) conversation state, capped to the most recent turns."""
    turns: List[Turn] = field(default_factory=list)
    reasoning_enabled: bool = False
    max_history: int = DEFAULT_MAX_HISTORY

    def add_turn(self, turn: Turn) -> None:
        """Add turn and maintain history limits."""
        self.turns.append(turn)
        self._trim_history()

    def add_user_turn(self, content: str) -> None:
        self.add_turn(Turn(role=MessageRole.USER, content=content))

    def add_assistant_turn(self, content: str) -> None:
        self.add_turn(Turn(role=MessageRole.ASSISTANT, content=content))

    def _trim_history(self) -> None:
        # Oldest turns go first
        if len(self.turns) > self.max_history:
            self.turns = self.turns[-self.max_history:]

