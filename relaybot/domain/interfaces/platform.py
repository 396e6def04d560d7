"""
Destination platform protocol interface.
The narrow set of message operations the streaming pipeline needs from a chat platform.
"""

from __future__ import annotations
from typing import Protocol

from ..models.output import OutboundMessage


class MessageHandle(Protocol):
    """A message already delivered to the platform."""

    @property
    def id(self) -> str:
        ...


class DestinationChannel(Protocol):
    """Protocol for the conversation surface a response is streamed into.

    Every operation raises ``DeliveryError`` when the platform rejects it.
    """

    async def send_initial(self, payload: OutboundMessage) -> MessageHandle:
        """Send the first message of an exchange, answering the user's request."""
        ...

    async def reply(self, to: MessageHandle, payload: OutboundMessage) -> MessageHandle:
        """Send a new message chained as a reply to ``to`` without pinging anyone."""
        ...

    async def edit(self, handle: MessageHandle, payload: OutboundMessage) -> MessageHandle:
        """Replace the content of an existing message."""
        ...

    async def delete(self, handle: MessageHandle) -> None:
        """Remove an existing message."""
        ...
