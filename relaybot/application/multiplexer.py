"""
Output multiplexer - Application service mapping output units onto platform messages.

At most one message is open at a time. Draft prose edits the open message in
place; sealed prose and code close it. Every new message is chained as a reply
to the previous one so the platform keeps them in order.
"""

from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, List, Optional

from ..domain.errors import DeliveryError
from ..domain.interfaces.platform import DestinationChannel, MessageHandle
from ..domain.models.output import (
    ActionControl,
    CodeUnit,
    FinalizationUnit,
    MessageKind,
    OutboundMessage,
    OutputUnit,
    ProseUnit,
    collapse_action,
    new_chat_action,
    show_reasoning_action,
)


@dataclass
class SentMessage:
    """A physical message of the current exchange and what it currently shows."""
    handle: MessageHandle
    payload: OutboundMessage
    open: bool = False

    @property
    def id(self) -> str:
        return self.handle.id


class OutputMultiplexer:
    """Applies output units, in order, to the destination channel."""

    def __init__(
        self,
        channel: DestinationChannel,
        owner_id: str,
        reasoning_enabled: bool = False,
        code_send_delay_s: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        logger: Optional[logging.Logger] = None
    ):
        self._channel = channel
        self._owner_id = owner_id
        self._reasoning_enabled = reasoning_enabled
        self._code_send_delay_s = code_send_delay_s
        self._sleep = sleep
        self._logger = logger or logging.getLogger(__name__)
        self.sent: List[SentMessage] = []
        self._open: Optional[SentMessage] = None
        self._placeholder_untouched = False

    @property
    def last_message(self) -> Optional[SentMessage]:
        return self.sent[-1] if self.sent else None

    @property
    def open_message(self) -> Optional[SentMessage]:
        return self._open

    async def send_placeholder(self) -> bool:
        """Send the initial "Thinking..." message; False if the platform refused it."""
        try:
            handle = await self._channel.send_initial(OutboundMessage.placeholder())
        except DeliveryError as e:
            self._logger.error(f"Failed to send initial reply: {e}")
            return False
        message = SentMessage(handle=handle, payload=OutboundMessage.placeholder())
        self.sent.append(message)
        self._set_open(message)
        self._placeholder_untouched = True
        return True

    async def apply(self, units: List[OutputUnit]) -> None:
        """Deliver units strictly in the order given."""
        index = 0
        while index < len(units):
            unit = units[index]
            following = units[index + 1] if index + 1 < len(units) else None
            if isinstance(unit, ProseUnit):
                if isinstance(following, FinalizationUnit):
                    # Last prose and the action row travel in one edit
                    await self._apply_prose(unit, finalization=following)
                    index += 2
                    continue
                await self._apply_prose(unit)
            elif isinstance(unit, CodeUnit):
                await self._apply_code(unit)
            elif isinstance(unit, FinalizationUnit):
                await self._finalize(unit)
            index += 1

    async def report_error(self, text: Optional[str] = None) -> None:
        """Replace the last message with a generic error notice.

        Runs after the exchange has already failed, so any platform error here is
        logged and a new message is tried instead.
        """
        payload = OutboundMessage.error(text) if text else OutboundMessage.error()
        self._set_open(None)
        last = self.last_message
        if last is not None:
            try:
                handle = await self._channel.edit(last.handle, payload)
                last.handle = handle or last.handle
                last.payload = payload
                return
            except Exception as e:
                self._logger.error(f"Error replacing message {last.id} with error notice: {e}")

        try:
            if last is not None:
                handle = await self._channel.reply(last.handle, payload)
            else:
                handle = await self._channel.send_initial(payload)
        except Exception as e:
            self._logger.error(f"Error sending error notice: {e}")
            return
        self.sent.append(SentMessage(handle=handle, payload=payload))

    async def _apply_prose(self, unit: ProseUnit, finalization: Optional[FinalizationUnit] = None) -> None:
        preview = unit.reasoning_preview if self._targets_first_message() else None
        payload = OutboundMessage.prose(unit.text, preview)
        if finalization is not None:
            payload = payload.with_finalization(self._footer(finalization), self._actions(finalization))
        elif not unit.text and not preview:
            return

        keep_open = not unit.sealed
        if self._open is not None:
            await self._edit_or_fallback(self._open, payload, keep_open=keep_open)
        else:
            await self._send_new(payload, keep_open=keep_open)

    async def _apply_code(self, unit: CodeUnit) -> None:
        if self._placeholder_untouched and len(self.sent) == 1 and not self._reasoning_enabled:
            placeholder = self.sent[0]
            try:
                await self._channel.delete(placeholder.handle)
                self.sent.pop(0)
            except DeliveryError as e:
                self._logger.error(f"Error deleting empty initial msg: {e}")
            self._placeholder_untouched = False

        self._set_open(None)
        await self._sleep(self._code_send_delay_s)
        await self._send_new(OutboundMessage.code(unit), keep_open=False)

    async def _finalize(self, unit: FinalizationUnit) -> None:
        footer = self._footer(unit)
        actions = self._actions(unit)
        last = self.last_message
        if last is None:
            await self._send_new(OutboundMessage(kind=MessageKind.PROSE, footer=footer, actions=actions),
                                 keep_open=False)
            return

        base = last.payload
        if base.kind == MessageKind.PLACEHOLDER:
            base = OutboundMessage(kind=MessageKind.PROSE)
        base = replace(base, reasoning_preview=None)
        await self._edit_or_fallback(last, base.with_finalization(footer, actions), keep_open=False)

    def _footer(self, unit: FinalizationUnit) -> Optional[str]:
        return unit.usage.footer_text() if unit.usage is not None else None

    def _actions(self, unit: FinalizationUnit) -> List[ActionControl]:
        actions: List[ActionControl] = []
        if unit.reasoning_available:
            actions.append(show_reasoning_action())
        actions.append(collapse_action())
        actions.append(new_chat_action(self._owner_id))
        return actions

    def _targets_first_message(self) -> bool:
        if self._open is not None:
            return bool(self.sent) and self._open is self.sent[0]
        return not self.sent

    def _set_open(self, message: Optional[SentMessage]) -> None:
        if self._open is not None:
            self._open.open = False
        self._open = message
        if message is not None:
            message.open = True

    async def _edit_or_fallback(self, message: SentMessage, payload: OutboundMessage, keep_open: bool) -> None:
        try:
            handle = await self._channel.edit(message.handle, payload)
        except DeliveryError as e:
            self._logger.error(f"Error editing message {message.id}, sending a new one instead: {e}")
            if self._open is message:
                self._set_open(None)
            await self._send_new(payload, keep_open=keep_open)
            return

        if self.sent and message is self.sent[0]:
            self._placeholder_untouched = False
        message.handle = handle or message.handle
        message.payload = payload
        if keep_open:
            self._set_open(message)
        elif self._open is message:
            self._set_open(None)

    async def _send_new(self, payload: OutboundMessage, keep_open: bool) -> Optional[SentMessage]:
        last = self.last_message
        try:
            if last is not None:
                handle = await self._channel.reply(last.handle, payload)
            else:
                handle = await self._channel.send_initial(payload)
        except DeliveryError as e:
            self._logger.error(f"Error sending {payload.kind.value} message: {e}")
            return None

        message = SentMessage(handle=handle, payload=payload)
        self.sent.append(message)
        if keep_open:
            self._set_open(message)
        return message
