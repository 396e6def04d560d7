"""
Discord channel adapter - Infrastructure implementation of the destination channel protocol.
Draws platform-neutral payloads as discord.py embeds, files and button views.
"""

from __future__ import annotations
import io
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import discord

from ...domain.errors import DeliveryError
from ...domain.interfaces.platform import DestinationChannel
from ...domain.models.output import (
    TOGGLE_COLLAPSE_ID,
    ActionControl,
    ActionStyle,
    MessageKind,
    OutboundMessage,
    collapse_action,
)


PROSE_COLOR = 0xF90F16
THINKING_COLOR = 0xFFA500
PLACEHOLDER_COLOR = 0x0099FF
ERROR_COLOR = 0xFF0000

_BUTTON_STYLES = {
    ActionStyle.PRIMARY: discord.ButtonStyle.primary,
    ActionStyle.SECONDARY: discord.ButtonStyle.secondary,
}


@dataclass
class DiscordMessageHandle:
    """A delivered discord message."""
    message: discord.Message

    @property
    def id(self) -> str:
        return str(self.message.id)


def build_embeds(payload: OutboundMessage) -> List[discord.Embed]:
    """Embeds for a payload: the thinking preview first, then the body."""
    embeds: List[discord.Embed] = []
    if payload.reasoning_preview:
        embeds.append(discord.Embed(
            title="Thinking...",
            description=payload.reasoning_preview,
            color=THINKING_COLOR,
        ))

    body: Optional[discord.Embed] = None
    if payload.kind == MessageKind.PLACEHOLDER:
        body = discord.Embed(title=payload.title, description=payload.body, color=PLACEHOLDER_COLOR)
    elif payload.kind == MessageKind.ERROR:
        body = discord.Embed(description=payload.body, color=ERROR_COLOR)
    elif payload.kind == MessageKind.NOTICE and (payload.body or payload.title):
        body = discord.Embed(title=payload.title, description=payload.body or None, color=THINKING_COLOR)
    elif payload.kind == MessageKind.PROSE and (payload.body or payload.footer):
        body = discord.Embed(description=payload.body or None, color=PROSE_COLOR)

    if body is not None:
        if payload.footer:
            body.set_footer(text=payload.footer)
        embeds.append(body)
    return embeds


def build_content(payload: OutboundMessage) -> Optional[str]:
    content = payload.content
    # Code messages carry no embed, so the usage footer goes in as subtext
    if payload.footer and payload.kind == MessageKind.CODE:
        footer_line = f"\n-# {payload.footer}"
        if len(content) + len(footer_line) <= 2000:
            content += footer_line
    return content or None


def build_view(actions: List[ActionControl]) -> Optional[discord.ui.View]:
    if not actions:
        return None
    view = discord.ui.View(timeout=None)
    for action in actions:
        view.add_item(discord.ui.Button(
            style=_BUTTON_STYLES[action.style],
            label=action.label,
            emoji=action.emoji,
            custom_id=action.custom_id,
        ))
    return view


def build_file(payload: OutboundMessage) -> Optional[discord.File]:
    if payload.attachment is None:
        return None
    return discord.File(io.BytesIO(payload.attachment.data), filename=payload.attachment.filename)


def render_send(payload: OutboundMessage) -> Dict[str, Any]:
    """Keyword arguments for sending ``payload`` as a new message."""
    kwargs: Dict[str, Any] = {"content": build_content(payload), "embeds": build_embeds(payload)}
    view = build_view(payload.actions)
    if view is not None:
        kwargs["view"] = view
    attachment = build_file(payload)
    if attachment is not None:
        kwargs["files"] = [attachment]
    return kwargs


def render_edit(payload: OutboundMessage) -> Dict[str, Any]:
    """Keyword arguments replacing everything an existing message shows."""
    attachment = build_file(payload)
    return {
        "content": build_content(payload),
        "embeds": build_embeds(payload),
        "attachments": [attachment] if attachment is not None else [],
        "view": build_view(payload.actions),
    }


def collapse_label(message: discord.Message) -> Optional[str]:
    """Current label of the collapse/expand button on ``message``."""
    for row in message.components:
        for component in getattr(row, "children", []):
            if getattr(component, "custom_id", None) == TOGGLE_COLLAPSE_ID:
                return component.label
    return None


def rebuild_view(message: discord.Message, collapsed: bool) -> discord.ui.View:
    """Copy the buttons on ``message``, flipping the collapse/expand one."""
    toggle = collapse_action(collapsed)
    view = discord.ui.View(timeout=None)
    for row in message.components:
        for component in getattr(row, "children", []):
            custom_id = getattr(component, "custom_id", None)
            if custom_id is None:
                continue
            if custom_id == TOGGLE_COLLAPSE_ID:
                view.add_item(discord.ui.Button(
                    style=_BUTTON_STYLES[toggle.style],
                    label=toggle.label,
                    emoji=toggle.emoji,
                    custom_id=toggle.custom_id,
                ))
            else:
                view.add_item(discord.ui.Button(
                    style=component.style,
                    label=component.label,
                    emoji=component.emoji,
                    custom_id=custom_id,
                ))
    return view


class DiscordChannel(DestinationChannel):
    """Streams one exchange into a channel, answering either a message or an interaction."""

    def __init__(
        self,
        source: Union[discord.Message, discord.Interaction],
        logger: Optional[logging.Logger] = None
    ):
        self._source = source
        self._is_interaction = isinstance(source, discord.Interaction)
        self._logger = logger or logging.getLogger(__name__)
        self._original: Optional[DiscordMessageHandle] = None

    async def send_initial(self, payload: OutboundMessage) -> DiscordMessageHandle:
        try:
            if self._is_interaction:
                message = await self._send_interaction(payload)
            elif self._original is None:
                message = await self._source.reply(**render_send(payload))
            else:
                message = await self._source.channel.send(**render_send(payload))
        except discord.HTTPException as e:
            raise DeliveryError("send", str(e)) from e

        handle = DiscordMessageHandle(message)
        if self._original is None:
            self._original = handle
        return handle

    async def _send_interaction(self, payload: OutboundMessage) -> discord.Message:
        interaction: discord.Interaction = self._source
        if self._original is None:
            if not interaction.response.is_done():
                await interaction.response.defer()
            return await interaction.edit_original_response(**render_edit(payload))
        return await interaction.followup.send(wait=True, **render_send(payload))

    async def reply(self, to: DiscordMessageHandle, payload: OutboundMessage) -> DiscordMessageHandle:
        try:
            message = await to.message.reply(mention_author=False, **render_send(payload))
        except discord.HTTPException as e:
            raise DeliveryError("reply", str(e)) from e
        return DiscordMessageHandle(message)

    async def edit(self, handle: DiscordMessageHandle, payload: OutboundMessage) -> DiscordMessageHandle:
        try:
            if self._is_interaction and handle is self._original:
                message = await self._source.edit_original_response(**render_edit(payload))
            else:
                message = await handle.message.edit(**render_edit(payload))
        except discord.HTTPException as e:
            raise DeliveryError("edit", str(e)) from e
        handle.message = message or handle.message
        return handle

    async def delete(self, handle: DiscordMessageHandle) -> None:
        try:
            await handle.message.delete()
        except discord.HTTPException as e:
            raise DeliveryError("delete", str(e)) from e
