"""
Discord bot - Presentation layer entry points.
Mentions, DMs, slash commands, the "Ask AI" context menu and reply buttons all end up here.
"""

from __future__ import annotations
import logging
from typing import Optional

import discord
from discord import app_commands

from ..application.chat_service import ChatService, ExchangeRequest
from ..application.finalizer import Finalizer
from ..application.interactions import TOGGLE_FAILED, InteractionService, notice
from ..domain.interfaces.llm_client import ReasoningOptions
from ..domain.models.output import NEW_CHAT_PREFIX, SHOW_REASONING_ID, TOGGLE_COLLAPSE_ID
from ..domain.services.classifier_gate import ClassifierGate, ModelSelection
from ..domain.services.renderer import RenderConfig
from ..domain.services.session_service import SessionService
from ..infrastructure.cache.message_cache import TTLMessageCache
from ..infrastructure.config.settings import AppSettings
from ..infrastructure.discord.channel import DiscordChannel, collapse_label, rebuild_view, render_send
from ..infrastructure.openrouter.client import OpenRouterAdapter
from ..utils import is_text_attachment
from .prompts import (
    attachment_context,
    build_context_prompt,
    parse_reasoning_flag,
    resolve_message_ids,
    strip_mention,
)


COMMAND_ERROR = "There was an error while executing this command!"


def find_text_attachment(message: discord.Message) -> Optional[discord.Attachment]:
    for attachment in message.attachments:
        if is_text_attachment(attachment.filename, attachment.content_type):
            return attachment
    return None


async def message_text(message: discord.Message) -> str:
    """First text attachment of a message, falling back to its content."""
    attachment = find_text_attachment(message)
    if attachment is not None:
        data = await attachment.read()
        return data.decode("utf-8", errors="replace")
    return message.content


class AskAIModal(discord.ui.Modal, title="Ask AI about this message"):
    """Question form shown by the "Ask AI" message command."""

    question = discord.ui.TextInput(
        label="What's your question?",
        placeholder="Explain this code, summarize this text, etc.",
        style=discord.TextStyle.paragraph,
        required=True,
    )
    reasoning = discord.ui.TextInput(
        label="Enable Reasoning?",
        placeholder="Type 'yes' to enable reasoning.",
        style=discord.TextStyle.short,
        required=False,
    )

    def __init__(self, bot: RelayBot, target: discord.Message):
        super().__init__(timeout=600)
        self._bot = bot
        self._target = target

    async def on_submit(self, interaction: discord.Interaction) -> None:
        context = self._target.content
        attachment = find_text_attachment(self._target)
        if attachment is not None:
            try:
                data = await attachment.read()
                context = attachment_context(context, attachment.filename, data.decode("utf-8", errors="replace"))
            except discord.HTTPException as e:
                self._bot.logger.error(f"Failed to fetch attachment for context menu: {e}")

        prompt = build_context_prompt(self.question.value, str(self._target.author), context)
        await self._bot.run_exchange(
            interaction,
            prompt,
            reasoning_enabled=parse_reasoning_flag(self.reasoning.value),
        )


class RelayBot(discord.Client):
    """Discord client relaying prompts to the chat service."""

    def __init__(
        self,
        chat_service: ChatService,
        interactions: InteractionService,
        sync_commands: bool = False,
        logger: Optional[logging.Logger] = None
    ):
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(intents=intents)
        self.chat_service = chat_service
        self.interactions = interactions
        self.logger = logger or logging.getLogger(__name__)
        self._sync_commands = sync_commands
        self.tree = app_commands.CommandTree(self)
        self.tree.on_error = self._on_command_error
        self._register_commands()

    def _register_commands(self) -> None:
        @self.tree.command(name="chat", description="Chat with the AI.")
        @app_commands.describe(
            message="The message to send to the AI.",
            reasoning="Toggle reasoning for this message (overrides session default).",
        )
        @app_commands.allowed_installs(guilds=True, users=True)
        @app_commands.allowed_contexts(guilds=True, dms=True, private_channels=True)
        async def chat(interaction: discord.Interaction, message: str, reasoning: Optional[bool] = None):
            self.logger.info(f"[Command] User {interaction.user.id} ({interaction.user}) used /chat in channel {interaction.channel_id}")
            await interaction.response.defer()
            prompt = await resolve_message_ids(message, lambda mid: self._fetch_message_text(interaction, mid))
            await self.run_exchange(interaction, prompt, reasoning_enabled=reasoning)

        @self.tree.command(name="reasoning", description="Toggle reasoning mode for your conversation in this channel.")
        @app_commands.allowed_installs(guilds=True, users=True)
        @app_commands.allowed_contexts(guilds=True, dms=True, private_channels=True)
        async def toggle_reasoning(interaction: discord.Interaction):
            enabled = self.chat_service.sessions.toggle_reasoning(str(interaction.user.id), str(interaction.channel_id))
            state = "enabled" if enabled else "disabled"
            await interaction.response.send_message(f"🧠 Reasoning {state} for this channel.", ephemeral=True)

        @self.tree.context_menu(name="Ask AI")
        @app_commands.allowed_installs(guilds=True, users=True)
        @app_commands.allowed_contexts(guilds=True, dms=True, private_channels=True)
        async def ask_ai(interaction: discord.Interaction, message: discord.Message):
            await interaction.response.send_modal(AskAIModal(self, message))

    async def setup_hook(self) -> None:
        if self._sync_commands:
            synced = await self.tree.sync()
            self.logger.info(f"Synced {len(synced)} application commands")

    async def on_ready(self) -> None:
        self.logger.info(f"Logged in as {self.user}!")

    async def close(self) -> None:
        await self.chat_service.close()
        await super().close()

    async def on_message(self, message: discord.Message) -> None:
        if message.author.bot or self.user is None:
            return

        is_mentioned = self.user in message.mentions
        is_dm = message.guild is None
        if not is_mentioned and not is_dm:
            return

        content = strip_mention(message.content, self.user.id) if is_mentioned else message.content.strip()
        if not content:
            return

        self.logger.info(
            f"[Message] User {message.author.id} ({message.author}) requested AI response in channel {message.channel.id}"
        )
        await self.run_exchange(message, content)

    async def run_exchange(self, source, prompt: str, reasoning_enabled: Optional[bool] = None) -> None:
        """Stream one reply for a message or an interaction."""
        if isinstance(source, discord.Interaction):
            user, scope_id = source.user, source.channel_id
        else:
            user, scope_id = source.author, source.channel.id

        request = ExchangeRequest(
            user_id=str(user.id),
            scope_id=str(scope_id),
            prompt=prompt,
            reasoning_enabled=reasoning_enabled,
            user_label=f"{user.id} ({user})",
        )
        await self.chat_service.handle_exchange(request, DiscordChannel(source, logger=self.logger))

    async def _fetch_message_text(self, interaction: discord.Interaction, message_id: str) -> Optional[str]:
        if interaction.channel is None:
            return None
        message = await interaction.channel.fetch_message(int(message_id))
        self.logger.info(f"[Command] Resolved message ID {message_id} to message from {message.author}")
        return await message_text(message)

    async def on_interaction(self, interaction: discord.Interaction) -> None:
        if interaction.type != discord.InteractionType.component or interaction.message is None:
            return

        custom_id = (interaction.data or {}).get("custom_id", "")
        if custom_id.startswith(NEW_CHAT_PREFIX):
            reply = self.interactions.start_new_chat(custom_id, str(interaction.user.id), str(interaction.channel_id))
            await interaction.response.send_message(ephemeral=True, **render_send(reply))
        elif custom_id == SHOW_REASONING_ID:
            reply = self.interactions.reveal_reasoning(str(interaction.message.id))
            await interaction.response.send_message(ephemeral=True, **render_send(reply))
        elif custom_id == TOGGLE_COLLAPSE_ID:
            await self._toggle_collapse(interaction)

    async def _toggle_collapse(self, interaction: discord.Interaction) -> None:
        try:
            await self._apply_collapse(interaction)
        except Exception as e:
            self.logger.error(f"Error in toggle_collapse: {e}")
            reply = render_send(notice(TOGGLE_FAILED))
            try:
                if interaction.response.is_done():
                    await interaction.followup.send(ephemeral=True, **reply)
                else:
                    await interaction.response.send_message(ephemeral=True, **reply)
            except discord.HTTPException as send_error:
                self.logger.error(f"Failed to send error message: {send_error}")

    async def _apply_collapse(self, interaction: discord.Interaction) -> None:
        message = interaction.message
        if not message.embeds:
            await interaction.response.send_message(ephemeral=True, **render_send(notice("❌ Nothing to collapse.")))
            return

        collapsing = collapse_label(message) == "Collapse"
        embed = message.embeds[0].copy()
        result = self.interactions.toggle_collapse(str(message.id), embed.description or "", collapsing)
        if result.notice is not None:
            await interaction.response.send_message(ephemeral=True, **render_send(result.notice))
            return

        embed.description = result.body
        await interaction.response.edit_message(embeds=[embed], view=rebuild_view(message, result.collapsed))

    async def _on_command_error(self, interaction: discord.Interaction, error: app_commands.AppCommandError) -> None:
        self.logger.error(f"Error executing command: {error}")
        if interaction.response.is_done():
            await interaction.followup.send(COMMAND_ERROR, ephemeral=True)
        else:
            await interaction.response.send_message(COMMAND_ERROR, ephemeral=True)


def create_bot(settings: AppSettings, sync_commands: bool = False) -> RelayBot:
    """Wire adapters and services from settings."""
    provider = settings.provider
    streaming = settings.streaming
    llm_client = OpenRouterAdapter(
        api_key=provider.api_key or "",
        base_url=provider.base_url,
        connect_timeout_s=provider.connect_timeout_s,
        read_timeout_s=provider.read_timeout_s,
    )
    sessions = SessionService(max_history=settings.conversation.max_history)
    reasoning_cache = TTLMessageCache(max_items=settings.cache.max_items, ttl_seconds=settings.cache.ttl_seconds)
    content_cache = TTLMessageCache(max_items=settings.cache.max_items, ttl_seconds=settings.cache.ttl_seconds)

    gate = ClassifierGate(
        llm_client,
        ModelSelection(
            reasoning_model=provider.reasoning_model,
            non_thinking_model=provider.non_thinking_model,
            classifier_model=provider.classifier_model,
            online_suffix=provider.online_suffix,
        ),
        timeout_s=provider.classifier_timeout_s,
    )
    chat_service = ChatService(
        llm_client,
        sessions,
        gate,
        Finalizer(reasoning_cache, content_cache),
        system_prompt=settings.conversation.load_system_prompt(),
        render_config=RenderConfig(
            throttle_ms=streaming.throttle_ms,
            prose_max_chars=streaming.prose_max_chars,
            code_inline_max_chars=streaming.code_inline_max_chars,
            reasoning_preview_chars=streaming.reasoning_preview_chars,
        ),
        reasoning_options=ReasoningOptions(effort=provider.reasoning_effort),
        code_send_delay_s=streaming.code_send_delay_ms / 1000,
    )
    interactions = InteractionService(sessions, reasoning_cache, content_cache)
    return RelayBot(chat_service, interactions, sync_commands=sync_commands)
