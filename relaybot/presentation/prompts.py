"""
Prompt preparation helpers for the Discord entry points.
"""

from __future__ import annotations
import logging
import re
from typing import Awaitable, Callable, Optional

from ..utils import find_message_ids


logger = logging.getLogger(__name__)

MessageFetcher = Callable[[str], Awaitable[Optional[str]]]


def strip_mention(content: str, bot_id: int) -> str:
    """Remove a leading ``<@id>`` / ``<@!id>`` mention of the bot."""
    return re.sub(rf"^<@!?{bot_id}>", "", content).strip()


def parse_reasoning_flag(value: Optional[str]) -> bool:
    """Modal answers containing "yes" or "true" turn reasoning on."""
    if not value:
        return False
    lowered = value.lower()
    return "yes" in lowered or "true" in lowered


def build_context_prompt(question: str, author: str, context: str) -> str:
    return f"{question}\n\n---\n[Context from message by {author}]:\n{context}"


def attachment_context(content: str, filename: str, text: str) -> str:
    return f"{content}\n\n[Attachment Content: {filename}]\n{text}"


async def resolve_message_ids(prompt: str, fetch: MessageFetcher) -> str:
    """Replace message ids in ``prompt`` with the text of the messages they point at.

    ``fetch`` returns the text for an id, or None when there is nothing to use.
    Ids that fail to resolve are left untouched.
    """
    ids = find_message_ids(prompt)
    if not ids:
        return prompt

    logger.info(f"[Command] Found {len(ids)} potential message IDs in prompt.")
    replacements = {}
    for message_id in ids:
        try:
            text = await fetch(message_id)
        except Exception as e:
            logger.info(f"[Command] Failed to fetch message {message_id}: {e}")
            continue
        if text:
            replacements[message_id] = text

    for message_id, text in replacements.items():
        prompt = prompt.replace(message_id, text)
    return prompt
