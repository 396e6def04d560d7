"""
Utility functions for relaybot.
"""

import logging
import re
import sys
from typing import List, Optional


MESSAGE_ID_RE = re.compile(r"\d{17,19}")
TEXT_ATTACHMENT_SUFFIXES = (".txt", ".md", ".js", ".py", ".json")


def setup_logging(level: str = "INFO", fmt: Optional[str] = None) -> None:
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=fmt or '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )

    # Reduce noise from third-party libraries unless debugging
    if level.upper() != "DEBUG":
        for name in ("httpx", "openai", "discord"):
            logging.getLogger(name).setLevel(logging.WARNING)


def collapse_preview(text: str, fallback_length: int = 100) -> str:
    """Shorten a reply to its first line or sentence, whichever ends first.

    A period is kept; a newline is not. Text with neither keeps its first
    ``fallback_length`` characters. Shortened text gets a trailing `` ...``.
    """
    cut = text.find("\n")
    period = text.find(".")
    if period != -1 and (cut == -1 or period < cut):
        cut = period + 1

    if cut != -1:
        return text[:cut] + " ..."
    if len(text) > fallback_length:
        return text[:fallback_length] + " ..."
    return text


def find_message_ids(text: str) -> List[str]:
    """Snowflake-looking ids (17-19 digits) in order of appearance, without duplicates."""
    seen: List[str] = []
    for match in MESSAGE_ID_RE.findall(text):
        if match not in seen:
            seen.append(match)
    return seen


def is_text_attachment(filename: str, content_type: Optional[str] = None) -> bool:
    """Whether an attachment can be read as plain text context."""
    if content_type and content_type.startswith("text/"):
        return True
    return filename.lower().endswith(TEXT_ATTACHMENT_SUFFIXES)
