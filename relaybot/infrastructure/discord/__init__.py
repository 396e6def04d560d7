"""
Discord infrastructure.
"""

from .channel import DiscordChannel, DiscordMessageHandle, render_edit, render_send

__all__ = ['DiscordChannel', 'DiscordMessageHandle', 'render_edit', 'render_send']
