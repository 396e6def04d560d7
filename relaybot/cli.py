#!/usr/bin/env python3
"""
Main CLI application for relaybot.
"""

import argparse
import logging
import sys
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Import after loading env vars to ensure proper configuration
from .infrastructure.config.settings import get_settings
from .utils import setup_logging


def main():
    """Main entry point for the relaybot Discord bot."""
    parser = argparse.ArgumentParser(
        description="Discord bot relaying prompts to OpenRouter models with streamed replies",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                          # Run with settings from .env
  %(prog)s --sync-commands          # Register slash commands, then run
  %(prog)s --log-level DEBUG        # Verbose logging
        """
    )

    parser.add_argument('--log-level',
                       default=None,
                       choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                       help='Logging level (default: LOG_LEVEL env var or INFO)')
    parser.add_argument('--sync-commands',
                       action='store_true',
                       help='Sync application commands with Discord on startup')

    args = parser.parse_args()

    settings = get_settings()
    setup_logging(args.log_level or settings.log_level, settings.log_format)
    logger = logging.getLogger(__name__)

    missing = settings.validate_required_settings()
    if missing:
        print(f"Error: missing required settings: {', '.join(missing)}", file=sys.stderr)
        print("Set them in the environment or a .env file.", file=sys.stderr)
        sys.exit(1)

    from .presentation.discord_bot import create_bot

    bot = create_bot(settings, sync_commands=args.sync_commands)
    logger.info(f"Starting relaybot - Reasoning model: {settings.provider.reasoning_model}")
    try:
        bot.run(settings.discord_token, log_handler=None)
    except KeyboardInterrupt:
        print("\n👋 Goodbye!", file=sys.stderr)


if __name__ == "__main__":
    main()
