#!/usr/bin/env python3
"""GuildHelperBot - Main Entry Point

A Discord bot for guild event scheduling: events with RSVP buttons,
WoW class/role rosters and cancellation notices.
"""
import asyncio

import discord
from discord.ext import commands

from guildbot.config import BOT_TOKEN, EVENT_STORE_PATH, logger, intents
from guildbot.event_handlers import register_events
from guildbot.commands import register_commands
from guildbot.event_manager import EventManager
from guildbot.event_store import EventStore
from guildbot.presenter import DiscordPresenter


def create_bot() -> commands.Bot:
    """Build the bot with its event manager, handlers and commands."""
    bot = commands.Bot(command_prefix="!", intents=intents)

    # Event core shared by handlers and commands
    bot.event_manager = EventManager(EventStore(EVENT_STORE_PATH), DiscordPresenter(bot))

    # Register event handlers
    register_events(bot)

    # Register commands
    register_commands(bot)
    return bot


def main():
    """Main entry point for the bot."""
    if not BOT_TOKEN:
        logger.error("❌ BOT_TOKEN not found in .env file!")
        return

    logger.info("🚀 Starting GuildHelperBot...")
    logger.info(f"📂 Event store: {EVENT_STORE_PATH}")

    # Add retry logic with EXPONENTIAL BACKOFF to prevent Cloudflare rate limiting
    max_retries = 5
    retry_count = 0

    while retry_count < max_retries:
        bot = create_bot()
        try:
            bot.run(BOT_TOKEN, reconnect=True)
            break  # Exit loop if bot stops gracefully
        except discord.LoginFailure:
            logger.error("❌ INVALID TOKEN - Bot token may be banned or revoked!")
            break  # Don't retry on auth failures
        except discord.HTTPException as e:
            retry_count += 1
            # Check if it's a rate limit error (429 or Cloudflare block)
            if e.status == 429 or "cloudflare" in str(e).lower():
                wait_time = 2 ** retry_count  # Exponential backoff: 2, 4, 8, 16, 32 seconds
                if retry_count < max_retries:
                    logger.warning(
                        f"⚠️ Rate limited by Discord/Cloudflare! Retry {retry_count}/{max_retries} in {wait_time}s..."
                    )
                    asyncio.run(asyncio.sleep(wait_time))
                else:
                    logger.error(
                        f"❌ Failed after {max_retries} retries due to rate limiting. "
                        f"Please wait a few minutes before restarting."
                    )
            elif retry_count < max_retries:
                # Other HTTP errors - log and retry
                logger.error(f"⚠️ HTTP Error: {e} - Retrying {retry_count}/{max_retries}...")
                asyncio.run(asyncio.sleep(5))
            else:
                logger.error(f"❌ Failed after {max_retries} retries: {e}")


if __name__ == "__main__":
    main()
