"""Command modules for GuildHelperBot

Contains all slash command implementations organized by category.

Categories:
- events.py: Guild event scheduling and RSVPs
- management.py: Server management commands
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from discord.ext import commands

def register_commands(bot: "commands.Bot"):
    """Register all commands with the bot.

    Args:
        bot: The Discord bot instance
    """
    # Import all command registration functions
    from .events import register_event_commands
    from .management import register_management_commands

    # Register all command categories
    register_event_commands(bot)
    register_management_commands(bot)
