"""GuildHelperBot - Guild event scheduling for Discord

This package contains the core bot functionality split into logical modules.

Structure:
- config.py: Configuration and initialization
- guild_settings.py: Per-server settings
- event_models.py: Event / Participant records, categories, RSVP statuses
- event_store.py: JSON-backed event and participant store
- rsvp.py: RSVP rules and class/role assignment
- roster.py: Roster grouping for display
- presenter.py: Discord adapter (names, messages, DMs)
- event_views.py: Embeds and the view synchronizer
- notifications.py: Cancellation DMs
- event_manager.py: Event lifecycle used by commands and handlers
- ui_components.py: Discord UI (buttons, selects)
- event_handlers.py: Discord event handlers
- commands/: Slash command implementations

Usage:
    from main import create_bot
    from guildbot.config import BOT_TOKEN

    bot = create_bot()
    bot.run(BOT_TOKEN)
"""

__version__ = "1.0.0"
