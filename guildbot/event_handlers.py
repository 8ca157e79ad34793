"""Event handlers for GuildHelperBot

This module contains all Discord event handlers:
- on_interaction: RSVP buttons and class/role select menus on event messages
- on_ready: Bot startup and slash command sync
- on_guild_join: Server whitelist enforcement
- on_disconnect, on_resumed: Connection lifecycle
"""
from typing import TYPE_CHECKING

import discord

from utils.cooldowns import Cooldowns

if TYPE_CHECKING:
    from discord.ext import commands


async def reply_ephemeral(interaction: discord.Interaction, content: str):
    """Ephemeral reply that works before and after the interaction is acknowledged."""
    if interaction.response.is_done():
        await interaction.followup.send(content, ephemeral=True)
    else:
        await interaction.response.send_message(content, ephemeral=True)


def register_events(bot: "commands.Bot"):
    """Register all event handlers with the bot.

    Args:
        bot: The Discord bot instance, with ``event_manager`` attached
    """
    # Import dependencies here to avoid circular imports
    from .config import ALLOWED_GUILD_IDS, COMMAND_COOLDOWN_SECONDS, logger
    from .errors import EventError, EventNotFound, ParticipantNotFound
    from .event_models import WOW_CLASSES, WOW_ROLES
    from .guild_settings import get_guild_setting
    from .roster import class_role_label
    from .ui_components import BUTTON_ACTIONS, ClassRoleSetupView, parse_custom_id

    manager = bot.event_manager
    cooldowns = Cooldowns(seconds=COMMAND_COOLDOWN_SECONDS)

    def guild_of(interaction: discord.Interaction):
        return interaction.guild.id if interaction.guild else None

    # ============================================================================
    # EVENT MESSAGE INTERACTIONS
    # ============================================================================

    async def handle_rsvp(interaction: discord.Interaction, event_id: int, action: str):
        wait = cooldowns.retry_after(f"rsvp_{action}", interaction.user.id)
        if wait > 0:
            await interaction.response.send_message(
                f"⏱️ Please wait {wait:.1f} more second(s) before changing your RSVP again.",
                ephemeral=True,
            )
            return

        # Re-rendering can take longer than Discord's 3 second window
        await interaction.response.defer(ephemeral=True, thinking=True)

        status = await manager.rsvp(event_id, interaction.user.id, BUTTON_ACTIONS[action], guild_id=guild_of(interaction))
        event = await manager.store.get_event(event_id)
        await interaction.followup.send(
            f"{status.emoji} You are now marked as **{status.display_name}** for **{event.title}**!",
            ephemeral=True,
        )

    async def handle_setup(interaction: discord.Interaction, event_id: int):
        event = await manager.store.get_event(event_id)
        if event is None or (interaction.guild and event.guild_id != interaction.guild.id):
            raise EventNotFound(event_id)
        if not event.category.supports_role_metadata or not get_guild_setting(event.guild_id, "class_role_setup"):
            await reply_ephemeral(interaction, "❌ Class and role setup is only available for WoW events!")
            return
        if event.cancelled:
            await reply_ephemeral(interaction, "❌ This event has been cancelled!")
            return

        participant = await manager.store.get_participant(event_id, interaction.user.id)
        if participant is None:
            raise ParticipantNotFound(event_id, interaction.user.id)

        current_info = ""
        label = class_role_label(participant.wow_class, participant.wow_role)
        if label:
            current_info = f"\n\n**Current:** {label}"

        await interaction.response.send_message(
            f"🎮 **Set up your character for {event.title}**\n\n"
            f"Please select your class and role below.{current_info}",
            view=ClassRoleSetupView(event_id),
            ephemeral=True,
        )

    async def handle_select(interaction: discord.Interaction, event_id: int, kind: str):
        values = interaction.data.get("values") or []
        if not values:
            await reply_ephemeral(interaction, "❌ Nothing selected!")
            return
        value = values[0]

        # Acknowledge as a message update; content is edited below
        await interaction.response.defer()

        if kind == "class":
            participant = await manager.set_class(event_id, interaction.user.id, value, guild_id=guild_of(interaction))
            class_data = WOW_CLASSES[value]
            content = f"✅ Class set to {class_data['emoji']} **{class_data['name']}**!"
            if participant.wow_role:
                content = f"✅ Your setup is complete!\n\n{class_role_label(participant.wow_class, participant.wow_role)}"
            else:
                content += "\n\nNow select your role using the menu below."
        else:
            participant = await manager.set_role(event_id, interaction.user.id, value, guild_id=guild_of(interaction))
            role_data = WOW_ROLES[value]
            content = f"✅ Role set to {role_data['emoji']} **{role_data['name']}**!"
            if participant.wow_class:
                content = f"✅ Your setup is complete!\n\n{class_role_label(participant.wow_class, participant.wow_role)}"

        await interaction.edit_original_response(content=content)

    @bot.event
    async def on_interaction(interaction: discord.Interaction):
        """Route event buttons and selects by custom_id (survives restarts)."""
        if interaction.type != discord.InteractionType.component:
            return

        parsed = parse_custom_id((interaction.data or {}).get("custom_id", ""))
        if parsed is None:
            return
        action, event_id = parsed

        if interaction.guild and not get_guild_setting(interaction.guild.id, "events"):
            await reply_ephemeral(interaction, "❌ Events are not enabled in this server.")
            return

        try:
            if action in BUTTON_ACTIONS:
                await handle_rsvp(interaction, event_id, action)
            elif action == "setup":
                await handle_setup(interaction, event_id)
            elif action in ("class", "role"):
                await handle_select(interaction, event_id, action)
            else:
                await reply_ephemeral(interaction, "❌ Unknown action!")
        except EventError as e:
            await reply_ephemeral(interaction, e.user_message)
        except Exception as e:
            logger.error(f"Error handling event interaction {action}: {e}")
            await reply_ephemeral(
                interaction,
                "❌ An error occurred while processing your response. Please try again.",
            )

    # ============================================================================
    # CONNECTION LIFECYCLE
    # ============================================================================

    @bot.event
    async def on_disconnect():
        """Handle disconnection from Discord."""
        logger.warning("⚠️ Bot disconnected from Discord! Will attempt to reconnect...")

    @bot.event
    async def on_resumed():
        """Handle reconnection to Discord."""
        logger.info("✅ Bot reconnected to Discord successfully!")

    @bot.event
    async def on_guild_join(guild: discord.Guild):
        """Handle bot being added to a new server - check whitelist."""
        # If whitelist is empty, allow all servers (public mode)
        if not ALLOWED_GUILD_IDS:
            logger.info(f"✅ Joined server: {guild.name} (ID: {guild.id}) - Public mode, all servers allowed")
            return

        # Check if server is whitelisted
        if guild.id not in ALLOWED_GUILD_IDS:
            logger.warning(f"⚠️ UNAUTHORIZED server join: {guild.name} (ID: {guild.id}) - Auto-leaving!")

            # Try to notify the server owner
            try:
                owner = guild.owner
                if owner:
                    await owner.send(
                        f"👋 Hello! Thanks for trying to add **{bot.user.name}** to **{guild.name}**!\n\n"
                        f"However, this is a **private bot instance** and only available in authorized servers.\n\n"
                        f"The bot has automatically left your server. Sorry for the inconvenience!"
                    )
                    logger.info(f"📨 Sent notification to server owner: {owner.name}")
            except discord.Forbidden:
                logger.warning("Couldn't DM server owner (DMs disabled)")
            except discord.HTTPException as e:
                logger.error(f"Error notifying server owner: {e}")

            # Leave the server
            await guild.leave()
            logger.info(f"👋 Left unauthorized server: {guild.name}")
        else:
            logger.info(f"✅ Joined whitelisted server: {guild.name} (ID: {guild.id})")

    @bot.event
    async def on_ready():
        """Bot startup handler."""
        logger.info(f"✅ Logged in as {bot.user}!")

        # Log whitelist status
        if ALLOWED_GUILD_IDS:
            logger.info(f"🔒 Guild whitelist enabled: {len(ALLOWED_GUILD_IDS)} authorized servers")
        else:
            logger.info("🌐 Public mode: All servers allowed")

        # Sync slash commands
        try:
            synced = await bot.tree.sync()
            logger.info(f"🔄 Synced {len(synced)} slash commands")
        except discord.HTTPException as e:
            logger.error(f"Failed to sync commands: {e}")
