"""Event Commands - guild event scheduling

/event subcommands:
- create - Post a new event with RSVP buttons (Manage Events)
- edit - Not available yet
- cancel - Cancel an event and DM participants
- list - Upcoming events in this server
- roster - Full participant list for an event
- note - Attach a short note to your RSVP
- refresh - Re-render an event message from stored data
"""
from typing import TYPE_CHECKING

import discord
from discord import app_commands

if TYPE_CHECKING:
    from discord.ext import commands

from ..config import EVENT_LIST_LIMIT, EVENT_TIMEZONE, logger
from ..errors import EventError
from ..event_manager import parse_event_date
from ..event_views import build_event_list_embed, build_roster_embed
from ..guild_settings import get_guild_setting

EVENT_TYPE_CHOICES = [
    app_commands.Choice(name="WoW Raid", value="raid"),
    app_commands.Choice(name="WoW Mythic+", value="mythic-plus"),
    app_commands.Choice(name="WoW PvP", value="pvp"),
    app_commands.Choice(name="General Event", value="general"),
    app_commands.Choice(name="Custom", value="custom"),
]


async def send_error(interaction: discord.Interaction, content: str):
    """Reply ephemerally whether or not the interaction was acknowledged."""
    if interaction.response.is_done():
        await interaction.followup.send(content, ephemeral=True)
    else:
        await interaction.response.send_message(content, ephemeral=True)


async def events_enabled(interaction: discord.Interaction) -> bool:
    if not interaction.guild:
        await interaction.response.send_message("❌ Events can only be used in a server.", ephemeral=True)
        return False
    if not get_guild_setting(interaction.guild.id, "events"):
        await interaction.response.send_message(
            "❌ Events are not enabled in this server.\n"
            "_Administrators can enable them with `/settings`_",
            ephemeral=True,
        )
        return False
    return True


def register_event_commands(bot: "commands.Bot"):
    """Register the /event command group with the bot.

    Args:
        bot: The Discord bot instance, with ``event_manager`` attached
    """
    manager = bot.event_manager
    group = app_commands.Group(name="event", description="Manage guild events", guild_only=True)

    @group.command(name="create", description="Create a new event")
    @app_commands.rename(event_type="type", max_participants="max-participants")
    @app_commands.describe(
        title="Event title",
        description="Event description",
        date="Event date (YYYY-MM-DD HH:MM)",
        event_type="Event type",
        max_participants="Maximum number of participants (0 = unlimited)",
        channel="Channel to post event in (defaults to current)",
    )
    @app_commands.choices(event_type=EVENT_TYPE_CHOICES)
    async def create_command(
        interaction: discord.Interaction,
        title: str,
        description: str,
        date: str,
        event_type: app_commands.Choice[str],
        max_participants: app_commands.Range[int, 0] = 0,
        channel: discord.TextChannel = None,
    ):
        if not await events_enabled(interaction):
            return
        if not interaction.permissions.manage_events:
            await interaction.response.send_message("❌ You need the Manage Events permission to create events.", ephemeral=True)
            return

        await interaction.response.defer()
        target = channel or interaction.channel

        try:
            scheduled_at = parse_event_date(date, EVENT_TIMEZONE)
            result = await manager.create_event(
                guild_id=interaction.guild.id,
                organizer_id=interaction.user.id,
                channel_id=target.id,
                title=title,
                description=description,
                scheduled_at=scheduled_at,
                category=event_type.value,
                capacity=max_participants,
            )
        except EventError as e:
            await interaction.followup.send(e.user_message, ephemeral=True)
            return
        except Exception as e:
            logger.error(f"Error in event create: {e}")
            await interaction.followup.send("❌ Couldn't create the event. Please try again.", ephemeral=True)
            return

        if result.published:
            await interaction.followup.send(f"✅ Event created! View it in {target.mention} (ID: {result.event.id})")
        else:
            await interaction.followup.send(
                f"⚠️ Event {result.event.id} was saved but I couldn't post it in {target.mention}.\n"
                f"Check my permissions there, then run `/event refresh {result.event.id}`.",
            )
        logger.info(f"📅 /event create by {interaction.user} in {interaction.guild.name}: {title}")

    @group.command(name="edit", description="Edit an existing event")
    @app_commands.rename(event_id="event-id")
    @app_commands.describe(event_id="Event ID (from event message)")
    async def edit_command(interaction: discord.Interaction, event_id: int):
        await interaction.response.send_message("🚧 Edit functionality coming soon!", ephemeral=True)

    @group.command(name="cancel", description="Cancel an event")
    @app_commands.rename(event_id="event-id")
    @app_commands.describe(event_id="Event ID", reason="Cancellation reason")
    async def cancel_command(interaction: discord.Interaction, event_id: int, reason: str = None):
        if not await events_enabled(interaction):
            return
        await interaction.response.defer()

        try:
            result = await manager.cancel_event(
                event_id,
                actor_id=interaction.user.id,
                reason=reason,
                can_manage_events=interaction.permissions.manage_events,
                guild_id=interaction.guild.id,
            )
        except EventError as e:
            await interaction.followup.send(e.user_message, ephemeral=True)
            return
        except Exception as e:
            logger.error(f"Error in event cancel: {e}")
            await interaction.followup.send("❌ Couldn't cancel the event. Please try again.", ephemeral=True)
            return

        content = f"✅ Event cancelled and {len(result.report.notified)} participant(s) notified."
        if result.report.failed:
            content += f"\n⚠️ {len(result.report.failed)} participant(s) couldn't be reached by DM."
        if not result.rendered:
            content += "\n⚠️ The event message couldn't be updated."
        await interaction.followup.send(content)

    @group.command(name="list", description="List all upcoming events")
    async def list_command(interaction: discord.Interaction):
        if not await events_enabled(interaction):
            return
        await interaction.response.defer()

        try:
            upcoming = await manager.list_upcoming(interaction.guild.id)
        except Exception as e:
            logger.error(f"Error in event list: {e}")
            await interaction.followup.send("❌ Couldn't load events. Please try again.", ephemeral=True)
            return

        if not upcoming:
            await interaction.followup.send("📅 No upcoming events!")
            return

        embed = build_event_list_embed(upcoming[:EVENT_LIST_LIMIT], total=len(upcoming))
        await interaction.followup.send(embed=embed)

    @group.command(name="roster", description="View event roster")
    @app_commands.rename(event_id="event-id")
    @app_commands.describe(event_id="Event ID")
    async def roster_command(interaction: discord.Interaction, event_id: int):
        if not await events_enabled(interaction):
            return
        await interaction.response.defer()

        try:
            event, roster = await manager.get_roster(event_id, guild_id=interaction.guild.id)
        except EventError as e:
            await interaction.followup.send(e.user_message, ephemeral=True)
            return

        await interaction.followup.send(embed=build_roster_embed(event, roster))

    @group.command(name="note", description="Add a short note to your RSVP")
    @app_commands.rename(event_id="event-id")
    @app_commands.describe(event_id="Event ID", text="Note shown next to your name (leave empty to clear)")
    async def note_command(interaction: discord.Interaction, event_id: int, text: app_commands.Range[str, 0, 100] = None):
        if not await events_enabled(interaction):
            return

        try:
            participant = await manager.set_note(event_id, interaction.user.id, text, guild_id=interaction.guild.id)
        except EventError as e:
            await send_error(interaction, e.user_message)
            return

        if participant.note:
            await interaction.response.send_message(f"📝 Note saved: *{participant.note}*", ephemeral=True)
        else:
            await interaction.response.send_message("📝 Note cleared.", ephemeral=True)

    @group.command(name="refresh", description="Re-render an event message from stored data")
    @app_commands.rename(event_id="event-id")
    @app_commands.describe(event_id="Event ID")
    async def refresh_command(interaction: discord.Interaction, event_id: int):
        if not await events_enabled(interaction):
            return
        if not interaction.permissions.manage_events:
            await interaction.response.send_message("❌ You need the Manage Events permission to do that.", ephemeral=True)
            return
        await interaction.response.defer(ephemeral=True)

        try:
            refreshed = await manager.refresh(event_id, guild_id=interaction.guild.id)
        except EventError as e:
            await interaction.followup.send(e.user_message, ephemeral=True)
            return

        if refreshed:
            await interaction.followup.send("🔄 Event message refreshed.", ephemeral=True)
        else:
            await interaction.followup.send("❌ Couldn't update or repost the event message. Check my channel permissions.", ephemeral=True)

    bot.tree.add_command(group)
