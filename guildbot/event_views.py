"""Event message rendering and the View Synchronizer

The public event message is a projection of the store. ViewSynchronizer
rebuilds it from scratch on every change; if Discord refuses the edit the
failure is logged and the stored state stands.
"""
from typing import List, Optional, Tuple

import discord

from utils.discord_formatter import DESCRIPTION_LIMIT, discord_timestamp, join_lines, truncate

from .config import logger
from .errors import RenderError
from .event_models import Event, RsvpStatus
from .event_store import EventStore
from .presenter import Presenter
from .roster import Roster, RosterEntry, build_roster
from .ui_components import EventRSVPView

EVENT_COLOR = discord.Color.from_str("#0099ff")
CANCELLED_COLOR = discord.Color.from_str("#ff0000")


def format_entry(entry: RosterEntry, bold: bool = True, with_note: bool = False) -> str:
    line = f"**{entry.display_name}**" if bold else f"<@{entry.user_id}>"
    if entry.label:
        line += f" - {entry.label}"
    if with_note and entry.note:
        line += f" *{entry.note}*"
    return line


def _status_fields(roster: Roster, bold: bool, with_note: bool) -> List[Tuple[str, str]]:
    fields = []
    for status in RsvpStatus:
        entries = roster.groups[status]
        if not entries:
            continue
        lines = [format_entry(e, bold=bold, with_note=with_note) for e in entries]
        fields.append((f"{status.emoji} {status.display_name} ({len(entries)})", join_lines(lines)))
    return fields

# ============================================================================
# EMBEDS
# ============================================================================

def build_event_embed(event: Event, roster: Roster) -> discord.Embed:
    """Public embed for an active event."""
    embed = discord.Embed(
        title=truncate(event.title, 256),
        description=truncate(event.description, DESCRIPTION_LIMIT) or None,
        color=EVENT_COLOR,
        timestamp=event.created_at,
    )
    embed.add_field(name="📅 Date", value=discord_timestamp(event.scheduled_at, "F"), inline=True)
    embed.add_field(name="⏰ Starts In", value=discord_timestamp(event.scheduled_at, "R"), inline=True)
    embed.add_field(name="👤 Organizer", value=f"<@{event.organizer_id}>", inline=True)

    if event.capacity > 0:
        embed.add_field(name="👥 Participants", value=f"{roster.accepted_count}/{event.capacity}", inline=True)

    for name, value in _status_fields(roster, bold=True, with_note=False):
        embed.add_field(name=name, value=value, inline=False)

    if roster.composition is not None:
        c = roster.composition
        embed.add_field(
            name="🎮 Composition",
            value=f"🛡️ Tanks: {c.tanks}\n💚 Healers: {c.healers}\n⚔️ DPS: {c.dps}",
            inline=True,
        )

    embed.set_footer(text=f"Event ID: {event.id} | Use /event roster {event.id} to see full roster")
    return embed


def build_cancelled_embed(event: Event) -> discord.Embed:
    """Terminal embed for a cancelled event."""
    reason = event.cancel_reason or "No reason provided"
    description = f"**Reason:** {reason}"
    if event.description:
        description += f"\n\n~~{event.description}~~"

    embed = discord.Embed(
        title=truncate(f"❌ CANCELLED: {event.title}", 256),
        description=truncate(description, DESCRIPTION_LIMIT),
        color=CANCELLED_COLOR,
        timestamp=event.cancelled_at,
    )
    embed.add_field(name="📅 Was scheduled for", value=discord_timestamp(event.scheduled_at, "F"), inline=False)
    embed.add_field(name="👤 Organizer", value=f"<@{event.organizer_id}>", inline=False)
    embed.set_footer(text=f"Event ID: {event.id}")
    return embed


def build_roster_embed(event: Event, roster: Roster) -> discord.Embed:
    """Full roster with mentions and notes, for /event roster."""
    title = f"📋 Roster: {event.title}"
    if event.cancelled:
        title += " (cancelled)"
    embed = discord.Embed(
        title=truncate(title, 256),
        description=f"Event Date: {discord_timestamp(event.scheduled_at, 'F')}",
        color=CANCELLED_COLOR if event.cancelled else EVENT_COLOR,
    )

    for name, value in _status_fields(roster, bold=False, with_note=True):
        embed.add_field(name=name, value=value, inline=False)

    if roster.is_empty:
        embed.description = "No participants yet!"
    return embed


def build_event_list_embed(events: List[Tuple[Event, int]], total: int) -> discord.Embed:
    """Upcoming events with their accepted counts."""
    embed = discord.Embed(
        title="📅 Upcoming Events",
        description="Here are all the upcoming events:",
        color=EVENT_COLOR,
    )

    for event, accepted_count in events:
        max_str = f"/{event.capacity}" if event.capacity > 0 else ""
        embed.add_field(
            name=truncate(f"{event.title} (ID: {event.id})", 256),
            value=truncate(
                f"📝 {event.description}\n"
                f"📅 {discord_timestamp(event.scheduled_at, 'R')}\n"
                f"👥 {accepted_count}{max_str} participants\n"
                f"🎮 Type: {event.category.label}"
            ),
            inline=False,
        )

    if total > len(events):
        embed.set_footer(text=f"Showing {len(events)} of {total} events")
    return embed

# ============================================================================
# VIEW SYNCHRONIZER
# ============================================================================

class ViewSynchronizer:
    """Keeps each event's public message in line with the store."""

    def __init__(self, store: EventStore, presenter: Presenter):
        self.store = store
        self.presenter = presenter

    async def roster_for(self, event: Event) -> Roster:
        participants = await self.store.get_participants(event.id)
        return await build_roster(event, participants, self.presenter.resolve_display_name)

    async def render(self, event: Event) -> Tuple[discord.Embed, Optional[discord.ui.View]]:
        """Embed and controls for the event's current state."""
        if event.cancelled:
            return build_cancelled_embed(event), None
        roster = await self.roster_for(event)
        return build_event_embed(event, roster), EventRSVPView(event)

    async def publish(self, event: Event) -> Optional[int]:
        """Post a fresh event message and remember where it is.

        Returns:
            The new message ID, or None if Discord refused the post

        """
        embed, view = await self.render(event)
        try:
            message_id = await self.presenter.send_view(event.channel_id, embed, view)
        except RenderError as e:
            logger.error(f"Failed to post message for event {event.id}: {e}")
            return None

        await self.store.attach_message_ref(event.id, event.channel_id, message_id)
        logger.info(f"📨 Posted event {event.id} message {message_id}")
        return message_id

    async def update(self, event: Event):
        """Edit the stored message in place.

        Raises:
            MessageGone if the message was deleted, RenderError for any other refusal

        """
        embed, view = await self.render(event)
        await self.presenter.edit_view(event.channel_id, event.message_id, embed, view)
        logger.info(f"Updated event message for event {event.id}")

    async def sync(self, event_id: int) -> bool:
        """Re-render the stored message from current state. Never raises RenderError."""
        event = await self.store.get_event(event_id)
        if event is None:
            logger.warning(f"Skipping render for missing event {event_id}")
            return False
        if event.message_id is None:
            logger.warning(f"Event {event_id} has no message to update")
            return False

        try:
            await self.update(event)
        except RenderError as e:
            logger.error(f"Error updating event message for event {event_id}: {e}")
            return False
        return True

    async def render_cancelled(self, event: Event) -> bool:
        """Rewrite the message to its cancelled form with every control removed."""
        if event.message_id is None:
            return False
        try:
            await self.presenter.edit_view(event.channel_id, event.message_id, build_cancelled_embed(event), None)
        except RenderError as e:
            logger.error(f"Failed to update cancelled event message {event.id}: {e}")
            return False
        return True
