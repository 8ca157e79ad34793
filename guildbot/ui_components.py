"""UI Components - Discord views for event messages

Buttons and select menus carry their event ID in the custom_id
(``event_<action>_<event_id>``) and are answered by the interaction router
in event_handlers.py, so they keep working after a restart.
"""
from typing import Optional, Tuple

import discord

from .event_models import WOW_CLASSES, WOW_ROLES, Event, RsvpStatus

CUSTOM_ID_PREFIX = "event"

# Button action -> status stored for it
BUTTON_ACTIONS = {
    "accept": RsvpStatus.ACCEPTED,
    "tentative": RsvpStatus.TENTATIVE,
    "late": RsvpStatus.LATE,
    "decline": RsvpStatus.DECLINED,
}


def make_custom_id(action: str, event_id: int) -> str:
    return f"{CUSTOM_ID_PREFIX}_{action}_{event_id}"


def parse_custom_id(custom_id: str) -> Optional[Tuple[str, int]]:
    """Split ``event_accept_12`` into ("accept", 12); None for anything else."""
    parts = custom_id.split("_", 2)
    if len(parts) < 3 or parts[0] != CUSTOM_ID_PREFIX:
        return None
    if not parts[2].isdigit():
        return None
    return parts[1], int(parts[2])

# ============================================================================
# VIEWS
# ============================================================================

class EventRSVPView(discord.ui.View):
    """RSVP buttons under a public event message."""

    def __init__(self, event: Event):
        super().__init__(timeout=None)
        self.event_id = event.id

        self.add_item(discord.ui.Button(
            label="Accept", emoji="✅", style=discord.ButtonStyle.success,
            custom_id=make_custom_id("accept", event.id), row=0,
        ))
        self.add_item(discord.ui.Button(
            label="Tentative", emoji="❓", style=discord.ButtonStyle.secondary,
            custom_id=make_custom_id("tentative", event.id), row=0,
        ))
        self.add_item(discord.ui.Button(
            label="Will Be Late", emoji="⏰", style=discord.ButtonStyle.primary,
            custom_id=make_custom_id("late", event.id), row=0,
        ))
        self.add_item(discord.ui.Button(
            label="Decline", emoji="❌", style=discord.ButtonStyle.danger,
            custom_id=make_custom_id("decline", event.id), row=0,
        ))

        # Game events get a second row for class & role
        if event.category.supports_role_metadata:
            self.add_item(discord.ui.Button(
                label="Set Class & Role", emoji="🎮", style=discord.ButtonStyle.secondary,
                custom_id=make_custom_id("setup", event.id), row=1,
            ))


class ClassRoleSetupView(discord.ui.View):
    """Ephemeral class and role pickers for one event."""

    def __init__(self, event_id: int):
        super().__init__(timeout=300)  # 5 minute timeout

        self.add_item(discord.ui.Select(
            custom_id=make_custom_id("class", event_id),
            placeholder="Select your class",
            options=[
                discord.SelectOption(label=data["name"], value=key, emoji=data["emoji"])
                for key, data in WOW_CLASSES.items()
            ],
            row=0,
        ))
        self.add_item(discord.ui.Select(
            custom_id=make_custom_id("role", event_id),
            placeholder="Select your role",
            options=[
                discord.SelectOption(label=data["name"], value=key, emoji=data["emoji"])
                for key, data in WOW_ROLES.items()
            ],
            row=1,
        ))
