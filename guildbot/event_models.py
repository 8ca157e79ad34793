"""Event data model

Event and Participant records plus the closed set of categories, RSVP
statuses and the WoW class/role catalogs used for game events.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel

# ============================================================================
# CATALOGS
# ============================================================================

WOW_CLASSES = {
    "death-knight": {"name": "Death Knight", "emoji": "⚔️", "color": 0xC41E3A},
    "demon-hunter": {"name": "Demon Hunter", "emoji": "😈", "color": 0xA330C9},
    "druid": {"name": "Druid", "emoji": "🐻", "color": 0xFF7C0A},
    "evoker": {"name": "Evoker", "emoji": "🐉", "color": 0x33937F},
    "hunter": {"name": "Hunter", "emoji": "🏹", "color": 0xAAD372},
    "mage": {"name": "Mage", "emoji": "🔮", "color": 0x3FC7EB},
    "monk": {"name": "Monk", "emoji": "🥋", "color": 0x00FF98},
    "paladin": {"name": "Paladin", "emoji": "🛡️", "color": 0xF48CBA},
    "priest": {"name": "Priest", "emoji": "✨", "color": 0xFFFFFF},
    "rogue": {"name": "Rogue", "emoji": "🗡️", "color": 0xFFF468},
    "shaman": {"name": "Shaman", "emoji": "⚡", "color": 0x0070DD},
    "warlock": {"name": "Warlock", "emoji": "👹", "color": 0x8788EE},
    "warrior": {"name": "Warrior", "emoji": "⚔️", "color": 0xC69B6D},
}

WOW_ROLES = {
    "tank": {"name": "Tank", "emoji": "🛡️"},
    "healer": {"name": "Healer", "emoji": "💚"},
    "dps": {"name": "DPS", "emoji": "⚔️"},
}

# ============================================================================
# ENUMS
# ============================================================================

class EventCategory(str, Enum):
    RAID = "raid"
    MYTHIC_PLUS = "mythic-plus"
    PVP = "pvp"
    GENERAL = "general"
    CUSTOM = "custom"

    @property
    def supports_role_metadata(self) -> bool:
        """Game events let participants pick a class and role."""
        return self in (EventCategory.RAID, EventCategory.MYTHIC_PLUS, EventCategory.PVP)

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]


_CATEGORY_LABELS = {
    EventCategory.RAID: "WoW Raid",
    EventCategory.MYTHIC_PLUS: "WoW Mythic+",
    EventCategory.PVP: "WoW PvP",
    EventCategory.GENERAL: "General Event",
    EventCategory.CUSTOM: "Custom",
}


class RsvpStatus(str, Enum):
    ACCEPTED = "accepted"
    TENTATIVE = "tentative"
    LATE = "late"
    DECLINED = "declined"

    @property
    def emoji(self) -> str:
        return RSVP_STATUS[self]["emoji"]

    @property
    def display_name(self) -> str:
        return RSVP_STATUS[self]["name"]


RSVP_STATUS = {
    RsvpStatus.ACCEPTED: {"emoji": "✅", "name": "Accepted"},
    RsvpStatus.TENTATIVE: {"emoji": "❓", "name": "Tentative"},
    RsvpStatus.LATE: {"emoji": "⏰", "name": "Will Be Late"},
    RsvpStatus.DECLINED: {"emoji": "❌", "name": "Declined"},
}

# Statuses whose holders hear about a cancellation
NOTIFY_ON_CANCEL = (RsvpStatus.ACCEPTED, RsvpStatus.TENTATIVE)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)

# ============================================================================
# RECORDS
# ============================================================================

class Event(BaseModel):
    id: int
    guild_id: int
    organizer_id: int
    channel_id: int
    title: str
    description: str = ""
    scheduled_at: datetime
    category: EventCategory = EventCategory.GENERAL
    capacity: int = 0
    message_id: Optional[int] = None
    cancelled: bool = False
    cancel_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime

    @property
    def is_active(self) -> bool:
        return not self.cancelled

    @property
    def is_unlimited(self) -> bool:
        return self.capacity == 0


class Participant(BaseModel):
    event_id: int
    user_id: int
    status: RsvpStatus = RsvpStatus.TENTATIVE
    wow_class: Optional[str] = None
    wow_role: Optional[str] = None
    note: Optional[str] = None
    join_seq: int
    joined_at: datetime
    updated_at: datetime
