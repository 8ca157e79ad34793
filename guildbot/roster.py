"""Roster Aggregator

Groups an event's participants by RSVP status for display. Each group keeps
join order. Users whose display name can no longer be resolved are left out.
"""
from typing import Awaitable, Callable, Dict, List, NamedTuple, Optional

from .event_models import WOW_CLASSES, WOW_ROLES, Event, Participant, RsvpStatus

NameResolver = Callable[[int], Awaitable[Optional[str]]]


class RosterEntry(NamedTuple):
    user_id: int
    display_name: str
    label: Optional[str] = None
    note: Optional[str] = None


class Composition(NamedTuple):
    tanks: int = 0
    healers: int = 0
    dps: int = 0


class Roster(NamedTuple):
    groups: Dict[RsvpStatus, List[RosterEntry]]
    accepted_count: int
    composition: Optional[Composition]

    @property
    def accepted(self) -> List[RosterEntry]:
        return self.groups[RsvpStatus.ACCEPTED]

    @property
    def tentative(self) -> List[RosterEntry]:
        return self.groups[RsvpStatus.TENTATIVE]

    @property
    def late(self) -> List[RosterEntry]:
        return self.groups[RsvpStatus.LATE]

    @property
    def declined(self) -> List[RosterEntry]:
        return self.groups[RsvpStatus.DECLINED]

    @property
    def is_empty(self) -> bool:
        return not any(self.groups.values())


def class_role_label(wow_class: Optional[str], wow_role: Optional[str]) -> Optional[str]:
    """'🔮 Mage (🛡️ Tank)' when both are set, whichever one is set otherwise."""
    class_data = WOW_CLASSES.get(wow_class) if wow_class else None
    role_data = WOW_ROLES.get(wow_role) if wow_role else None

    if class_data and role_data:
        return f"{class_data['emoji']} {class_data['name']} ({role_data['emoji']} {role_data['name']})"
    if class_data:
        return f"{class_data['emoji']} {class_data['name']}"
    if role_data:
        return f"{role_data['emoji']} {role_data['name']}"
    return None


def count_composition(participants: List[Participant]) -> Composition:
    """Tank/healer/DPS split among accepted participants."""
    accepted = [p for p in participants if p.status == RsvpStatus.ACCEPTED]
    return Composition(
        tanks=sum(1 for p in accepted if p.wow_role == "tank"),
        healers=sum(1 for p in accepted if p.wow_role == "healer"),
        dps=sum(1 for p in accepted if p.wow_role == "dps"),
    )


async def build_roster(event: Event, participants: List[Participant], resolve_name: NameResolver) -> Roster:
    groups = {status: [] for status in RsvpStatus}
    show_labels = event.category.supports_role_metadata

    for participant in sorted(participants, key=lambda p: p.join_seq):
        display_name = await resolve_name(participant.user_id)
        if not display_name:
            continue

        label = class_role_label(participant.wow_class, participant.wow_role) if show_labels else None
        groups[participant.status].append(
            RosterEntry(participant.user_id, display_name, label, participant.note)
        )

    accepted_count = sum(1 for p in participants if p.status == RsvpStatus.ACCEPTED)
    composition = count_composition(participants) if show_labels else None
    return Roster(groups, accepted_count, composition)
