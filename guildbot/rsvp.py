"""RSVP state machine and role-class assignment

Any status may move to any other status. Two gates apply: a cancelled event
accepts no changes, and ``accepted`` is refused once the event is at
capacity. Users already counted as accepted may always re-accept.
"""
from typing import List, Optional

from .errors import EventCancelled, EventFull, InvalidSelection
from .event_models import WOW_CLASSES, WOW_ROLES, Event, Participant, RsvpStatus
from .event_store import EventStore


def check_transition(event: Event, participants: List[Participant], existing: Optional[Participant], status: RsvpStatus):
    """Raise if ``status`` may not be applied for the requesting participant."""
    if event.cancelled:
        raise EventCancelled(event.id)

    if status != RsvpStatus.ACCEPTED or event.capacity == 0:
        return

    requester = existing.user_id if existing is not None else None
    accepted_others = sum(
        1 for p in participants
        if p.status == RsvpStatus.ACCEPTED and p.user_id != requester
    )
    if accepted_others >= event.capacity:
        raise EventFull(event.id, event.capacity)


def _check_open(event: Event):
    if event.cancelled:
        raise EventCancelled(event.id)


def _open_with_tag(tag: str, catalog: dict, kind: str):
    """Guard that refuses cancelled events first, then unknown tags."""

    def guard(event: Event):
        _check_open(event)
        if tag not in catalog:
            raise InvalidSelection(f"❌ Unknown {kind} `{tag}`.")

    return guard


async def apply_rsvp(store: EventStore, event_id: int, user_id: int, status: RsvpStatus) -> Participant:
    """Validate and apply one RSVP in a single store call.

    Raises:
        EventNotFound, EventCancelled, EventFull

    """
    status = RsvpStatus(status)

    def guard(event, participants, existing):
        check_transition(event, participants, existing, status)

    return await store.upsert_participant(event_id, user_id, status, guard=guard)


async def assign_class(store: EventStore, event_id: int, user_id: int, tag: str) -> Participant:
    """Set the participant's class tag (role is left alone)."""
    guard = _open_with_tag(tag, WOW_CLASSES, "class")
    return await store.set_participant_class(event_id, user_id, tag, guard=guard)


async def assign_role(store: EventStore, event_id: int, user_id: int, tag: str) -> Participant:
    """Set the participant's role tag (class is left alone)."""
    guard = _open_with_tag(tag, WOW_ROLES, "role")
    return await store.set_participant_role(event_id, user_id, tag, guard=guard)


async def assign_note(store: EventStore, event_id: int, user_id: int, note: Optional[str], max_length: int = 100) -> Participant:
    note = (note or "").strip() or None

    def guard(event: Event):
        _check_open(event)
        if note and len(note) > max_length:
            raise InvalidSelection(f"❌ Notes must be {max_length} characters or fewer.")

    return await store.set_participant_note(event_id, user_id, note, guard=guard)
