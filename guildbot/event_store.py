"""Event Store - Persistent events and participant rosters

Stores every event and participant record in a single JSON document
(events.json by default). All calls go through one asyncio.Lock, so each
call is atomic, and the document is rewritten after every write.

Conditional writes take a ``guard`` callable that runs under the lock with
the current records and may raise to veto the write. The RSVP capacity check
uses this to make "accept only if below capacity" a single step.
"""
import asyncio
import json
import os
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .config import logger
from .errors import EventNotFound, ParticipantNotFound
from .event_models import Event, EventCategory, Participant, RsvpStatus, utcnow

# guard(event, participants, existing) -> None, raises to refuse the write
ParticipantGuard = Callable[[Event, List[Participant], Optional[Participant]], None]


def empty_document() -> dict:
    return {
        "next_event_id": 1,
        "next_join_seq": 1,
        "events": {},
        "participants": {},
    }


class EventStore:
    """JSON-file backed store for events and their participants."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = asyncio.Lock()
        self._data: Optional[dict] = None

    # ------------------------------------------------------------------------
    # FILE I/O
    # ------------------------------------------------------------------------

    def _load(self) -> dict:
        if not self.path.exists():
            return empty_document()
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Event store {self.path} is corrupt: {e}")
            raise
        for key, value in empty_document().items():
            data.setdefault(key, value)
        return data

    def _save(self):
        """Write the document to a temp file, then swap it into place."""
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            if self.path.parent and not self.path.parent.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Error saving event store {self.path}: {e}")
            # Drop unsaved in-memory changes; next call reloads from disk
            self._data = None
            raise

    def _ensure_loaded(self) -> dict:
        if self._data is None:
            self._data = self._load()
        return self._data

    # ------------------------------------------------------------------------
    # INTERNAL ACCESSORS (call with the lock held)
    # ------------------------------------------------------------------------

    def _event(self, event_id: int) -> Event:
        raw = self._ensure_loaded()["events"].get(str(event_id))
        if raw is None:
            raise EventNotFound(event_id)
        return Event.model_validate(raw)

    def _participants(self, event_id: int) -> Dict[str, dict]:
        return self._ensure_loaded()["participants"].setdefault(str(event_id), {})

    def _sorted_participants(self, event_id: int) -> List[Participant]:
        rows = self._ensure_loaded()["participants"].get(str(event_id), {})
        participants = [Participant.model_validate(raw) for raw in rows.values()]
        participants.sort(key=lambda p: p.join_seq)
        return participants

    def _put_event(self, event: Event):
        self._ensure_loaded()["events"][str(event.id)] = event.model_dump(mode="json")

    def _put_participant(self, participant: Participant):
        rows = self._participants(participant.event_id)
        rows[str(participant.user_id)] = participant.model_dump(mode="json")

    # ------------------------------------------------------------------------
    # EVENTS
    # ------------------------------------------------------------------------

    async def create_event(
        self,
        guild_id: int,
        organizer_id: int,
        channel_id: int,
        title: str,
        description: str,
        scheduled_at: datetime,
        category: EventCategory,
        capacity: int = 0,
    ) -> Event:
        """Create an event and return it with its new ID."""
        async with self._lock:
            data = self._ensure_loaded()
            event = Event(
                id=data["next_event_id"],
                guild_id=guild_id,
                organizer_id=organizer_id,
                channel_id=channel_id,
                title=title,
                description=description,
                scheduled_at=scheduled_at,
                category=category,
                capacity=capacity,
                created_at=utcnow(),
            )
            data["next_event_id"] += 1
            self._put_event(event)
            self._save()
        logger.info(f"📅 Created event {event.id} '{event.title}' in guild {guild_id}")
        return event

    async def get_event(self, event_id: int) -> Optional[Event]:
        async with self._lock:
            try:
                return self._event(event_id)
            except EventNotFound:
                return None

    async def cancel_event(self, event_id: int, reason: Optional[str] = None) -> bool:
        """Flag an event as cancelled.

        Returns:
            True if the event was cancelled by this call, False if it already was

        """
        async with self._lock:
            event = self._event(event_id)
            if event.cancelled:
                return False
            event.cancelled = True
            event.cancel_reason = reason
            event.cancelled_at = utcnow()
            self._put_event(event)
            self._save()
        logger.info(f"🚫 Cancelled event {event_id} ({reason})")
        return True

    async def attach_message_ref(self, event_id: int, channel_id: int, message_id: int):
        async with self._lock:
            event = self._event(event_id)
            event.channel_id = channel_id
            event.message_id = message_id
            self._put_event(event)
            self._save()

    async def list_upcoming_events(self, guild_id: int, now: datetime = None) -> List[Event]:
        """Active events in a guild that have not started yet, soonest first."""
        now = now or utcnow()
        async with self._lock:
            events = [
                Event.model_validate(raw)
                for raw in self._ensure_loaded()["events"].values()
            ]
        upcoming = [
            e for e in events
            if e.guild_id == guild_id and not e.cancelled and e.scheduled_at > now
        ]
        upcoming.sort(key=lambda e: (e.scheduled_at, e.id))
        return upcoming

    # ------------------------------------------------------------------------
    # PARTICIPANTS
    # ------------------------------------------------------------------------

    async def upsert_participant(
        self,
        event_id: int,
        user_id: int,
        status: RsvpStatus,
        guard: ParticipantGuard = None,
    ) -> Participant:
        """Set a user's RSVP status, creating the record on first contact.

        ``guard`` sees the event and roster as they are at write time.
        """
        async with self._lock:
            event = self._event(event_id)
            participants = self._sorted_participants(event_id)
            existing = next((p for p in participants if p.user_id == user_id), None)
            if guard is not None:
                guard(event, participants, existing)

            now = utcnow()
            if existing is not None:
                existing.status = status
                existing.updated_at = now
                participant = existing
            else:
                data = self._ensure_loaded()
                participant = Participant(
                    event_id=event_id,
                    user_id=user_id,
                    status=status,
                    join_seq=data["next_join_seq"],
                    joined_at=now,
                    updated_at=now,
                )
                data["next_join_seq"] += 1
            self._put_participant(participant)
            self._save()
        return participant

    async def update_participant(
        self,
        event_id: int,
        user_id: int,
        guard: Callable[[Event], None] = None,
        **fields,
    ) -> Participant:
        """Change metadata fields of an existing participant.

        ``guard`` runs against the event before the participant lookup, so an
        event-level refusal wins over a missing RSVP.
        """
        async with self._lock:
            event = self._event(event_id)
            if guard is not None:
                guard(event)
            raw = self._participants(event_id).get(str(user_id))
            if raw is None:
                raise ParticipantNotFound(event_id, user_id)
            participant = Participant.model_validate(raw)
            for name, value in fields.items():
                setattr(participant, name, value)
            participant.updated_at = utcnow()
            self._put_participant(participant)
            self._save()
        return participant

    async def set_participant_class(self, event_id: int, user_id: int, tag: str, guard=None) -> Participant:
        return await self.update_participant(event_id, user_id, guard=guard, wow_class=tag)

    async def set_participant_role(self, event_id: int, user_id: int, tag: str, guard=None) -> Participant:
        return await self.update_participant(event_id, user_id, guard=guard, wow_role=tag)

    async def set_participant_note(self, event_id: int, user_id: int, note: Optional[str], guard=None) -> Participant:
        return await self.update_participant(event_id, user_id, guard=guard, note=note)

    async def get_participant(self, event_id: int, user_id: int) -> Optional[Participant]:
        async with self._lock:
            raw = self._ensure_loaded()["participants"].get(str(event_id), {}).get(str(user_id))
            return Participant.model_validate(raw) if raw is not None else None

    async def get_participants(self, event_id: int) -> List[Participant]:
        """All participants of an event in join order."""
        async with self._lock:
            return self._sorted_participants(event_id)

    async def count_accepted(self, event_id: int) -> int:
        participants = await self.get_participants(event_id)
        return sum(1 for p in participants if p.status == RsvpStatus.ACCEPTED)
