"""Event Manager - event lifecycle for the command layer

Ties the store, RSVP rules, view synchronizer and notification dispatcher
together. State changes happen first and are authoritative; re-rendering and
DMs afterwards are best-effort and never undo them.
"""
from datetime import datetime
from typing import List, NamedTuple, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .config import EVENT_DATE_FORMAT, logger
from .errors import EventAlreadyCancelled, EventNotFound, EventValidationError, MessageGone, PermissionDenied, RenderError
from .event_models import Event, EventCategory, Participant, RsvpStatus, utcnow
from .event_store import EventStore
from .notifications import NotificationDispatcher, NotificationReport
from .presenter import Presenter
from .roster import Roster
from . import rsvp
from .event_views import ViewSynchronizer

MAX_TITLE_LENGTH = 256
MAX_DESCRIPTION_LENGTH = 2000
DEFAULT_CANCEL_REASON = "No reason provided"


class CreateResult(NamedTuple):
    event: Event
    published: bool


class CancelResult(NamedTuple):
    event: Event
    rendered: bool
    report: NotificationReport


def parse_event_date(text: str, tz_name: str = "UTC") -> datetime:
    """Parse 'YYYY-MM-DD HH:MM' as a local time in ``tz_name``."""
    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown EVENT_TIMEZONE {tz_name!r}, using UTC")
        tz = ZoneInfo("UTC")

    try:
        naive = datetime.strptime(text.strip(), EVENT_DATE_FORMAT)
    except ValueError:
        raise EventValidationError(
            "❌ Invalid date format! Use: YYYY-MM-DD HH:MM (e.g., 2025-10-25 20:00)"
        ) from None
    return naive.replace(tzinfo=tz)


def validate_new_event(title: str, description: str, scheduled_at: datetime, capacity: int, now: datetime = None):
    now = now or utcnow()
    if not title or not title.strip():
        raise EventValidationError("❌ Event title can't be empty!")
    if len(title) > MAX_TITLE_LENGTH:
        raise EventValidationError(f"❌ Event title must be {MAX_TITLE_LENGTH} characters or fewer!")
    if description and len(description) > MAX_DESCRIPTION_LENGTH:
        raise EventValidationError(f"❌ Description must be {MAX_DESCRIPTION_LENGTH} characters or fewer!")
    if scheduled_at.tzinfo is None:
        raise EventValidationError("❌ Event date needs a timezone!")
    if scheduled_at <= now:
        raise EventValidationError("❌ Event date must be in the future!")
    if capacity is None or capacity < 0:
        raise EventValidationError("❌ Maximum participants can't be negative!")


class EventManager:

    def __init__(self, store: EventStore, presenter: Presenter):
        self.store = store
        self.presenter = presenter
        self.views = ViewSynchronizer(store, presenter)
        self.notifier = NotificationDispatcher(presenter)

    async def _require_event(self, event_id: int, guild_id: int = None) -> Event:
        """Load an event, treating events of other guilds as missing."""
        event = await self.store.get_event(event_id)
        if event is None:
            raise EventNotFound(event_id)
        if guild_id is not None and event.guild_id != guild_id:
            raise EventNotFound(event_id)
        return event

    # ------------------------------------------------------------------------
    # CREATE
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
        now: datetime = None,
    ) -> CreateResult:
        """Store a new event and post its public message."""
        try:
            category = EventCategory(category)
        except ValueError:
            raise EventValidationError(f"❌ Unknown event type `{category}`.") from None
        validate_new_event(title, description, scheduled_at, capacity, now=now)

        event = await self.store.create_event(
            guild_id=guild_id,
            organizer_id=organizer_id,
            channel_id=channel_id,
            title=title.strip(),
            description=(description or "").strip(),
            scheduled_at=scheduled_at,
            category=category,
            capacity=capacity,
        )

        message_id = await self.views.publish(event)
        if message_id is not None:
            event = await self._require_event(event.id)
        return CreateResult(event, message_id is not None)

    # ------------------------------------------------------------------------
    # PARTICIPANT ACTIONS
    # ------------------------------------------------------------------------

    async def rsvp(self, event_id: int, user_id: int, status: RsvpStatus, guild_id: int = None) -> RsvpStatus:
        """Apply an RSVP and refresh the event message.

        Returns:
            The status now stored for the user

        """
        if guild_id is not None:
            await self._require_event(event_id, guild_id)
        participant = await rsvp.apply_rsvp(self.store, event_id, user_id, status)
        logger.info(f"📝 User {user_id} is {participant.status.value} for event {event_id}")
        await self.views.sync(event_id)
        return participant.status

    async def set_class(self, event_id: int, user_id: int, tag: str, guild_id: int = None) -> Participant:
        if guild_id is not None:
            await self._require_event(event_id, guild_id)
        participant = await rsvp.assign_class(self.store, event_id, user_id, tag)
        await self.views.sync(event_id)
        return participant

    async def set_role(self, event_id: int, user_id: int, tag: str, guild_id: int = None) -> Participant:
        if guild_id is not None:
            await self._require_event(event_id, guild_id)
        participant = await rsvp.assign_role(self.store, event_id, user_id, tag)
        await self.views.sync(event_id)
        return participant

    async def set_note(self, event_id: int, user_id: int, note: Optional[str], guild_id: int = None) -> Participant:
        # Notes only show on /event roster, the public message is unchanged
        if guild_id is not None:
            await self._require_event(event_id, guild_id)
        return await rsvp.assign_note(self.store, event_id, user_id, note)

    # ------------------------------------------------------------------------
    # CANCEL
    # ------------------------------------------------------------------------

    async def cancel_event(
        self,
        event_id: int,
        actor_id: int,
        reason: Optional[str] = None,
        can_manage_events: bool = False,
        guild_id: int = None,
    ) -> CancelResult:
        """Cancel an event, rewrite its message and DM the people who planned to come.

        ``guild_id`` scopes the lookup to the guild the request came from.

        Raises:
            EventNotFound, PermissionDenied, EventAlreadyCancelled

        """
        event = await self._require_event(event_id, guild_id)
        if event.organizer_id != actor_id and not can_manage_events:
            raise PermissionDenied()

        reason = (reason or "").strip() or DEFAULT_CANCEL_REASON
        if not await self.store.cancel_event(event_id, reason):
            raise EventAlreadyCancelled(event_id)

        event = await self._require_event(event_id)
        rendered = await self.views.render_cancelled(event)

        participants = await self.store.get_participants(event_id)
        report = await self.notifier.notify_cancellation(event, participants, reason)
        return CancelResult(event, rendered, report)

    # ------------------------------------------------------------------------
    # QUERIES
    # ------------------------------------------------------------------------

    async def list_upcoming(self, guild_id: int, now: datetime = None) -> List[Tuple[Event, int]]:
        events = await self.store.list_upcoming_events(guild_id, now=now)
        return [(event, await self.store.count_accepted(event.id)) for event in events]

    async def get_roster(self, event_id: int, guild_id: int = None) -> Tuple[Event, Roster]:
        event = await self._require_event(event_id, guild_id)
        return event, await self.views.roster_for(event)

    # ------------------------------------------------------------------------
    # REPAIR
    # ------------------------------------------------------------------------

    async def refresh(self, event_id: int, guild_id: int = None) -> bool:
        """Re-render an event message from the store.

        A new message is posted only when the old one was deleted (or never
        posted). Any other edit failure leaves the old message alone so two
        live copies of the event never exist.
        """
        event = await self._require_event(event_id, guild_id)
        if event.message_id is not None:
            try:
                await self.views.update(event)
                return True
            except MessageGone as e:
                logger.info(f"Event {event_id} message is gone ({e}), reposting")
            except RenderError as e:
                logger.error(f"Couldn't refresh event {event_id} message: {e}")
                return False
        return await self.views.publish(event) is not None
