from datetime import timedelta
from types import SimpleNamespace

import discord
import pytest

from guildbot import guild_settings

from guildbot.errors import MessageGone, NotificationError, RenderError
from guildbot.event_manager import EventManager
from guildbot.event_models import EventCategory, utcnow
from guildbot.event_store import EventStore

GUILD_ID = 111
CHANNEL_ID = 222
ORGANIZER_ID = 1


class FakePresenter:
    """Records every Discord call instead of making it."""

    def __init__(self):
        self.missing_users = set()
        self.blocked_dms = set()
        self.fail_send = False
        self.fail_edit = False
        self.deleted_messages = set()
        self.sent = []
        self.edits = []
        self.notices = []
        self.next_message_id = 5000

    async def resolve_display_name(self, user_id):
        if user_id in self.missing_users:
            return None
        return f"User{user_id}"

    async def send_view(self, channel_id, embed, view):
        if self.fail_send:
            raise RenderError("channel gone")
        self.next_message_id += 1
        self.sent.append((channel_id, self.next_message_id, embed, view))
        return self.next_message_id

    async def edit_view(self, channel_id, message_id, embed, view):
        if message_id in self.deleted_messages:
            raise MessageGone("unknown message")
        if self.fail_edit:
            raise RenderError("503 Service Unavailable")
        self.edits.append((channel_id, message_id, embed, view))

    async def send_notice(self, user_id, content):
        if user_id in self.blocked_dms:
            raise NotificationError(user_id, "DMs disabled")
        self.notices.append((user_id, content))


@pytest.fixture
def presenter():
    return FakePresenter()


@pytest.fixture
def store(tmp_path):
    return EventStore(tmp_path / "events.json")


@pytest.fixture
def manager(store, presenter):
    return EventManager(store, presenter)


@pytest.fixture
def future():
    return utcnow() + timedelta(days=3)


@pytest.fixture
def make_event(store, future):
    """Create an event directly in the store (no message posted)."""

    async def _make(capacity=0, category=EventCategory.GENERAL, title="Raid Night", guild_id=GUILD_ID, scheduled_at=None):
        return await store.create_event(
            guild_id=guild_id,
            organizer_id=ORGANIZER_ID,
            channel_id=CHANNEL_ID,
            title=title,
            description="Bring flasks",
            scheduled_at=scheduled_at or future,
            category=category,
            capacity=capacity,
        )

    return _make


# ============================================================================
# DISCORD INTERACTION FAKES
# ============================================================================

class FakeResponse:
    def __init__(self):
        self.messages = []
        self.deferred = False

    def is_done(self):
        return self.deferred or bool(self.messages)

    async def send_message(self, content=None, **kwargs):
        self.messages.append((content, kwargs))

    async def defer(self, **kwargs):
        self.deferred = True


class FakeFollowup:
    def __init__(self):
        self.messages = []

    async def send(self, content=None, **kwargs):
        self.messages.append((content, kwargs))


class FakeInteraction:
    """Just enough of discord.Interaction for command callbacks and on_interaction."""

    def __init__(self, user_id=ORGANIZER_ID, guild_id=GUILD_ID, manage_events=False, custom_id=None, values=None):
        self.user = SimpleNamespace(id=user_id, name=f"user{user_id}")
        self.guild = SimpleNamespace(id=guild_id, name=f"Guild {guild_id}") if guild_id else None
        self.channel = SimpleNamespace(id=CHANNEL_ID, mention=f"<#{CHANNEL_ID}>")
        self.permissions = SimpleNamespace(manage_events=manage_events)
        self.type = discord.InteractionType.component
        self.data = {"custom_id": custom_id}
        if values is not None:
            self.data["values"] = values
        self.response = FakeResponse()
        self.followup = FakeFollowup()
        self.edits = []

    async def edit_original_response(self, **kwargs):
        self.edits.append(kwargs)

    @property
    def replies(self):
        """Every message content sent back, in order."""
        return [content for content, _ in self.response.messages + self.followup.messages]


class FakeTree:
    def __init__(self):
        self.commands = {}

    def add_command(self, command):
        self.commands[command.name] = command


class FakeBot:
    """Collects what register_events / register_event_commands attach."""

    def __init__(self, event_manager):
        self.event_manager = event_manager
        self.tree = FakeTree()
        self.handlers = {}
        self.user = SimpleNamespace(name="GuildHelperBot")

    def event(self, coro):
        self.handlers[coro.__name__] = coro
        return coro


@pytest.fixture
def settings_file(tmp_path, monkeypatch):
    path = tmp_path / "guild_settings.json"
    monkeypatch.setattr(guild_settings, "GUILD_SETTINGS_FILE", path)
    return path


@pytest.fixture
def bot(manager, settings_file):
    return FakeBot(manager)
