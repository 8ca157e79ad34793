import pytest
from discord import app_commands

from guildbot import guild_settings
from guildbot.commands.events import register_event_commands
from guildbot.event_models import EventCategory, RsvpStatus

from conftest import CHANNEL_ID, GUILD_ID, ORGANIZER_ID, FakeInteraction

OTHER_GUILD = 999
MEMBER = 7


@pytest.fixture
def event_command(bot):
    register_event_commands(bot)
    group = bot.tree.commands["event"]

    def _get(name):
        return group.get_command(name).callback

    return _get


@pytest.fixture
def posted_event(manager, future):
    """An event posted in GUILD_ID with MEMBER accepted."""

    async def _make():
        result = await manager.create_event(
            guild_id=GUILD_ID,
            organizer_id=ORGANIZER_ID,
            channel_id=CHANNEL_ID,
            title="Heroic Raid",
            description="Full clear",
            scheduled_at=future,
            category=EventCategory.RAID,
        )
        await manager.rsvp(result.event.id, MEMBER, RsvpStatus.ACCEPTED)
        return result.event

    return _make


# ============================================================================
# GUILD SCOPING
# ============================================================================

@pytest.mark.asyncio
async def test_cancel_from_another_guild_is_refused(event_command, posted_event, store, presenter):
    event = await posted_event()
    interaction = FakeInteraction(user_id=555, guild_id=OTHER_GUILD, manage_events=True)

    await event_command("cancel")(interaction, event.id, "hijack")

    assert interaction.replies == ["❌ Event not found!"]
    assert not (await store.get_event(event.id)).cancelled
    assert presenter.notices == []


@pytest.mark.asyncio
async def test_refresh_from_another_guild_is_refused(event_command, posted_event, presenter):
    event = await posted_event()
    interaction = FakeInteraction(user_id=555, guild_id=OTHER_GUILD, manage_events=True)
    sent, edits = len(presenter.sent), len(presenter.edits)

    await event_command("refresh")(interaction, event.id)

    assert interaction.replies == ["❌ Event not found!"]
    assert (len(presenter.sent), len(presenter.edits)) == (sent, edits)


@pytest.mark.asyncio
async def test_note_from_another_guild_is_refused(event_command, posted_event, store):
    event = await posted_event()
    interaction = FakeInteraction(user_id=MEMBER, guild_id=OTHER_GUILD)

    await event_command("note")(interaction, event.id, "sneaky")

    assert interaction.replies == ["❌ Event not found!"]
    assert (await store.get_participant(event.id, MEMBER)).note is None


@pytest.mark.asyncio
async def test_roster_from_another_guild_is_refused(event_command, posted_event):
    event = await posted_event()
    interaction = FakeInteraction(guild_id=OTHER_GUILD)

    await event_command("roster")(interaction, event.id)

    assert interaction.replies == ["❌ Event not found!"]


# ============================================================================
# COMMANDS
# ============================================================================

@pytest.mark.asyncio
async def test_create_posts_event(event_command, presenter, store):
    interaction = FakeInteraction(manage_events=True)
    raid = app_commands.Choice(name="WoW Raid", value="raid")

    await event_command("create")(interaction, "Heroic Raid", "Full clear", "2099-01-01 20:00", raid, 20)

    assert len(presenter.sent) == 1
    assert interaction.replies[0].startswith("✅ Event created!")
    event = await store.get_event(1)
    assert (event.guild_id, event.channel_id, event.capacity) == (GUILD_ID, CHANNEL_ID, 20)
    assert event.category == EventCategory.RAID


@pytest.mark.asyncio
async def test_create_rejects_bad_date(event_command, presenter):
    interaction = FakeInteraction(manage_events=True)
    general = app_commands.Choice(name="General Event", value="general")

    await event_command("create")(interaction, "Game night", "", "next friday", general)

    assert interaction.replies[0].startswith("❌ Invalid date format!")
    assert presenter.sent == []


@pytest.mark.asyncio
async def test_create_needs_manage_events(event_command, presenter):
    interaction = FakeInteraction(manage_events=False)
    general = app_commands.Choice(name="General Event", value="general")

    await event_command("create")(interaction, "Game night", "", "2099-01-01 20:00", general)

    assert interaction.replies == ["❌ You need the Manage Events permission to create events."]
    assert presenter.sent == []


@pytest.mark.asyncio
async def test_organizer_cancels_and_members_are_notified(event_command, posted_event, presenter):
    event = await posted_event()
    interaction = FakeInteraction(user_id=ORGANIZER_ID)

    await event_command("cancel")(interaction, event.id, "storm")

    assert interaction.replies == ["✅ Event cancelled and 1 participant(s) notified."]
    assert [user_id for user_id, _ in presenter.notices] == [MEMBER]


@pytest.mark.asyncio
async def test_member_cannot_cancel_someone_elses_event(event_command, posted_event, store):
    event = await posted_event()
    interaction = FakeInteraction(user_id=MEMBER)

    await event_command("cancel")(interaction, event.id, None)

    assert interaction.replies == ["❌ You can only cancel your own events!"]
    assert not (await store.get_event(event.id)).cancelled


@pytest.mark.asyncio
async def test_note_is_saved(event_command, posted_event, store):
    event = await posted_event()
    interaction = FakeInteraction(user_id=MEMBER)

    await event_command("note")(interaction, event.id, "  running late ")

    assert interaction.replies == ["📝 Note saved: *running late*"]
    assert (await store.get_participant(event.id, MEMBER)).note == "running late"


@pytest.mark.asyncio
async def test_refresh_needs_manage_events(event_command, posted_event):
    event = await posted_event()
    interaction = FakeInteraction(user_id=MEMBER)

    await event_command("refresh")(interaction, event.id)

    assert interaction.replies == ["❌ You need the Manage Events permission to do that."]


@pytest.mark.asyncio
async def test_list_and_roster(event_command, posted_event):
    event = await posted_event()

    interaction = FakeInteraction()
    await event_command("list")(interaction)
    _, kwargs = interaction.followup.messages[0]
    assert len(kwargs["embed"].fields) == 1

    interaction = FakeInteraction()
    await event_command("roster")(interaction, event.id)
    _, kwargs = interaction.followup.messages[0]
    assert kwargs["embed"].fields[0].value == f"<@{MEMBER}>"


@pytest.mark.asyncio
async def test_empty_list(event_command):
    interaction = FakeInteraction()
    await event_command("list")(interaction)
    assert interaction.replies == ["📅 No upcoming events!"]


@pytest.mark.asyncio
async def test_disabled_guild_refuses_commands(event_command, posted_event, store):
    event = await posted_event()
    guild_settings.toggle_guild_setting(GUILD_ID, "events")
    interaction = FakeInteraction(user_id=ORGANIZER_ID)

    await event_command("cancel")(interaction, event.id, "storm")

    assert interaction.replies[0].startswith("❌ Events are not enabled in this server.")
    assert not (await store.get_event(event.id)).cancelled


@pytest.mark.asyncio
async def test_edit_is_not_available(event_command):
    interaction = FakeInteraction()
    await event_command("edit")(interaction, 1)
    assert interaction.replies == ["🚧 Edit functionality coming soon!"]
