import json
from datetime import timedelta

import pytest

from guildbot.errors import EventFull, EventNotFound, ParticipantNotFound
from guildbot.event_models import EventCategory, RsvpStatus, utcnow
from guildbot.event_store import EventStore

from conftest import CHANNEL_ID, GUILD_ID


@pytest.mark.asyncio
async def test_event_ids_are_monotonic(make_event):
    first = await make_event()
    second = await make_event()
    assert second.id == first.id + 1


@pytest.mark.asyncio
async def test_events_survive_reload(tmp_path, make_event, store):
    event = await make_event(capacity=5, category=EventCategory.RAID)
    await store.upsert_participant(event.id, 42, RsvpStatus.ACCEPTED)

    reopened = EventStore(tmp_path / "events.json")
    loaded = await reopened.get_event(event.id)
    assert loaded == event
    participants = await reopened.get_participants(event.id)
    assert [p.user_id for p in participants] == [42]
    assert participants[0].status == RsvpStatus.ACCEPTED


@pytest.mark.asyncio
async def test_store_file_is_plain_json(tmp_path, make_event):
    await make_event()
    data = json.loads((tmp_path / "events.json").read_text())
    assert data["next_event_id"] == 2
    assert data["events"]["1"]["category"] == "general"


@pytest.mark.asyncio
async def test_get_missing_event_returns_none(store):
    assert await store.get_event(999) is None


@pytest.mark.asyncio
async def test_upsert_keeps_join_order_and_bumps_updated_at(store, make_event):
    event = await make_event()
    first = await store.upsert_participant(event.id, 10, RsvpStatus.TENTATIVE)
    await store.upsert_participant(event.id, 20, RsvpStatus.ACCEPTED)
    changed = await store.upsert_participant(event.id, 10, RsvpStatus.DECLINED)

    assert changed.join_seq == first.join_seq
    assert changed.joined_at == first.joined_at
    assert changed.updated_at >= first.updated_at
    assert [p.user_id for p in await store.get_participants(event.id)] == [10, 20]


@pytest.mark.asyncio
async def test_upsert_on_missing_event_raises(store):
    with pytest.raises(EventNotFound):
        await store.upsert_participant(404, 1, RsvpStatus.ACCEPTED)


@pytest.mark.asyncio
async def test_guard_veto_leaves_store_untouched(store, make_event):
    event = await make_event()

    def refuse(event, participants, existing):
        raise EventFull(event.id, 0)

    with pytest.raises(EventFull):
        await store.upsert_participant(event.id, 10, RsvpStatus.ACCEPTED, guard=refuse)
    assert await store.get_participants(event.id) == []


@pytest.mark.asyncio
async def test_cancel_is_one_way(store, make_event):
    event = await make_event()
    assert await store.cancel_event(event.id, "raid leader sick") is True
    assert await store.cancel_event(event.id, "again") is False

    loaded = await store.get_event(event.id)
    assert loaded.cancelled
    assert loaded.cancel_reason == "raid leader sick"
    assert loaded.cancelled_at is not None


@pytest.mark.asyncio
async def test_cancel_missing_event(store):
    with pytest.raises(EventNotFound):
        await store.cancel_event(5)


@pytest.mark.asyncio
async def test_attach_message_ref(store, make_event):
    event = await make_event()
    await store.attach_message_ref(event.id, CHANNEL_ID + 1, 777)
    loaded = await store.get_event(event.id)
    assert loaded.message_id == 777
    assert loaded.channel_id == CHANNEL_ID + 1


@pytest.mark.asyncio
async def test_metadata_requires_existing_participant(store, make_event):
    event = await make_event(category=EventCategory.RAID)
    with pytest.raises(ParticipantNotFound):
        await store.set_participant_class(event.id, 10, "mage")

    await store.upsert_participant(event.id, 10, RsvpStatus.TENTATIVE)
    participant = await store.set_participant_class(event.id, 10, "mage")
    assert participant.wow_class == "mage"
    assert participant.wow_role is None
    assert participant.status == RsvpStatus.TENTATIVE


@pytest.mark.asyncio
async def test_list_upcoming_filters_and_sorts(store, make_event):
    now = utcnow()
    later = await make_event(title="Later", scheduled_at=now + timedelta(days=5))
    sooner = await make_event(title="Sooner", scheduled_at=now + timedelta(days=1))
    cancelled = await make_event(title="Off", scheduled_at=now + timedelta(days=2))
    await make_event(title="Other guild", guild_id=GUILD_ID + 1)
    await store.cancel_event(cancelled.id)

    upcoming = await store.list_upcoming_events(GUILD_ID, now=now)
    assert [e.id for e in upcoming] == [sooner.id, later.id]

    # An event that has started is no longer upcoming
    upcoming = await store.list_upcoming_events(GUILD_ID, now=now + timedelta(days=2))
    assert [e.id for e in upcoming] == [later.id]


@pytest.mark.asyncio
async def test_count_accepted(store, make_event):
    event = await make_event()
    await store.upsert_participant(event.id, 1, RsvpStatus.ACCEPTED)
    await store.upsert_participant(event.id, 2, RsvpStatus.ACCEPTED)
    await store.upsert_participant(event.id, 3, RsvpStatus.LATE)
    assert await store.count_accepted(event.id) == 2
