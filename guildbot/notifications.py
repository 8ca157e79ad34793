"""Notification Dispatcher - cancellation DMs

Every participant who was accepted or tentative gets one direct message.
A failed DM is logged and skipped; the rest of the fan-out continues.
"""
from typing import List, NamedTuple

from utils.discord_formatter import discord_timestamp

from .config import logger
from .errors import NotificationError
from .event_models import NOTIFY_ON_CANCEL, Event, Participant
from .presenter import Presenter


class NotificationReport(NamedTuple):
    notified: List[int]
    failed: List[int]

    @property
    def attempted(self) -> int:
        return len(self.notified) + len(self.failed)


def cancellation_notice(event: Event, reason: str) -> str:
    return (
        f"📢 The event **{event.title}** scheduled for {discord_timestamp(event.scheduled_at, 'F')} "
        f"has been cancelled.\n\n**Reason:** {reason}"
    )


def recipients_for_cancellation(participants: List[Participant]) -> List[int]:
    return [p.user_id for p in participants if p.status in NOTIFY_ON_CANCEL]


class NotificationDispatcher:

    def __init__(self, presenter: Presenter):
        self.presenter = presenter

    async def notify_cancellation(self, event: Event, participants: List[Participant], reason: str) -> NotificationReport:
        content = cancellation_notice(event, reason)
        report = NotificationReport([], [])

        for user_id in recipients_for_cancellation(participants):
            try:
                await self.presenter.send_notice(user_id, content)
            except NotificationError as e:
                logger.warning(f"Failed to notify user {user_id} about event {event.id}: {e}")
                report.failed.append(user_id)
                continue
            report.notified.append(user_id)

        logger.info(
            f"📢 Cancellation of event {event.id}: notified {len(report.notified)}, failed {len(report.failed)}"
        )
        return report
