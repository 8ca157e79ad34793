"""Presenter - the Discord side of event rendering

Everything the event core needs from Discord goes through a Presenter:
resolving display names, posting and editing the event message, and sending
direct messages. Discord failures come back as RenderError (MessageGone
when the message was deleted) or NotificationError so callers never handle
discord exceptions directly.
"""
from typing import Optional, Protocol

import discord

from .config import logger
from .errors import MessageGone, NotificationError, RenderError


class Presenter(Protocol):
    async def resolve_display_name(self, user_id: int) -> Optional[str]: ...

    async def send_view(self, channel_id: int, embed: discord.Embed, view: Optional[discord.ui.View]) -> int: ...

    async def edit_view(self, channel_id: int, message_id: int, embed: discord.Embed, view: Optional[discord.ui.View]): ...

    async def send_notice(self, user_id: int, content: str): ...


class DiscordPresenter:
    """Presenter backed by a live discord.py client."""

    def __init__(self, client: discord.Client):
        self.client = client

    async def resolve_display_name(self, user_id: int) -> Optional[str]:
        user = self.client.get_user(user_id)
        if user is None:
            try:
                user = await self.client.fetch_user(user_id)
            except discord.NotFound:
                logger.debug(f"User {user_id} no longer exists")
                return None
            except discord.HTTPException as e:
                logger.warning(f"Couldn't fetch user {user_id}: {e}")
                return None
        return user.display_name or user.name

    async def _channel(self, channel_id: int):
        channel = self.client.get_channel(channel_id)
        if channel is None:
            channel = await self.client.fetch_channel(channel_id)
        return channel

    async def send_view(self, channel_id: int, embed: discord.Embed, view: Optional[discord.ui.View]) -> int:
        try:
            channel = await self._channel(channel_id)
            kwargs = {"embed": embed}
            if view is not None:
                kwargs["view"] = view
            message = await channel.send(**kwargs)
        except (discord.NotFound, discord.Forbidden) as e:
            raise RenderError(f"Channel {channel_id} is unavailable: {e}") from e
        except discord.HTTPException as e:
            raise RenderError(f"Couldn't post to channel {channel_id}: {e}") from e
        return message.id

    async def edit_view(self, channel_id: int, message_id: int, embed: discord.Embed, view: Optional[discord.ui.View]):
        try:
            channel = await self._channel(channel_id)
            message = await channel.fetch_message(message_id)
            # view=None strips every component from the message
            await message.edit(embed=embed, view=view)
        except discord.NotFound as e:
            raise MessageGone(f"Event message {message_id} was deleted: {e}") from e
        except discord.Forbidden as e:
            raise RenderError(f"Not allowed to edit event message {message_id}: {e}") from e
        except discord.HTTPException as e:
            raise RenderError(f"Couldn't edit event message {message_id}: {e}") from e

    async def send_notice(self, user_id: int, content: str):
        try:
            user = self.client.get_user(user_id) or await self.client.fetch_user(user_id)
            await user.send(content)
        except discord.Forbidden as e:
            raise NotificationError(user_id, f"User {user_id} has DMs disabled") from e
        except discord.HTTPException as e:
            raise NotificationError(user_id, f"Couldn't DM user {user_id}: {e}") from e
