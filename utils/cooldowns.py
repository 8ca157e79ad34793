"""Per-user cooldowns for interactions"""
import time
from typing import Dict, Hashable, Tuple


class Cooldowns:

    """Cooldown tracker keyed by (action, user).

    Expired entries are dropped on every check, so the map only ever holds
    users who acted within the last ``seconds``.
    """

    def __init__(self, seconds: float = 3.0, clock=time.monotonic):
        """Initialize cooldown tracker.

        Args:
            seconds: Cooldown length in seconds
            clock: Time source, returns seconds

        """
        self.seconds = seconds
        self.clock = clock
        self.last_used: Dict[Tuple[Hashable, int], float] = {}

    def _evict(self, now: float):
        expired = [key for key, ts in self.last_used.items() if now - ts >= self.seconds]
        for key in expired:
            del self.last_used[key]

    def retry_after(self, action: Hashable, user_id: int) -> float:
        """Seconds left before the user may repeat ``action``; 0 records a new use.

        Args:
            action: What the user is doing (command or button name)
            user_id: Discord user ID

        Returns:
            0.0 if allowed, otherwise the remaining wait

        """
        now = self.clock()
        self._evict(now)

        key = (action, user_id)
        if key in self.last_used:
            return self.seconds - (now - self.last_used[key])

        self.last_used[key] = now
        return 0.0

    def __len__(self):
        return len(self.last_used)
