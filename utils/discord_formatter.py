"""Helpers for fitting text into Discord embeds"""
from datetime import datetime
from typing import List

FIELD_VALUE_LIMIT = 1024
DESCRIPTION_LIMIT = 4096


def discord_timestamp(when: datetime, style: str = "F") -> str:
    """Format a datetime as a Discord timestamp tag, e.g. <t:1700000000:F>.

    Args:
        when: Timezone-aware datetime
        style: Discord style letter (F = full date, R = relative, ...)

    Returns:
        Tag that every client renders in its own timezone

    """
    return f"<t:{int(when.timestamp())}:{style}>"


def truncate(text: str, limit: int = FIELD_VALUE_LIMIT) -> str:
    if len(text) <= limit:
        return text
    return text[:limit - 3] + "..."


def join_lines(lines: List[str], limit: int = FIELD_VALUE_LIMIT) -> str:
    """Join lines for one embed field, dropping whole lines that do not fit.

    When lines are dropped, the last line says how many more there are.
    """
    if not lines:
        return "None"

    kept = []
    used = 0
    for index, line in enumerate(lines):
        remaining = len(lines) - index
        suffix = f"\n…and {remaining} more"
        extra = len(line) + (1 if kept else 0)
        if used + extra + (len(suffix) if remaining > 1 else 0) > limit:
            if not kept:
                return truncate(line, limit)
            return "\n".join(kept) + suffix
        kept.append(line)
        used += extra

    return "\n".join(kept)
