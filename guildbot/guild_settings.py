"""Guild Settings System - Per-Server Feature Toggles

Stores which event features each server has turned on, in
guild_settings.json. Servers without an entry get DEFAULT_SETTINGS
(or the file's "_defaults" block, if present).
"""
import json

from .config import GUILD_SETTINGS_FILE, logger

# ============================================================================
# GUILD SETTINGS SYSTEM
# ============================================================================

DEFAULT_SETTINGS = {
    "events": True,
    "class_role_setup": True,
}

# Feature name -> (button/embed label, description)
FEATURES = {
    "events": ("📅 Events", "/event commands and RSVP buttons"),
    "class_role_setup": ("🎮 Class & Role", "Class and role pickers on WoW events"),
}

def load_guild_settings() -> dict:
    """Load guild settings from JSON file."""
    if not GUILD_SETTINGS_FILE.exists():
        return {}

    try:
        with open(GUILD_SETTINGS_FILE) as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Error loading guild settings: {e}")
        return {}

def save_guild_settings(settings: dict):
    """Save guild settings to JSON file."""
    try:
        with open(GUILD_SETTINGS_FILE, "w") as f:
            json.dump(settings, f, indent=2)
    except OSError as e:
        logger.error(f"Error saving guild settings: {e}")

def get_all_guild_settings(guild_id: int) -> dict:
    """Every feature toggle for a guild, guild overrides on top of defaults."""
    settings = load_guild_settings()
    return {
        **DEFAULT_SETTINGS,
        **settings.get("_defaults", {}),
        **settings.get(str(guild_id), {}),
    }

def get_guild_setting(guild_id: int, feature: str) -> bool:
    """Whether ``feature`` is enabled for a guild (unknown features are off)."""
    return bool(get_all_guild_settings(guild_id).get(feature, False))

def toggle_guild_setting(guild_id: int, feature: str) -> bool:
    """Flip a feature for a guild.

    Returns:
        The new value

    """
    if feature not in FEATURES:
        raise KeyError(f"Unknown feature: {feature}")

    enabled = not get_guild_setting(guild_id, feature)
    settings = load_guild_settings()
    settings.setdefault(str(guild_id), {})[feature] = enabled
    save_guild_settings(settings)
    logger.info(f"Guild {guild_id}: Set {feature} = {enabled}")
    return enabled
