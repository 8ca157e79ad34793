"""Configuration and initialization for GuildHelperBot

Loads settings from:
1. Environment variables (.env)
2. config.toml file
3. Default values

This module should be imported first by all other modules.
"""
import logging
import os
from pathlib import Path

import discord
import toml
from dotenv import load_dotenv

# ============================================================================
# ENVIRONMENT & CONFIG LOADING
# ============================================================================

# Load environment variables
load_dotenv()
BOT_TOKEN = os.getenv("BOT_TOKEN")

# Load config from toml file
config = toml.load("config.toml") if Path("config.toml").exists() else {}

# ============================================================================
# CONFIGURATION PARSING HELPERS
# ============================================================================

def parse_id_list(env_var_name: str, config_key: str) -> set:
    """Parse comma-separated ID list from env var or config file."""
    env_value = os.getenv(env_var_name)
    if env_value is not None:
        # Parse env var: "123,456,789" or "[]" for empty
        env_value = env_value.strip()
        if env_value == "[]" or env_value == "":
            return set()
        return set(int(x.strip()) for x in env_value.split(",") if x.strip())
    # Fall back to config.toml
    return set(config.get(config_key, []))

def get_setting(env_var_name: str, default, cast=str):
    """Read a scalar setting, env var first, then config.toml, then default."""
    env_value = os.getenv(env_var_name)
    if env_value is not None and env_value.strip() != "":
        return cast(env_value.strip())
    return cast(config.get(env_var_name, default))

# ============================================================================
# DISCORD CONFIGURATION
# ============================================================================

ALLOWED_GUILD_IDS = parse_id_list("ALLOWED_GUILD_IDS", "ALLOWED_GUILD_IDS")

# ============================================================================
# EVENT CONFIGURATION
# ============================================================================

EVENT_STORE_PATH = Path(get_setting("EVENT_STORE_PATH", "events.json"))
EVENT_TIMEZONE = get_setting("EVENT_TIMEZONE", "UTC")
EVENT_DATE_FORMAT = "%Y-%m-%d %H:%M"
EVENT_LIST_LIMIT = get_setting("EVENT_LIST_LIMIT", 10, int)

# Per-user cooldown between RSVP clicks (seconds)
COMMAND_COOLDOWN_SECONDS = get_setting("COMMAND_COOLDOWN_SECONDS", 3.0, float)

GUILD_SETTINGS_FILE = Path(get_setting("GUILD_SETTINGS_FILE", "guild_settings.json"))

# ============================================================================
# LOGGING SETUP
# ============================================================================

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("GuildHelper")

# ============================================================================
# DISCORD BOT INTENTS
# ============================================================================

intents = discord.Intents.default()
intents.members = True  # Needed to resolve participant display names
intents.guilds = True
