"""
Constants and configuration defaults for modeguard.
"""
from pathlib import Path
from typing import Final

APP_NAME: Final[str] = "modeguard"
APP_VERSION: Final[str] = "1.0.0"
APP_DESCRIPTION: Final[str] = "Mode-based tool permissions for agentic command line tools"

CONFIG_DIR: Final[Path] = Path.home() / ".modeguard"
CONFIG_FILE: Final[Path] = CONFIG_DIR / "settings.json"
CONFIG_PATH_ENV_VAR: Final[str] = "MODEGUARD_CONFIG"

# Key of the mode block inside the settings document
SETTINGS_KEY: Final[str] = "mode_settings"

DEFAULT_MODE_ID: Final[str] = "default"

SLASH_PREFIX: Final[str] = "/"
