"""
Settings persistence for modeguard.
Loads and saves the JSON settings document that embeds the mode settings block.
"""
import json
import logging
import os
from pathlib import Path
from typing import Any, Optional, Union

from .constants import CONFIG_FILE, CONFIG_PATH_ENV_VAR


logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when the settings document cannot be written."""

    def __init__(self, message: str, path: Optional[Path] = None):
        self.path = path
        full_message = f"{message} ({path})" if path is not None else message
        super().__init__(full_message)


def resolve_config_path(path: Optional[Union[str, Path]] = None) -> Path:
    """
    Resolve the settings file location.

    An explicit path wins, then the MODEGUARD_CONFIG environment variable,
    then the default file in the user's home directory.
    """
    if path:
        return Path(path).expanduser()

    env_value = os.environ.get(CONFIG_PATH_ENV_VAR, "").strip()
    if env_value:
        return Path(env_value).expanduser()

    return CONFIG_FILE


class SettingsStore:
    """
    JSON file backed settings document.

    The store hands out the whole document; callers own the block they edit
    and must write back everything else untouched. Reads and writes are plain
    synchronous file operations, so concurrent writers race and the last one
    wins.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        self._path = resolve_config_path(path)

    @property
    def path(self) -> Path:
        """Get the settings file path."""
        return self._path

    def load_settings(self) -> Optional[dict[str, Any]]:
        """
        Load the settings document.

        Returns:
            The parsed document, or None if the file is missing or unreadable.
        """
        if not self._path.exists():
            return None

        try:
            with open(self._path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to load settings file {self._path}: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(
                f"Ignoring settings file {self._path}: expected an object, "
                f"got {type(data).__name__}"
            )
            return None

        return data

    def save_settings(self, document: dict[str, Any]) -> None:
        """
        Save the settings document.

        Args:
            document: Full settings document to write

        Raises:
            ConfigError: If the file cannot be written
        """
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, 'w', encoding='utf-8') as f:
                json.dump(document, f, indent=2)
        except (OSError, TypeError) as e:
            raise ConfigError(f"Failed to save settings: {e}", self._path) from e
