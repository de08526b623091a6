"""
Mode manager for handling operational modes.

Provides the ModeManager class that owns the persisted mode settings, keeps
built-in modes in line with the shipped catalog, manages custom modes and
answers which tools the active mode allows.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Protocol

from packaging.version import InvalidVersion, Version

from ..constants import DEFAULT_MODE_ID, SETTINGS_KEY
from .builtin import CATALOG_VERSION, get_builtin_modes
from .migrator import log_migration, migrate_builtin_modes
from .resolver import ResolvedMode, ToolLookup, resolve_mode, resolve_tools
from .schema import (
    Mode,
    ModeCatalogError,
    ModeConflictError,
    ModeNotFoundError,
    ModeSettings,
    ModeValidationError,
    dedupe_tools,
    mode_key,
    validate_mode_config,
)


logger = logging.getLogger(__name__)


class SettingsBackend(Protocol):
    """The configuration store surface the manager needs."""

    def load_settings(self) -> Optional[dict[str, Any]]: ...

    def save_settings(self, document: dict[str, Any]) -> None: ...


class ModeManager:
    """Manages operational modes for the CLI agent.

    On construction the manager loads the persisted mode settings, migrates
    the built-in modes to the running catalog, drops custom modes that can no
    longer grant any tool and makes sure the active mode exists, falling back
    to the "default" mode. Tool sets are resolved against the registry on
    every access and never cached across mutations.

    Every mutation is written back to the store immediately. The manager
    rewrites only the mode settings block and leaves the rest of the
    settings document untouched.

    Attributes:
        DEFAULT_MODE: Id of the mode used when the active mode is missing.

    Example:
        manager = ModeManager(SettingsStore(), create_default_registry())

        manager.set_current_mode("ask")
        if manager.is_tool_allowed_in_current_mode("write_file"):
            ...

        manager.add_custom_mode(Mode(
            id="review",
            name="Code Review",
            allowed_tags=["query"],
        ))
    """

    DEFAULT_MODE = DEFAULT_MODE_ID

    def __init__(
        self,
        store: SettingsBackend,
        registry: ToolLookup,
        catalog: Optional[list[Mode]] = None,
        catalog_version: str = CATALOG_VERSION,
    ) -> None:
        """Initialize the ModeManager.

        Args:
            store: Loads and saves the settings document.
            registry: Category and tag lookup used for tool resolution.
            catalog: Built-in modes of the running version. Defaults to the
                shipped catalog.
            catalog_version: Version of the catalog, recorded in the settings.

        Raises:
            ModeCatalogError: If no built-in "default" mode exists after
                initialization.
        """
        if store is None:
            raise ValueError("store cannot be None")
        if registry is None:
            raise ValueError("registry cannot be None")

        self._store = store
        self._registry = registry
        self._catalog = [m.copy() for m in catalog] if catalog is not None else get_builtin_modes()
        self._catalog_version = catalog_version
        self._settings = ModeSettings()
        self._current_tools: frozenset[str] = frozenset()

        self._initialize_settings()

        default_key = mode_key(self.DEFAULT_MODE)
        if not any(m.key == default_key for m in self._settings.default_modes):
            raise ModeCatalogError(
                f"Default mode '{self.DEFAULT_MODE}' not found. System is in an invalid state."
            )

        self._current_tools = self._resolve_active().tools

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def _initialize_settings(self) -> None:
        document = self._store.load_settings()
        block = document.get(SETTINGS_KEY) if document else None

        if not isinstance(block, dict):
            if block is not None:
                logger.warning(f"Ignoring malformed '{SETTINGS_KEY}' block in settings")
            self._settings = ModeSettings(
                default_modes=[m.copy() for m in self._catalog],
                custom_modes=[],
                active_mode_id=self.DEFAULT_MODE,
                catalog_version=self._catalog_version,
            )
            self._save()
            return

        default_modes, needs_save = self._parse_modes(block.get("default_modes"), "built-in")
        custom_modes, custom_changed = self._parse_modes(block.get("custom_modes"), "custom")
        needs_save = needs_save or custom_changed

        active_mode_id = block.get("active_mode_id")
        self._settings = ModeSettings(
            default_modes=default_modes,
            custom_modes=custom_modes,
            active_mode_id=active_mode_id if isinstance(active_mode_id, str) else "",
            catalog_version=str(block.get("catalog_version") or ""),
        )

        needs_save = self._check_catalog_version() or needs_save

        result = migrate_builtin_modes(self._settings.default_modes, self._catalog)
        if result.changed:
            log_migration(result)
            self._settings.default_modes = result.modes
            needs_save = True

        needs_save = self._dedupe_tool_lists() or needs_save
        needs_save = self._prune_custom_modes() or needs_save

        if self._settings.find(self._settings.active_mode_id) is None:
            logger.warning(
                f"Active mode '{self._settings.active_mode_id}' not found, "
                f"falling back to '{self.DEFAULT_MODE}'"
            )
            self._settings.active_mode_id = self.DEFAULT_MODE
            needs_save = True

        if needs_save:
            self._save()

    def _parse_modes(self, raw: Any, label: str) -> tuple[list[Mode], bool]:
        """Parse a persisted mode list. Returns the modes and whether anything was dropped."""
        if not isinstance(raw, list):
            return [], True

        modes: list[Mode] = []
        dropped = False
        for i, entry in enumerate(raw):
            try:
                modes.append(Mode.from_dict(entry))
            except ModeValidationError as e:
                logger.warning(f"Dropping {label} mode entry {i}: {e}")
                dropped = True
        return modes, dropped

    def _check_catalog_version(self) -> bool:
        """Record the running catalog version. Returns True if it changed."""
        stored = self._settings.catalog_version
        current = self._catalog_version
        if stored == current:
            return False

        try:
            if stored and Version(stored) > Version(current):
                logger.warning(
                    f"Mode settings were written by catalog {stored}; "
                    f"reverting built-in modes to catalog {current}"
                )
            elif stored:
                logger.info(f"Upgrading built-in modes from catalog {stored} to {current}")
        except InvalidVersion:
            logger.debug(f"Unrecognized catalog version '{stored}' in settings")

        self._settings.catalog_version = current
        return True

    def _dedupe_tool_lists(self) -> bool:
        changed = False
        for mode in self._settings.all_modes():
            unique = dedupe_tools(mode.allowed_tools)
            if len(unique) != len(mode.allowed_tools):
                mode.allowed_tools = unique
                changed = True
        return changed

    def _prune_custom_modes(self) -> bool:
        """Drop custom modes that can no longer grant any tool.

        A custom mode whose id is taken by a built-in or an earlier custom
        mode is kept on disk; lookups return the earlier mode.
        """
        seen = {m.key for m in self._settings.default_modes}
        valid: list[Mode] = []

        for mode in self._settings.custom_modes:
            if not mode.key:
                reason = "missing id"
            elif not resolve_tools(mode, self._registry):
                reason = "no tools after resolving categories and tags"
            else:
                if mode.key in seen:
                    logger.warning(
                        f"Custom mode '{mode.id}' is shadowed by another mode with the same id"
                    )
                seen.add(mode.key)
                valid.append(mode)
                continue
            logger.warning(f"Dropping custom mode '{mode.id}': {reason}")

        if len(valid) == len(self._settings.custom_modes):
            return False
        self._settings.custom_modes = valid
        return True

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _save(self) -> None:
        document = self._store.load_settings() or {}
        document[SETTINGS_KEY] = self._settings.to_dict()
        self._store.save_settings(document)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _resolve_active(self) -> ResolvedMode:
        mode = self._settings.find(self._settings.active_mode_id)
        if mode is None:
            raise ModeCatalogError(
                f"Active mode '{self._settings.active_mode_id}' is missing from the settings"
            )
        return resolve_mode(mode, self._registry)

    def get_current_mode(self) -> ResolvedMode:
        """Get the active mode with a freshly resolved tool set."""
        resolved = self._resolve_active()
        self._current_tools = resolved.tools
        return resolved

    def get_mode(self, mode_id: str) -> Optional[ResolvedMode]:
        """Get any mode by id (case-insensitive).

        Returns:
            The resolved mode, or None if no mode has that id.
        """
        mode = self._settings.find(mode_id)
        if mode is None:
            return None
        return resolve_mode(mode, self._registry)

    def get_available_modes(self) -> list[ResolvedMode]:
        """List every mode, built-ins first, each freshly resolved."""
        return [resolve_mode(m, self._registry) for m in self._settings.all_modes()]

    def is_tool_allowed_in_current_mode(self, tool_name: str) -> bool:
        """Check a tool name against the active mode's last resolved tool set.

        The check is case-sensitive; pass canonical tool names.
        """
        return tool_name in self._current_tools

    def get_builtin_mode_count(self) -> int:
        """Count persisted built-in modes that are still flagged built-in."""
        return sum(1 for m in self._settings.default_modes if m.is_built_in)

    @property
    def active_mode_id(self) -> str:
        return self._settings.active_mode_id

    @property
    def registry(self) -> ToolLookup:
        return self._registry

    @property
    def settings(self) -> ModeSettings:
        """Get a detached copy of the current mode settings."""
        return ModeSettings(
            default_modes=[m.copy() for m in self._settings.default_modes],
            custom_modes=[m.copy() for m in self._settings.custom_modes],
            active_mode_id=self._settings.active_mode_id,
            catalog_version=self._settings.catalog_version,
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set_current_mode(self, mode_id: str) -> ResolvedMode:
        """Switch the active mode and persist the choice.

        Args:
            mode_id: Id of the mode to activate (case-insensitive).

        Returns:
            The newly active mode with its resolved tool set.

        Raises:
            ModeValidationError: If mode_id is blank.
            ModeNotFoundError: If no mode has that id.
        """
        if not mode_key(mode_id):
            raise ModeValidationError("Mode ID cannot be null or empty.")

        mode = self._settings.find(mode_id)
        if mode is None:
            raise ModeNotFoundError(mode_id)

        self._settings.active_mode_id = mode.id
        resolved = resolve_mode(mode, self._registry)
        self._current_tools = resolved.tools
        self._save()
        logger.debug(f"Switched to mode: {mode.id}")
        return resolved

    def add_custom_mode(self, mode: Mode) -> ResolvedMode:
        """Add a user-defined mode and persist it.

        The stored mode is a copy with is_built_in forced to False and
        duplicate tool names removed.

        Args:
            mode: The mode to add.

        Returns:
            The added mode with its resolved tool set.

        Raises:
            ModeValidationError: If mode is None, its id is blank, or it
                resolves to no tools.
            ModeConflictError: If a mode with the same id already exists.
        """
        if mode is None:
            raise ModeValidationError("Mode cannot be None.")

        if not mode.key:
            raise ModeValidationError("Mode ID cannot be null or empty.")

        if self._settings.find(mode.id) is not None:
            raise ModeConflictError(f"Mode with ID '{mode.id}' already exists.")

        candidate = mode.copy()
        candidate.id = candidate.id.strip()
        candidate.is_built_in = False
        candidate.allowed_tools = dedupe_tools(candidate.allowed_tools)

        tools = resolve_tools(candidate, self._registry)
        if not tools:
            raise ModeValidationError(
                "Mode must have at least one allowed tool after resolving categories and tags."
            )

        self._settings.custom_modes.append(candidate)
        self._save()
        logger.debug(f"Added custom mode: {candidate.id}")
        return ResolvedMode(candidate.copy(), tools)

    def remove_custom_mode(self, mode_id: str) -> None:
        """Remove a user-defined mode and persist the change.

        If the removed mode was active, the "default" mode becomes active.

        Raises:
            ModeValidationError: If mode_id is blank.
            ModeNotFoundError: If no custom mode has that id.
            ModeConflictError: If the mode is flagged built-in.
        """
        key = mode_key(mode_id)
        if not key:
            raise ModeValidationError("Mode ID cannot be null or empty.")

        target = next((m for m in self._settings.custom_modes if m.key == key), None)
        if target is None:
            raise ModeNotFoundError(mode_id, f"Custom mode with ID '{mode_id}' does not exist.")

        if target.is_built_in:
            raise ModeConflictError("Cannot remove built-in modes.")

        was_active = self._settings.find(self._settings.active_mode_id) is target
        self._settings.custom_modes.remove(target)

        if was_active:
            self._settings.active_mode_id = self.DEFAULT_MODE
            self._current_tools = self._resolve_active().tools
            logger.info(f"Removed active mode '{target.id}', switched to '{self.DEFAULT_MODE}'")

        self._save()
        logger.debug(f"Removed custom mode: {target.id}")

    def load_custom_modes(self, path: Path) -> int:
        """Load custom modes from a JSON file.

        The JSON file should contain either a single mode object or an
        array of mode objects. Invalid entries are skipped and reported in
        a single warning.

        Args:
            path: Path to the JSON file containing mode definitions.

        Returns:
            The number of modes successfully added.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            json.JSONDecodeError: If the file contains invalid JSON.
            ModeValidationError: If the file holds neither an object nor an array.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Mode file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        if isinstance(data, dict):
            modes_data = [data]
        elif isinstance(data, list):
            modes_data = data
        else:
            raise ModeValidationError(
                f"Invalid mode file format: expected object or array, got {type(data).__name__}"
            )

        loaded_count = 0
        errors: list[str] = []

        for i, mode_data in enumerate(modes_data):
            is_valid, validation_errors = validate_mode_config(mode_data)
            if not is_valid:
                errors.append(f"Mode {i}: {'; '.join(validation_errors)}")
                continue

            try:
                self.add_custom_mode(Mode.from_dict(mode_data))
                loaded_count += 1
            except (ModeValidationError, ModeConflictError) as e:
                errors.append(f"Mode {i}: {e}")

        if errors:
            logger.warning(f"Some modes failed to load from {path}: {errors}")

        logger.info(f"Loaded {loaded_count} custom modes from {path}")
        return loaded_count
