"""
Mode management module.

Provides mode definitions, tool resolution, built-in mode migration and the
manager that ties them to persisted settings.
"""

from .schema import (
    Mode,
    ModeSettings,
    ModeError,
    ModeValidationError,
    ModeNotFoundError,
    ModeConflictError,
    ModeCatalogError,
    TOOL_SELECTOR_FIELDS,
    dedupe_tools,
    mode_key,
    validate_mode_config,
)
from .resolver import ResolvedMode, ToolLookup, resolve_mode, resolve_tools
from .migrator import MigrationResult, log_migration, migrate_builtin_modes
from .manager import ModeManager, SettingsBackend
from .builtin import (
    CATALOG_VERSION,
    DEFAULT_MODE,
    ASK_MODE,
    ARCHITECT_MODE,
    GITHUB_MODE,
    BUILTIN_MODES,
    get_builtin_modes,
    get_builtin_mode,
)

__all__ = [
    # Schema
    "Mode",
    "ModeSettings",
    "ModeError",
    "ModeValidationError",
    "ModeNotFoundError",
    "ModeConflictError",
    "ModeCatalogError",
    "TOOL_SELECTOR_FIELDS",
    "dedupe_tools",
    "mode_key",
    "validate_mode_config",
    # Resolution
    "ResolvedMode",
    "ToolLookup",
    "resolve_mode",
    "resolve_tools",
    # Migration
    "MigrationResult",
    "log_migration",
    "migrate_builtin_modes",
    # Manager
    "ModeManager",
    "SettingsBackend",
    # Built-in modes
    "CATALOG_VERSION",
    "DEFAULT_MODE",
    "ASK_MODE",
    "ARCHITECT_MODE",
    "GITHUB_MODE",
    "BUILTIN_MODES",
    "get_builtin_modes",
    "get_builtin_mode",
]
