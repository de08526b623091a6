"""
Built-in mode migration.

Reconciles the built-in modes persisted in the user's settings with the
catalog shipped in the running version: new modes are added, changed modes
are updated in place and modes the catalog no longer defines are removed.
"""

import logging
from dataclasses import dataclass, field

from ..constants import APP_NAME
from .schema import DESCRIPTIVE_FIELDS, TOOL_SELECTOR_FIELDS, Mode


logger = logging.getLogger(__name__)


@dataclass
class MigrationResult:
    """Outcome of a migration pass.

    Attributes:
        modes: The migrated built-in mode list (copies, in stored order).
        added: Ids of catalog modes appended to the list.
        updated: Ids of persisted modes overwritten from the catalog.
        removed: Ids of persisted built-in modes the catalog no longer has.
    """
    modes: list[Mode] = field(default_factory=list)
    added: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        """True if anything was added, updated or removed; the caller must persist."""
        return bool(self.added or self.updated or self.removed)


def needs_update(existing: Mode, catalog_mode: Mode) -> bool:
    """Check whether a persisted built-in mode differs from its catalog definition.

    Descriptive fields and the icon are compared exactly. Tool selector
    collections are compared as unordered sets. Entries whose built-in flag
    was cleared are never updated.
    """
    if not existing.is_built_in:
        return False

    for name in DESCRIPTIVE_FIELDS:
        if getattr(existing, name) != getattr(catalog_mode, name):
            return True

    for name in TOOL_SELECTOR_FIELDS:
        if set(getattr(existing, name)) != set(getattr(catalog_mode, name)):
            return True

    return existing.icon != catalog_mode.icon


def apply_update(existing: Mode, catalog_mode: Mode) -> None:
    """Overwrite a persisted mode's definition with the catalog's, in place."""
    for name in DESCRIPTIVE_FIELDS:
        setattr(existing, name, getattr(catalog_mode, name))

    for name in TOOL_SELECTOR_FIELDS:
        setattr(existing, name, list(getattr(catalog_mode, name)))

    existing.icon = catalog_mode.icon
    existing.is_built_in = True


def migrate_builtin_modes(persisted: list[Mode], catalog: list[Mode]) -> MigrationResult:
    """Bring persisted built-in modes in line with the current catalog.

    Rules, in order:
    1. Catalog modes whose id is missing from the persisted list are appended.
    2. Persisted modes still flagged built-in that differ from the catalog
       are overwritten in place, keeping their position.
    3. Persisted modes still flagged built-in that the catalog no longer
       defines are removed.

    Ids are compared case-insensitively. Neither input list is mutated.

    Args:
        persisted: Built-in modes as last saved.
        catalog: Built-in modes shipped with the running version.

    Returns:
        A MigrationResult holding the new list and the change log.
    """
    result = MigrationResult(modes=[mode.copy() for mode in persisted])
    by_key = {}
    for mode in result.modes:
        by_key.setdefault(mode.key, mode)

    for catalog_mode in catalog:
        existing = by_key.get(catalog_mode.key)

        if existing is None:
            added = catalog_mode.copy()
            added.is_built_in = True
            result.modes.append(added)
            by_key[added.key] = added
            result.added.append(added.id)
        elif needs_update(existing, catalog_mode):
            apply_update(existing, catalog_mode)
            result.updated.append(existing.id)

    catalog_keys = {mode.key for mode in catalog}
    kept: list[Mode] = []
    for mode in result.modes:
        if mode.is_built_in and mode.key not in catalog_keys:
            result.removed.append(mode.id)
        else:
            kept.append(mode)
    result.modes = kept

    return result


def log_migration(result: MigrationResult) -> None:
    """Log the change log of a migration pass for operator visibility."""
    if result.added:
        logger.info(f"[{APP_NAME}] Added new built-in modes: {', '.join(result.added)}")

    if result.updated:
        logger.info(f"[{APP_NAME}] Updated built-in modes: {', '.join(result.updated)}")

    if result.removed:
        logger.info(f"[{APP_NAME}] Removed obsolete built-in modes: {', '.join(result.removed)}")
