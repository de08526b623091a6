"""
Mode configuration schema and validation.

Provides the Mode and ModeSettings dataclasses, the mode error hierarchy,
and validation for user-supplied mode definitions.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from ..constants import DEFAULT_MODE_ID


# Collections a mode uses to allow or exclude tools
TOOL_SELECTOR_FIELDS = (
    "allowed_tools",
    "allowed_categories",
    "excluded_categories",
    "allowed_tags",
    "excluded_tags",
)

DESCRIPTIVE_FIELDS = ("name", "description", "system_prompt", "preferred_model")

DEFAULT_ICON = "🤖"


class ModeError(Exception):
    """Base class for mode management failures."""


class ModeValidationError(ModeError):
    """Raised when a mode or a mode request is invalid."""

    def __init__(self, message: str, errors: Optional[list[str]] = None):
        super().__init__(message)
        self.errors = errors or []


class ModeNotFoundError(ModeError):
    """Raised when a mode id does not match any known mode."""

    def __init__(self, mode_id: str, message: Optional[str] = None):
        super().__init__(message or f"Mode with ID '{mode_id}' does not exist.")
        self.mode_id = mode_id


class ModeConflictError(ModeError):
    """Raised when a request conflicts with existing modes."""


class ModeCatalogError(ModeError):
    """Raised when the built-in catalog is unusable. Not recoverable."""


def mode_key(mode_id: Optional[str]) -> str:
    """Canonical comparison key for a mode id.

    Every lookup and collision check on mode ids goes through this function.
    """
    return (mode_id or "").strip().lower()


def dedupe_tools(tools: Iterable[str]) -> list[str]:
    """Drop case-insensitive duplicates, keeping the first spelling and order."""
    seen: set[str] = set()
    result: list[str] = []
    for tool in tools:
        folded = tool.lower()
        if folded in seen:
            continue
        seen.add(folded)
        result.append(tool)
    return result


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if isinstance(item, str)]


@dataclass
class Mode:
    """A named operating profile that decides which tools are callable.

    Tools are selected by explicit name, by category and by tag; the
    excluded categories and tags are removed after everything allowed has
    been collected. The resolved tool set is never stored on the mode.

    Attributes:
        id: Unique identifier, compared case-insensitively.
        name: Human-readable display name.
        description: Short summary of what the mode is for.
        system_prompt: Prompt text the agent runs with in this mode.
        preferred_model: Model to switch to when the mode is activated, if any.
        allowed_tools: Explicit tool names, deduplicated case-insensitively.
        allowed_categories: Categories whose tools are allowed.
        excluded_categories: Categories whose tools are removed.
        allowed_tags: Tags whose tools are allowed.
        excluded_tags: Tags whose tools are removed.
        is_built_in: True for modes shipped with the software.
        icon: Emoji or short string shown next to the mode name.

    Example:
        review = Mode(
            id="review",
            name="Code Review",
            description="Read-only review of local changes",
            allowed_tags=["query"],
            excluded_tags=["write"],
        )
    """
    id: str
    name: str = ""
    description: str = ""
    system_prompt: str = ""
    preferred_model: str = ""
    allowed_tools: list[str] = field(default_factory=list)
    allowed_categories: list[str] = field(default_factory=list)
    excluded_categories: list[str] = field(default_factory=list)
    allowed_tags: list[str] = field(default_factory=list)
    excluded_tags: list[str] = field(default_factory=list)
    is_built_in: bool = False
    icon: str = DEFAULT_ICON

    @property
    def key(self) -> str:
        """Canonical comparison key of this mode's id."""
        return mode_key(self.id)

    def copy(self) -> "Mode":
        """Return a copy that shares no lists with this mode."""
        return Mode(
            id=self.id,
            name=self.name,
            description=self.description,
            system_prompt=self.system_prompt,
            preferred_model=self.preferred_model,
            allowed_tools=list(self.allowed_tools),
            allowed_categories=list(self.allowed_categories),
            excluded_categories=list(self.excluded_categories),
            allowed_tags=list(self.allowed_tags),
            excluded_tags=list(self.excluded_tags),
            is_built_in=self.is_built_in,
            icon=self.icon,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert the mode to a JSON-serializable dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "system_prompt": self.system_prompt,
            "preferred_model": self.preferred_model,
            "allowed_tools": list(self.allowed_tools),
            "allowed_categories": list(self.allowed_categories),
            "excluded_categories": list(self.excluded_categories),
            "allowed_tags": list(self.allowed_tags),
            "excluded_tags": list(self.excluded_tags),
            "is_built_in": self.is_built_in,
            "icon": self.icon,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Mode":
        """Create a Mode from a dictionary.

        Used for persisted data, so it is lenient: missing or mistyped
        optional fields fall back to their defaults.

        Args:
            data: Dictionary containing mode fields.

        Returns:
            A new Mode instance.

        Raises:
            ModeValidationError: If data is not a mapping or has no usable id.
        """
        if not isinstance(data, dict):
            raise ModeValidationError(
                f"Mode entry must be an object, got {type(data).__name__}"
            )

        mode_id = data.get("id")
        if not isinstance(mode_id, str) or not mode_id.strip():
            raise ModeValidationError("Mode entry is missing an 'id'")

        def text(name: str, default: str = "") -> str:
            value = data.get(name, default)
            return value if isinstance(value, str) else default

        return cls(
            id=mode_id,
            name=text("name"),
            description=text("description"),
            system_prompt=text("system_prompt"),
            preferred_model=text("preferred_model"),
            allowed_tools=_string_list(data.get("allowed_tools")),
            allowed_categories=_string_list(data.get("allowed_categories")),
            excluded_categories=_string_list(data.get("excluded_categories")),
            allowed_tags=_string_list(data.get("allowed_tags")),
            excluded_tags=_string_list(data.get("excluded_tags")),
            is_built_in=data.get("is_built_in") is True,
            icon=text("icon", DEFAULT_ICON),
        )


@dataclass
class ModeSettings:
    """Persisted mode state: built-in modes, custom modes and the active id."""
    default_modes: list[Mode] = field(default_factory=list)
    custom_modes: list[Mode] = field(default_factory=list)
    active_mode_id: str = DEFAULT_MODE_ID
    catalog_version: str = ""

    def all_modes(self) -> list[Mode]:
        """Built-in modes first, then custom modes, each in stored order."""
        return [*self.default_modes, *self.custom_modes]

    def find(self, mode_id: str) -> Optional[Mode]:
        """Find a mode by id among built-in and custom modes."""
        key = mode_key(mode_id)
        if not key:
            return None
        for mode in self.all_modes():
            if mode.key == key:
                return mode
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "default_modes": [m.to_dict() for m in self.default_modes],
            "custom_modes": [m.to_dict() for m in self.custom_modes],
            "active_mode_id": self.active_mode_id,
            "catalog_version": self.catalog_version,
        }


# Accepted keys for user-supplied mode definitions
KNOWN_MODE_FIELDS = frozenset({
    "id", *DESCRIPTIVE_FIELDS, *TOOL_SELECTOR_FIELDS, "is_built_in", "icon",
})


def validate_mode_config(data: dict[str, Any]) -> tuple[bool, list[str]]:
    """Validate a user-supplied mode dictionary.

    Checks:
    - Required fields (id, name) are present and non-empty strings
    - Descriptive fields are strings
    - Tool selector fields are arrays of strings
    - No unknown fields are present

    Args:
        data: Dictionary containing the mode definition to validate.

    Returns:
        A tuple of (is_valid, errors) where errors is empty when valid.

    Example:
        is_valid, errors = validate_mode_config({
            "id": "review",
            "name": "Code Review",
            "allowed_tags": ["query"],
        })
    """
    errors: list[str] = []

    if not isinstance(data, dict):
        return False, ["Mode definition must be an object"]

    for field_name in ("id", "name"):
        if field_name not in data:
            errors.append(f"Missing required field: '{field_name}'")

    if errors:
        return False, errors

    for field_name in ("id", "name"):
        value = data[field_name]
        if not isinstance(value, str):
            errors.append(f"Field '{field_name}' must be a string")
        elif not value.strip():
            errors.append(f"Field '{field_name}' must not be empty")

    for field_name in ("description", "system_prompt", "preferred_model", "icon"):
        if field_name in data and not isinstance(data[field_name], str):
            errors.append(f"Field '{field_name}' must be a string")

    for field_name in TOOL_SELECTOR_FIELDS:
        if field_name not in data:
            continue
        value = data[field_name]
        if not isinstance(value, list):
            errors.append(f"Field '{field_name}' must be an array")
            continue
        for i, item in enumerate(value):
            if not isinstance(item, str):
                errors.append(f"Field '{field_name}[{i}]' must be a string")
            elif not item.strip():
                errors.append(f"Field '{field_name}[{i}]' must not be empty")

    if "is_built_in" in data and not isinstance(data["is_built_in"], bool):
        errors.append("Field 'is_built_in' must be a boolean")

    unknown_fields = set(data.keys()) - KNOWN_MODE_FIELDS
    if unknown_fields:
        errors.append(f"Unknown fields: {', '.join(sorted(unknown_fields))}")

    return len(errors) == 0, errors
