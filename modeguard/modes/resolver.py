"""
Tool resolution for modes.

Expands a mode's explicit tools, categories and tags into the concrete set
of tool names the mode grants.
"""

from typing import Iterable, NamedTuple, Protocol, Sequence

from .schema import Mode


class NamedTool(Protocol):
    name: str


class ToolLookup(Protocol):
    """The registry surface mode resolution needs.

    Unknown categories and tags must produce an empty sequence.
    """

    def get_tools_by_category(self, category: str) -> Sequence[NamedTool]: ...

    def get_tools_by_tag(self, tag: str) -> Sequence[NamedTool]: ...


class ResolvedMode(NamedTuple):
    """A mode paired with the tools it granted at resolution time.

    The mode is a private copy; editing it does not affect stored modes.
    """
    mode: Mode
    tools: frozenset[str]

    @property
    def id(self) -> str:
        return self.mode.id

    def allows(self, tool_name: str) -> bool:
        return tool_name in self.tools


class _ToolSet:
    """Case-insensitive set of tool names that keeps the first spelling seen."""

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._names: dict[str, str] = {}
        self.update(names)

    def update(self, names: Iterable[str]) -> None:
        for name in names:
            self._names.setdefault(name.lower(), name)

    def discard_all(self, names: Iterable[str]) -> None:
        for name in names:
            self._names.pop(name.lower(), None)

    def freeze(self) -> frozenset[str]:
        return frozenset(self._names.values())


def resolve_tools(mode: Mode, registry: ToolLookup) -> frozenset[str]:
    """Compute the tools a mode grants.

    Allowed tools, categories and tags are collected first; excluded
    categories and tags are removed afterwards, so an exclusion always beats
    an inclusion of the same tool regardless of declaration order.

    Args:
        mode: The mode to resolve.
        registry: Category and tag lookup.

    Returns:
        The granted tool names. Empty when the mode allows nothing.
    """
    result = _ToolSet(mode.allowed_tools)

    for category in mode.allowed_categories:
        result.update(tool.name for tool in registry.get_tools_by_category(category))

    for tag in mode.allowed_tags:
        result.update(tool.name for tool in registry.get_tools_by_tag(tag))

    for category in mode.excluded_categories:
        result.discard_all(tool.name for tool in registry.get_tools_by_category(category))

    for tag in mode.excluded_tags:
        result.discard_all(tool.name for tool in registry.get_tools_by_tag(tag))

    return result.freeze()


def resolve_mode(mode: Mode, registry: ToolLookup) -> ResolvedMode:
    """Resolve a mode and pair the result with a copy of the mode."""
    return ResolvedMode(mode.copy(), resolve_tools(mode, registry))
