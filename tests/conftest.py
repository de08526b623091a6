"""Shared fixtures for modeguard tests."""

import copy
from typing import Any, Optional

import pytest

from modeguard.tools import ToolDefinition, ToolRegistry, create_default_registry


class MemoryStore:
    """Settings store kept in memory, counting writes."""

    def __init__(self, document: Optional[dict[str, Any]] = None):
        self.document = copy.deepcopy(document)
        self.save_count = 0

    def load_settings(self) -> Optional[dict[str, Any]]:
        return copy.deepcopy(self.document)

    def save_settings(self, document: dict[str, Any]) -> None:
        self.document = copy.deepcopy(document)
        self.save_count += 1


@pytest.fixture
def make_store():
    """Factory for in-memory settings stores, optionally pre-seeded."""
    return MemoryStore


@pytest.fixture
def registry() -> ToolRegistry:
    """Registry holding the built-in tools."""
    return create_default_registry()


@pytest.fixture
def small_registry() -> ToolRegistry:
    """Registry with category X = {c, d} and a few tagged tools."""
    return ToolRegistry([
        ToolDefinition(name="a", description="tool a", category="W", tags=["t1"]),
        ToolDefinition(name="b", description="tool b", category="W", tags=["t2"]),
        ToolDefinition(name="c", description="tool c", category="X", tags=["t1"]),
        ToolDefinition(name="d", description="tool d", category="X"),
    ])
