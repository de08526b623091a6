"""Tool registry module for category and tag lookups."""
from .registry import (
    BUILTIN_TOOLS,
    MCP_CATEGORY,
    MCP_TAG,
    TOOL_METADATA,
    ToolDefinition,
    ToolRegistry,
    create_default_registry,
    get_builtin_tools,
)

__all__ = [
    "BUILTIN_TOOLS",
    "MCP_CATEGORY",
    "MCP_TAG",
    "TOOL_METADATA",
    "ToolDefinition",
    "ToolRegistry",
    "create_default_registry",
    "get_builtin_tools",
]
