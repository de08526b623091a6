"""
Tool registry for category and tag lookups.

Provides the ToolRegistry class that mode resolution queries to expand
category and tag allow/exclude lists into concrete tool names.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


# Category and tag assignments for built-in tools
TOOL_METADATA: dict[str, tuple[str, tuple[str, ...]]] = {
    "read_file": ("FileOperations", ("essential", "safe", "query")),
    "list_directory": ("FileOperations", ("essential", "safe", "query")),
    "write_file": ("FileOperations", ("essential", "write")),
    "create_directory": ("FileOperations", ("write",)),
    "search_files": ("ContentManipulation", ("essential", "safe", "query")),
    "run_command": ("SystemOperations", ("execute",)),
    "get_github_file": ("GitHub", ("github", "query")),
    "create_github_file": ("GitHub", ("github", "create", "write")),
    "update_github_file": ("GitHub", ("github", "write")),
    "delete_github_file": ("GitHub", ("github", "write", "destructive")),
}

MCP_CATEGORY = "MCP"
MCP_TAG = "mcp"

# Built-in tool definitions in OpenAI format
BUILTIN_TOOLS = [
    {
        "type": "function",
        "function": {
            "name": "read_file",
            "description": "Read the contents of a file",
            "parameters": {
                "type": "object",
                "properties": {
                    "path": {
                        "type": "string",
                        "description": "Path to the file to read"
                    }
                },
                "required": ["path"]
            }
        }
    },
    {
        "type": "function",
        "function": {
            "name": "list_directory",
            "description": "List files and folders in a directory",
            "parameters": {
                "type": "object",
                "properties": {
                    "path": {
                        "type": "string",
                        "description": "Directory path to list. Use '.' for current directory"
                    }
                },
                "required": ["path"]
            }
        }
    },
    {
        "type": "function",
        "function": {
            "name": "write_file",
            "description": "Write content to a file (creates or overwrites)",
            "parameters": {
                "type": "object",
                "properties": {
                    "path": {
                        "type": "string",
                        "description": "Path to the file to write"
                    },
                    "content": {
                        "type": "string",
                        "description": "Content to write to the file"
                    }
                },
                "required": ["path", "content"]
            }
        }
    },
    {
        "type": "function",
        "function": {
            "name": "create_directory",
            "description": "Create a new directory",
            "parameters": {
                "type": "object",
                "properties": {
                    "path": {
                        "type": "string",
                        "description": "Path of the directory to create"
                    }
                },
                "required": ["path"]
            }
        }
    },
    {
        "type": "function",
        "function": {
            "name": "search_files",
            "description": (
                "Search for text patterns across multiple files with regex support. "
                "Returns matching lines with file locations and line numbers."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "pattern": {
                        "type": "string",
                        "description": "Search pattern (plain text or regex)"
                    },
                    "path": {
                        "type": "string",
                        "description": "Directory to search relative to workspace. Default: '.'"
                    },
                    "file_pattern": {
                        "type": "string",
                        "description": "Glob used to filter files, e.g. '*.py'"
                    }
                },
                "required": ["pattern"]
            }
        }
    },
    {
        "type": "function",
        "function": {
            "name": "run_command",
            "description": "Run a shell command and return the output",
            "parameters": {
                "type": "object",
                "properties": {
                    "command": {
                        "type": "string",
                        "description": "Shell command to execute"
                    }
                },
                "required": ["command"]
            }
        }
    },
    {
        "type": "function",
        "function": {
            "name": "get_github_file",
            "description": "Read a file from a GitHub repository",
            "parameters": {
                "type": "object",
                "properties": {
                    "owner": {"type": "string", "description": "Repository owner"},
                    "repo": {"type": "string", "description": "Repository name"},
                    "path": {"type": "string", "description": "File path in the repository"},
                    "ref": {"type": "string", "description": "Branch, tag or commit. Default: repository default branch"}
                },
                "required": ["owner", "repo", "path"]
            }
        }
    },
    {
        "type": "function",
        "function": {
            "name": "create_github_file",
            "description": "Create a new file in a GitHub repository with a commit",
            "parameters": {
                "type": "object",
                "properties": {
                    "owner": {"type": "string", "description": "Repository owner"},
                    "repo": {"type": "string", "description": "Repository name"},
                    "path": {"type": "string", "description": "File path to create"},
                    "content": {"type": "string", "description": "File content"},
                    "message": {"type": "string", "description": "Commit message"},
                    "branch": {"type": "string", "description": "Target branch. Default: repository default branch"}
                },
                "required": ["owner", "repo", "path", "content", "message"]
            }
        }
    },
    {
        "type": "function",
        "function": {
            "name": "update_github_file",
            "description": "Update an existing file in a GitHub repository with a commit",
            "parameters": {
                "type": "object",
                "properties": {
                    "owner": {"type": "string", "description": "Repository owner"},
                    "repo": {"type": "string", "description": "Repository name"},
                    "path": {"type": "string", "description": "File path to update"},
                    "content": {"type": "string", "description": "New file content"},
                    "message": {"type": "string", "description": "Commit message"},
                    "sha": {"type": "string", "description": "Blob SHA of the file being replaced"}
                },
                "required": ["owner", "repo", "path", "content", "message", "sha"]
            }
        }
    },
    {
        "type": "function",
        "function": {
            "name": "delete_github_file",
            "description": "Delete a file from a GitHub repository with a commit",
            "parameters": {
                "type": "object",
                "properties": {
                    "owner": {"type": "string", "description": "Repository owner"},
                    "repo": {"type": "string", "description": "Repository name"},
                    "path": {"type": "string", "description": "File path to delete"},
                    "message": {"type": "string", "description": "Commit message"},
                    "sha": {"type": "string", "description": "Blob SHA of the file being deleted"}
                },
                "required": ["owner", "repo", "path", "message", "sha"]
            }
        }
    },
]


@dataclass
class ToolDefinition:
    """Definition of a tool available to the agent.

    Attributes:
        name: Unique identifier for the tool.
        description: Human-readable description of what the tool does.
        category: Category the tool belongs to (e.g. "FileOperations").
        tags: Free-form labels used by modes to allow or exclude tools.
        parameters: JSON schema for the tool's parameters.
    """
    name: str
    description: str
    category: str = "General"
    tags: list[str] = field(default_factory=list)
    parameters: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_openai_format(cls, tool_dict: dict[str, Any]) -> "ToolDefinition":
        """Create a ToolDefinition from OpenAI-style tool format.

        Category and tags come from TOOL_METADATA; unknown tools land in
        the "General" category without tags.

        Args:
            tool_dict: Tool definition in OpenAI format with 'type' and 'function' keys.

        Returns:
            A new ToolDefinition instance.
        """
        func = tool_dict.get("function", {})
        name = func.get("name", "")
        category, tags = TOOL_METADATA.get(name, ("General", ()))
        return cls(
            name=name,
            description=func.get("description", ""),
            category=category,
            tags=list(tags),
            parameters=func.get("parameters", {}),
        )

    def to_openai_format(self) -> dict[str, Any]:
        """Convert this ToolDefinition to OpenAI-style tool format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            }
        }

    def has_tag(self, tag: str) -> bool:
        """Check whether the tool carries a tag (case-insensitive)."""
        wanted = tag.lower()
        return any(t.lower() == wanted for t in self.tags)


def get_builtin_tools() -> list[ToolDefinition]:
    """Get all built-in tool definitions.

    Returns:
        List of ToolDefinition objects for all built-in tools.
    """
    return [ToolDefinition.from_openai_format(tool) for tool in BUILTIN_TOOLS]


class ToolRegistry:
    """In-memory catalog of tools, queryable by category and tag.

    Lookups never fail: an unknown category or tag simply has no tools.
    Category and tag names match case-insensitively.

    Example:
        registry = ToolRegistry(get_builtin_tools())
        names = [t.name for t in registry.get_tools_by_tag("query")]
    """

    def __init__(self, tools: Optional[list[ToolDefinition]] = None) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: ToolDefinition) -> None:
        """Register a tool, replacing any tool with the same name.

        Raises:
            ValueError: If the tool has no name.
        """
        if not tool.name or not tool.name.strip():
            raise ValueError("Tool name cannot be empty")
        self._tools[tool.name] = tool

    def add_mcp_tool(self, mcp_tool: dict[str, Any]) -> ToolDefinition:
        """Register a tool discovered from an MCP server.

        Args:
            mcp_tool: MCP tool definition dictionary.

        Returns:
            The registered ToolDefinition.
        """
        tool = ToolDefinition(
            name=mcp_tool.get("name", ""),
            description=mcp_tool.get("description", ""),
            category=MCP_CATEGORY,
            tags=[MCP_TAG],
            parameters=mcp_tool.get("inputSchema", {}),
        )
        self.register(tool)
        return tool

    def unregister(self, name: str) -> bool:
        """Remove a tool by name. Returns True if it was registered."""
        return self._tools.pop(name, None) is not None

    def get(self, name: str) -> Optional[ToolDefinition]:
        return self._tools.get(name)

    def get_tools_by_category(self, category: str) -> list[ToolDefinition]:
        """Get all tools in a category.

        Args:
            category: Category name.

        Returns:
            Tools in registration order, or an empty list for unknown categories.
        """
        if not category:
            return []
        wanted = category.lower()
        return [t for t in self._tools.values() if t.category.lower() == wanted]

    def get_tools_by_tag(self, tag: str) -> list[ToolDefinition]:
        """Get all tools carrying a tag.

        Args:
            tag: Tag name.

        Returns:
            Tools in registration order, or an empty list for unknown tags.
        """
        if not tag:
            return []
        return [t for t in self._tools.values() if t.has_tag(tag)]

    @property
    def tools(self) -> list[ToolDefinition]:
        """Get all registered tools."""
        return list(self._tools.values())

    @property
    def categories(self) -> list[str]:
        """Get the distinct category names, sorted."""
        return sorted({t.category for t in self._tools.values()})

    @property
    def tags(self) -> list[str]:
        """Get the distinct tag names, sorted."""
        return sorted({tag for t in self._tools.values() for tag in t.tags})

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools


def create_default_registry() -> ToolRegistry:
    """Create a registry holding the built-in tools."""
    return ToolRegistry(get_builtin_tools())
