"""
Built-in mode definitions.

Provides the modes shipped with modeguard: default, ask, architect and github.
Bump CATALOG_VERSION whenever a definition here changes.
"""

from typing import Optional

from .schema import Mode, mode_key


CATALOG_VERSION = "1.1.0"


# Default Mode - every tool in the registry
DEFAULT_MODE = Mode(
    id="default",
    name="Default",
    description="General purpose assistant with access to every registered tool",
    system_prompt=(
        "You are a highly skilled software engineer with extensive knowledge in many "
        "programming languages, frameworks, design patterns, and best practices. "
        "Use the available tools step-by-step to accomplish the user's task."
    ),
    allowed_categories=[
        "FileOperations",
        "ContentManipulation",
        "SystemOperations",
        "GitHub",
        "MCP",
    ],
    is_built_in=True,
    icon="💻",
)

# Ask Mode - read-only, answers questions
ASK_MODE = Mode(
    id="ask",
    name="Ask",
    description="Read-only question answering about the workspace",
    system_prompt=(
        "You are a knowledgeable technical assistant focused on answering questions "
        "about the codebase. Read files and search as needed, but never modify anything."
    ),
    allowed_tags=["safe", "query"],
    excluded_tags=["write", "execute"],
    is_built_in=True,
    icon="❓",
)

# Architect Mode - plans and writes documents, no shell or remote access
ARCHITECT_MODE = Mode(
    id="architect",
    name="Architect",
    description="Plans and designs before implementation; no shell or GitHub access",
    system_prompt=(
        "You are an experienced technical leader. Gather context, then produce a "
        "clear, actionable plan the user can review before anything is implemented."
    ),
    allowed_categories=["FileOperations", "ContentManipulation"],
    excluded_categories=["SystemOperations", "GitHub"],
    is_built_in=True,
    icon="🏗️",
)

# GitHub Mode - repository maintenance through the GitHub API
GITHUB_MODE = Mode(
    id="github",
    name="GitHub",
    description="Manages repository files through the GitHub API",
    system_prompt=(
        "You maintain files in GitHub repositories. Read the current file before "
        "changing it and always write descriptive commit messages."
    ),
    allowed_tools=["read_file", "search_files"],
    allowed_categories=["GitHub"],
    excluded_tags=["destructive"],
    is_built_in=True,
    icon="🐙",
)


# All built-in modes
BUILTIN_MODES = [
    DEFAULT_MODE,
    ASK_MODE,
    ARCHITECT_MODE,
    GITHUB_MODE,
]


def get_builtin_modes() -> list[Mode]:
    """Get all built-in modes.

    Returns:
        Fresh copies of every built-in Mode; callers may mutate them freely.
    """
    return [mode.copy() for mode in BUILTIN_MODES]


def get_builtin_mode(mode_id: str) -> Optional[Mode]:
    """Get a copy of a specific built-in mode by id.

    Args:
        mode_id: The id of the mode to retrieve (case-insensitive).

    Returns:
        The Mode if found, None otherwise.
    """
    key = mode_key(mode_id)
    for mode in BUILTIN_MODES:
        if mode.key == key:
            return mode.copy()
    return None
