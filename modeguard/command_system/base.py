"""
Base classes for the command system in modeguard.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional


class CommandStatus(Enum):
    """Status of command execution."""
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class CommandResult:
    """Result of a command execution."""
    status: CommandStatus = CommandStatus.SUCCESS
    message: str = ""
    data: Any = None
    errors: List[str] = field(default_factory=list)

    @property
    def is_success(self) -> bool:
        """Check if command succeeded."""
        return self.status == CommandStatus.SUCCESS

    @property
    def is_error(self) -> bool:
        """Check if command failed."""
        return self.status == CommandStatus.ERROR

    @classmethod
    def success(cls, message: str = "", data: Any = None) -> 'CommandResult':
        """Create a success result."""
        return cls(status=CommandStatus.SUCCESS, message=message, data=data)

    @classmethod
    def error(cls, message: str, errors: Optional[List[str]] = None) -> 'CommandResult':
        """Create an error result."""
        return cls(
            status=CommandStatus.ERROR,
            message=message,
            errors=errors or [message]
        )


class SlashCommand(ABC):
    """
    Base class for all slash commands.

    All commands must inherit from this class and implement the run method.
    Commands are auto-discovered and registered based on their class attributes.
    """

    name: str = ""
    description: str = ""
    aliases: List[str] = []
    usage: str = ""
    examples: List[str] = []

    def __init__(self) -> None:
        """Initialize the command."""
        if not self.name:
            self.name = self.__class__.__name__.lower().replace("command", "")

    @abstractmethod
    def run(self, args: str = "", **kwargs: Any) -> CommandResult:
        """
        Execute the command.

        Args:
            args: Command arguments as a string
            **kwargs: Additional context (mode_manager, registry, etc.)

        Returns:
            CommandResult with execution status
        """
        pass

    def get_help(self) -> str:
        """Get detailed help text for the command."""
        parts = [
            f"**/{self.name}** - {self.description}",
        ]

        if self.usage:
            parts.append(f"\n**Usage:** `/{self.name} {self.usage}`")

        if self.aliases:
            parts.append(f"\n**Aliases:** {', '.join(self.aliases)}")

        if self.examples:
            parts.append("\n**Examples:**")
            for example in self.examples:
                parts.append(f"  `{example}`")

        return "\n".join(parts)

    def validate_args(self, args: str) -> Optional[str]:
        """
        Validate command arguments.

        Args:
            args: Arguments string

        Returns:
            Error message if invalid, None if valid
        """
        return None

    def __repr__(self) -> str:
        return f"<SlashCommand /{self.name}>"
