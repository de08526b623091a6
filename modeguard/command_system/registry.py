"""
Command registry for modeguard.
Handles command registration, discovery, and lookup.
"""
import importlib
import logging
import pkgutil
from pathlib import Path
from typing import Dict, List, Optional

from .base import SlashCommand, CommandResult


logger = logging.getLogger(__name__)


class CommandRegistry:
    """
    Registry for slash commands.

    Supports auto-discovery of commands from the commands package
    and dynamic registration of custom commands.
    """

    def __init__(self, discover: bool = True) -> None:
        self._commands: Dict[str, SlashCommand] = {}
        self._aliases: Dict[str, str] = {}
        if discover:
            self._discover_commands()

    def _discover_commands(self) -> None:
        """Auto-discover and register commands from the commands package."""
        from . import commands as commands_package

        package_path = Path(commands_package.__file__).parent

        for module_info in pkgutil.iter_modules([str(package_path)]):
            if module_info.name.startswith('_'):
                continue

            module = importlib.import_module(
                f".commands.{module_info.name}",
                package=__package__
            )

            for attr_name in dir(module):
                attr = getattr(module, attr_name)
                if (
                    isinstance(attr, type) and
                    issubclass(attr, SlashCommand) and
                    attr is not SlashCommand and
                    attr.__module__ == module.__name__ and
                    not attr_name.startswith('_')
                ):
                    self.register(attr())

    def register(self, command: SlashCommand) -> None:
        """
        Register a command.

        Args:
            command: Command instance to register
        """
        self._commands[command.name] = command

        for alias in command.aliases:
            self._aliases[alias] = command.name

        logger.debug(f"Registered command: /{command.name}")

    def get(self, name: str) -> Optional[SlashCommand]:
        """
        Get a command by name or alias.

        Args:
            name: Command name or alias

        Returns:
            Command instance or None
        """
        name = name.lower()

        if name in self._commands:
            return self._commands[name]

        if name in self._aliases:
            return self._commands[self._aliases[name]]

        return None

    def execute(self, name: str, args: str = "", **kwargs) -> CommandResult:
        """
        Execute a command by name.

        Unexpected exceptions raised by the command are reported as an
        error result instead of propagating.

        Args:
            name: Command name
            args: Command arguments
            **kwargs: Additional context

        Returns:
            CommandResult from execution
        """
        command = self.get(name)

        if command is None:
            return CommandResult.error(
                f"Unknown command: /{name}. Type /help for available commands."
            )

        validation_error = command.validate_args(args)
        if validation_error:
            return CommandResult.error(validation_error)

        kwargs.setdefault("registry", self)

        try:
            return command.run(args, **kwargs)
        except Exception as e:
            logger.debug(f"Command /{name} failed", exc_info=True)
            return CommandResult.error(f"Command error: {e}")

    def list_commands(self) -> List[dict]:
        """
        List all registered commands.

        Returns:
            List of command info dicts
        """
        commands = []
        for name, command in sorted(self._commands.items()):
            commands.append({
                "name": name,
                "description": command.description,
                "aliases": command.aliases,
                "usage": command.usage,
            })
        return commands

    def get_help(self, name: str) -> Optional[str]:
        """
        Get help text for a command.

        Args:
            name: Command name

        Returns:
            Help text or None
        """
        command = self.get(name)
        if command:
            return command.get_help()
        return None

    def has_command(self, name: str) -> bool:
        """Check if a command exists."""
        return name.lower() in self._commands or name.lower() in self._aliases

    @property
    def command_count(self) -> int:
        """Get number of registered commands."""
        return len(self._commands)


_registry: Optional[CommandRegistry] = None


def get_command_registry() -> CommandRegistry:
    """Get the global command registry instance."""
    global _registry
    if _registry is None:
        _registry = CommandRegistry()
    return _registry
