"""Help command for modeguard."""
from typing import Any

from ..base import SlashCommand, CommandResult
from ..registry import get_command_registry


class HelpCommand(SlashCommand):
    """Display help information."""

    name = "help"
    description = "Show available slash commands"
    aliases = ["h", "?"]
    usage = "[command]"
    examples = ["/help", "/help mode", "/help tools"]

    def run(self, args: str = "", **kwargs: Any) -> CommandResult:
        """Execute help command."""
        registry = kwargs.get("registry") or get_command_registry()

        if args.strip():
            command_name = args.strip().lstrip("/")
            help_text = registry.get_help(command_name)

            if help_text:
                return CommandResult.success(help_text)
            return CommandResult.error(f"Unknown command: {command_name}")

        commands = registry.list_commands()

        lines = ["# Available Commands", ""]
        for cmd in commands:
            lines.append(f"- **/{cmd['name']}** - {cmd['description']}")

        return CommandResult.success("\n".join(lines))
