"""Tools command for modeguard."""
from typing import Any

from ..base import SlashCommand, CommandResult


class ToolsCommand(SlashCommand):
    """List registered tools by category or tag."""

    name = "tools"
    description = "List registered tools, optionally filtered by category or tag"
    aliases = []
    usage = "[category <name> | tag <name>]"
    examples = [
        "/tools                    # All tools grouped by category",
        "/tools category GitHub    # Tools in one category",
        "/tools tag query          # Tools carrying one tag",
    ]

    def run(self, args: str = "", **kwargs: Any) -> CommandResult:
        """Execute tools command."""
        mode_manager = kwargs.get("mode_manager")
        if mode_manager is None:
            return CommandResult.error("Mode manager is not available.")

        registry = mode_manager.registry
        parts = args.split(maxsplit=1)
        action = parts[0].lower() if parts else ""
        value = parts[1].strip() if len(parts) > 1 else ""

        if action in ("category", "tag"):
            if not value:
                return CommandResult.error(f"Usage: /tools {action} <name>")
            if action == "category":
                tools = registry.get_tools_by_category(value)
            else:
                tools = registry.get_tools_by_tag(value)
            lines = [f"# Tools with {action} `{value}`", ""]
            lines.extend(self._tool_line(tool) for tool in tools)
            if not tools:
                lines.append("_No tools found._")
            return CommandResult.success("\n".join(lines), data=tools)

        if action:
            return CommandResult.error(f"Unknown option: {action}. Use `category` or `tag`.")

        lines = ["# Registered Tools", ""]
        for category in registry.categories:
            lines.append(f"## {category}")
            lines.extend(self._tool_line(tool) for tool in registry.get_tools_by_category(category))
            lines.append("")

        return CommandResult.success("\n".join(lines), data=registry.tools)

    @staticmethod
    def _tool_line(tool) -> str:
        tags = f" _[{', '.join(tool.tags)}]_" if tool.tags else ""
        return f"- `{tool.name}` - {tool.description}{tags}"
