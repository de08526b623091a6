"""Mode command for modeguard."""
import json
from pathlib import Path
from typing import Any, Optional

from ..base import SlashCommand, CommandResult
from ...modes import ModeError, ModeManager, ResolvedMode


def _format_tools(tools: frozenset[str]) -> str:
    return ", ".join(f"`{t}`" for t in sorted(tools)) if tools else "none"


class ModeCommand(SlashCommand):
    """Show, switch and manage operational modes."""

    name = "mode"
    description = "Show, switch and manage operational modes"
    aliases = ["modes"]
    usage = "[list | current | <mode_id> | use <mode_id> | add <file.json> | remove <mode_id> | tools [mode_id] | check <tool>]"
    examples = [
        "/mode                     # Show current mode",
        "/mode list                # List all available modes",
        "/mode ask                 # Switch to ask mode (read-only)",
        "/mode add review.json     # Add custom modes from a JSON file",
        "/mode remove review       # Remove a custom mode",
        "/mode tools architect     # Show the tools a mode allows",
        "/mode check write_file    # Check a tool against the current mode",
    ]

    def run(self, args: str = "", **kwargs: Any) -> CommandResult:
        """Execute mode command."""
        mode_manager: Optional[ModeManager] = kwargs.get("mode_manager")
        if mode_manager is None:
            return CommandResult.error("Mode manager is not available.")

        parts = args.strip().split(maxsplit=1)
        action = parts[0].lower() if parts else ""
        rest = parts[1].strip() if len(parts) > 1 else ""

        try:
            if not action or action == "current":
                return self._show_current(mode_manager)
            if action == "list":
                return self._list_modes(mode_manager)
            if action == "add":
                return self._add_modes(rest, mode_manager)
            if action == "remove":
                return self._remove_mode(rest, mode_manager)
            if action == "tools":
                return self._show_tools(rest, mode_manager)
            if action == "check":
                return self._check_tool(rest, mode_manager)
            if action == "use":
                return self._switch_mode(rest, mode_manager)
            return self._switch_mode(args.strip(), mode_manager)
        except ModeError as e:
            return CommandResult.error(str(e))

    def _show_current(self, mode_manager: ModeManager) -> CommandResult:
        """Show current mode configuration."""
        resolved = mode_manager.get_current_mode()
        mode = resolved.mode

        lines = [
            "# Current Mode",
            "",
            f"**Mode:** {mode.icon} {mode.name or mode.id} (`{mode.id}`)",
            "",
        ]
        if mode.description:
            lines.extend([mode.description, ""])
        if mode.preferred_model:
            lines.extend([f"**Preferred model:** {mode.preferred_model}", ""])
        lines.extend([
            f"**Allowed tools:** {_format_tools(resolved.tools)}",
            "",
            "Use `/mode list` to see all available modes.",
            "Use `/mode <id>` to switch modes.",
        ])

        return CommandResult.success("\n".join(lines), data=resolved)

    def _list_modes(self, mode_manager: ModeManager) -> CommandResult:
        """List all available modes."""
        modes = mode_manager.get_available_modes()
        active = mode_manager.active_mode_id.lower()

        lines = ["# Available Modes", ""]

        for resolved in modes:
            mode = resolved.mode
            marker = " (active)" if mode.key == active else ""
            kind = "built-in" if mode.is_built_in else "custom"
            lines.append(f"## {mode.icon} {mode.name or mode.id}{marker}")
            lines.append(f"**Id:** `{mode.id}` ({kind})")
            lines.append(f"**Tools:** {len(resolved.tools)}")
            if mode.description:
                lines.append("")
                lines.append(f"_{mode.description.splitlines()[0][:100]}_")
            lines.append("")

        lines.append("Use `/mode <id>` to switch to a mode.")

        return CommandResult.success("\n".join(lines), data=modes)

    def _switch_mode(self, mode_id: str, mode_manager: ModeManager) -> CommandResult:
        """Switch to a different mode."""
        if not mode_id:
            return CommandResult.error("Usage: /mode use <mode_id>")

        if mode_manager.get_mode(mode_id) is None:
            available = [r.mode.id for r in mode_manager.get_available_modes()]
            return CommandResult.error(
                f"Unknown mode: `{mode_id}`.\n"
                f"Available modes: {', '.join(available)}"
            )

        resolved = mode_manager.set_current_mode(mode_id)
        mode = resolved.mode

        return CommandResult.success(
            f"Switched to **{mode.icon} {mode.name or mode.id}** mode.\n\n"
            f"Allowed tools: {_format_tools(resolved.tools)}",
            data=resolved,
        )

    def _add_modes(self, path_arg: str, mode_manager: ModeManager) -> CommandResult:
        """Add custom modes from a JSON file."""
        if not path_arg:
            return CommandResult.error("Usage: /mode add <file.json>")

        path = Path(path_arg).expanduser()
        try:
            count = mode_manager.load_custom_modes(path)
        except FileNotFoundError as e:
            return CommandResult.error(str(e))
        except json.JSONDecodeError as e:
            return CommandResult.error(f"Invalid JSON in {path}: {e.msg} (line {e.lineno})")

        if count == 0:
            return CommandResult.error(f"No modes were added from {path}. Run with --verbose for details.")
        return CommandResult.success(f"Added {count} custom mode(s) from `{path}`.", data=count)

    def _remove_mode(self, mode_id: str, mode_manager: ModeManager) -> CommandResult:
        """Remove a custom mode."""
        active_before = mode_manager.active_mode_id
        mode_manager.remove_custom_mode(mode_id)

        message = f"Removed custom mode `{mode_id}`."
        if mode_manager.active_mode_id != active_before:
            message += f"\n\nActive mode reset to `{mode_manager.active_mode_id}`."
        return CommandResult.success(message)

    def _show_tools(self, mode_id: str, mode_manager: ModeManager) -> CommandResult:
        """Show the tools a mode allows."""
        resolved: Optional[ResolvedMode]
        if mode_id:
            resolved = mode_manager.get_mode(mode_id)
            if resolved is None:
                return CommandResult.error(f"Unknown mode: `{mode_id}`.")
        else:
            resolved = mode_manager.get_current_mode()

        mode = resolved.mode
        lines = [f"# Tools in {mode.icon} {mode.name or mode.id}", ""]
        lines.extend(f"- `{tool}`" for tool in sorted(resolved.tools))
        if not resolved.tools:
            lines.append("_No tools allowed._")

        return CommandResult.success("\n".join(lines), data=resolved)

    def _check_tool(self, tool_name: str, mode_manager: ModeManager) -> CommandResult:
        """Check whether a tool is allowed in the current mode."""
        if not tool_name:
            return CommandResult.error("Usage: /mode check <tool>")

        allowed = mode_manager.is_tool_allowed_in_current_mode(tool_name)
        verdict = "allowed" if allowed else "not allowed"
        return CommandResult.success(
            f"`{tool_name}` is **{verdict}** in mode `{mode_manager.active_mode_id}`.",
            data=allowed,
        )
