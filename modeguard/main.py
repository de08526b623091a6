"""
Main entry point for modeguard.
"""
import argparse
import logging
import sys
from typing import Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.markup import escape

from .constants import APP_NAME, APP_VERSION, APP_DESCRIPTION, CONFIG_PATH_ENV_VAR, SLASH_PREFIX


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description=APP_DESCRIPTION
    )

    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"{APP_NAME} {APP_VERSION}"
    )

    parser.add_argument(
        "--config",
        type=str,
        help=f"Path to the settings file (default: ${CONFIG_PATH_ENV_VAR} or ~/.{APP_NAME}/settings.json)"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show informational log messages such as built-in mode migrations"
    )

    parser.add_argument(
        "-c", "--command",
        type=str,
        help="Slash command to execute, e.g. \"/mode list\""
    )

    parser.add_argument(
        "words",
        nargs="*",
        help="Command words, e.g. `mode list` (same as -c \"/mode list\")"
    )

    return parser.parse_args(argv)


def configure_logging(verbose: bool = False) -> None:
    """Route log records through rich at WARNING, or INFO when verbose."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False, rich_tracebacks=verbose)],
    )


def split_command(command_line: str) -> tuple[str, str]:
    """Split "/mode list" into ("mode", "list")."""
    cmd_parts = command_line.strip().lstrip(SLASH_PREFIX).split(maxsplit=1)
    cmd_name = cmd_parts[0] if cmd_parts else ""
    cmd_args = cmd_parts[1] if len(cmd_parts) > 1 else ""
    return cmd_name, cmd_args


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    configure_logging(args.verbose)

    console = Console()
    err_console = Console(stderr=True)

    from .command_system import CommandRegistry
    from .config import ConfigError, SettingsStore
    from .modes import ModeCatalogError, ModeManager
    from .tools import create_default_registry

    store = SettingsStore(args.config)

    try:
        mode_manager = ModeManager(store, create_default_registry())
    except (ModeCatalogError, ConfigError) as e:
        err_console.print(f"[bold red]Fatal error:[/bold red] {escape(str(e))}")
        return 2

    command_line = args.command or " ".join(args.words) or f"{SLASH_PREFIX}mode"
    cmd_name, cmd_args = split_command(command_line)

    registry = CommandRegistry()
    result = registry.execute(cmd_name, cmd_args, mode_manager=mode_manager)

    if result.is_error:
        err_console.print(f"[bold red]Error:[/bold red] {escape(result.message)}")
        return 1

    if result.message:
        console.print(Markdown(result.message))
    return 0


if __name__ == "__main__":
    sys.exit(main())
