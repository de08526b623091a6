"""Command system for modeguard."""
from .base import SlashCommand, CommandResult, CommandStatus
from .registry import CommandRegistry, get_command_registry

__all__ = [
    'SlashCommand', 'CommandResult', 'CommandStatus',
    'CommandRegistry', 'get_command_registry'
]
