"""Command declaration, registry, parsing and parameter binding.

This package holds everything the dispatcher needs to turn message text into
a command call; it has no knowledge of any chat platform.
"""

from __future__ import annotations

from .builtin import HelpCommand
from .model import Command, ParamKind, RegisteredCommand, command, commands_of
from .parse import (
    DISCORD_MENTIONS,
    MentionSyntax,
    SplitMode,
    parse_argument,
    split_message,
)
from .registry import CommandRegistry, alias_key
from .resolve import ParameterResolver

__all__ = [
    "DISCORD_MENTIONS",
    "Command",
    "CommandRegistry",
    "HelpCommand",
    "MentionSyntax",
    "ParamKind",
    "ParameterResolver",
    "RegisteredCommand",
    "SplitMode",
    "alias_key",
    "command",
    "commands_of",
    "parse_argument",
    "split_message",
]
