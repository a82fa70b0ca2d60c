"""Built-in commands available to every adapter."""

from __future__ import annotations

from collections.abc import Sequence

from .model import ParamKind, RegisteredCommand, command
from .registry import CommandRegistry, alias_key

HELP_USAGE = "help [command]"


def format_command_line(entry: RegisteredCommand) -> str:
    description = entry.command.description
    if not description or description == "none":
        return entry.usage
    return f"{entry.usage} - {description}"


def format_help(commands: Sequence[RegisteredCommand]) -> str:
    lines = [
        format_command_line(entry) for entry in commands if entry.command.show_in_help
    ]
    if not lines:
        return "no commands available."
    return "\n".join(lines)


def format_command_detail(entry: RegisteredCommand) -> str:
    cmd = entry.command
    lines = [f"usage: {entry.usage}"]
    if cmd.description and cmd.description != "none":
        lines.append(f"description: {cmd.description}")
    if len(cmd.aliases) > 1:
        aliases = ", ".join(f"{entry.prefix}{alias}" for alias in cmd.aliases)
        lines.append(f"aliases: {aliases}")
    return "\n".join(lines)


class HelpCommand:
    """Lists registered commands, or describes one of them."""

    def __init__(self, registry: CommandRegistry) -> None:
        self._registry = registry

    @command(
        "help",
        "commands",
        params=(ParamKind.ARGS,),
        description="Shows the available commands",
        usage=HELP_USAGE,
    )
    def help(self, args: list[str]) -> str:
        if not args:
            return format_help(self._registry.list())
        entry = self._find(args[0])
        if entry is None or not entry.command.show_in_help:
            return f"unknown command `{args[0]}`."
        return format_command_detail(entry)

    def _find(self, token: str) -> RegisteredCommand | None:
        entry = self._registry.lookup(token)
        if entry is None:
            entry = self._registry.lookup(
                alias_key(token, self._registry.default_prefix)
            )
        return entry
