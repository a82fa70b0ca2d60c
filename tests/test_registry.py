"""Tests for commands/registry.py and @command declarations."""

from __future__ import annotations

import pytest

from chat_dispatch.commands.model import Command, ParamKind, command, commands_of
from chat_dispatch.commands.registry import CommandRegistry, alias_key
from chat_dispatch.errors import InvalidCommandError, RegistrationError


def _noop() -> None:
    return None


def _cmd(*aliases: str, **kwargs) -> Command:
    return Command(aliases=aliases, invocable=_noop, **kwargs)


class Greeter:
    @command("greet", "hello", params=(ParamKind.TOKEN, ParamKind.TOKEN))
    def greet(self, alias: str, name: str | None) -> str:
        return f"Hello {name}"

    @command("bye", description="Says goodbye", show_in_help=False)
    async def bye(self) -> str:
        return "bye"

    def not_a_command(self) -> None:
        return None


class LoudGreeter(Greeter):
    @command("GREET", params=(ParamKind.ARGS,))
    def greet(self, args: list[str]) -> str:
        return "HELLO"


def test_alias_key_strips_whitespace_and_lowercases() -> None:
    assert alias_key("My Cmd") == "mycmd"
    assert alias_key("cmd", "! ") == "!cmd"


def test_lookup_is_case_insensitive() -> None:
    registry = CommandRegistry()
    registry.register(None, [_cmd("Ping")])

    assert registry.lookup("ping") is not None
    assert registry.lookup("PING") is not None
    assert registry.lookup("pong") is None


def test_whitespace_inside_alias_is_stripped() -> None:
    registry = CommandRegistry()
    registry.register(None, [_cmd("My Cmd")])

    entry = registry.lookup("mycmd")
    assert entry is not None
    assert entry.name == "My Cmd"


def test_every_alias_is_indexed() -> None:
    registry = CommandRegistry()
    (entry,) = registry.register(None, [_cmd("a", "b", "c")])

    assert registry.lookup("a") is entry
    assert registry.lookup("b") is entry
    assert registry.lookup("c") is entry
    assert registry.list() == (entry,)


def test_empty_aliases_rejected_and_nothing_registered() -> None:
    registry = CommandRegistry()

    with pytest.raises(InvalidCommandError):
        registry.register(None, [_cmd("ok"), _cmd()])

    assert registry.lookup("ok") is None
    assert registry.list() == ()


def test_blank_alias_rejected() -> None:
    registry = CommandRegistry()
    with pytest.raises(RegistrationError):
        registry.register(None, [_cmd("  ")])


def test_alias_collision_last_write_wins() -> None:
    registry = CommandRegistry()
    first, = registry.register(None, [_cmd("dup", description="first")])
    second, = registry.register(None, [_cmd("dup", description="second")])

    assert registry.lookup("dup") is second
    assert registry.list() == (first, second)


def test_prefix_applies_to_later_registrations_only() -> None:
    registry = CommandRegistry()
    registry.register(None, [_cmd("before")])
    registry.set_default_prefix("!")
    registry.register(None, [_cmd("after")])

    assert registry.lookup("before") is not None
    assert registry.lookup("!before") is None
    assert registry.lookup("!after") is not None
    assert registry.lookup("after") is None
    assert registry.lookup("!AFTER").usage == "!after"


def test_usage_defaults_to_canonical_alias() -> None:
    assert _cmd("first", "second").usage == "first"
    assert _cmd("first", usage="first <x>").usage == "first <x>"


def test_register_executor_scans_declarations_in_order() -> None:
    registry = CommandRegistry()
    executor = Greeter()
    entries = registry.register_executor(executor)

    assert [entry.name for entry in entries] == ["greet", "bye"]
    assert all(entry.executor is executor for entry in entries)
    assert registry.lookup("hello") is entries[0]
    assert entries[1].command.show_in_help is False
    assert entries[1].command.description == "Says goodbye"


def test_commands_of_binds_to_instance() -> None:
    executor = Greeter()
    (greet, _) = commands_of(executor)
    assert greet.invocable("greet", "Alice") == "Hello Alice"
    assert greet.parameters == (ParamKind.TOKEN, ParamKind.TOKEN)


def test_commands_of_subclass_override_replaces_declaration() -> None:
    declared = commands_of(LoudGreeter())
    assert [cmd.aliases for cmd in declared] == [("GREET",), ("bye",)]
    assert declared[0].invocable(["x"]) == "HELLO"


def test_registered_list_is_a_snapshot() -> None:
    registry = CommandRegistry()
    registry.register(None, [_cmd("one")])
    snapshot = registry.list()
    registry.register(None, [_cmd("two")])

    assert len(snapshot) == 1
    assert len(registry) == 2
