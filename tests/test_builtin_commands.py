"""Tests for the built-in help command."""

from __future__ import annotations

import pytest

from chat_dispatch.commands.builtin import HelpCommand, format_help
from chat_dispatch.commands.model import command
from chat_dispatch.dispatcher import Dispatcher

from dispatch_fixtures import FakeAdapter, ReplySink, make_message


class Tools:
    @command("roll", "dice", description="Rolls a die", usage="roll <sides>")
    async def roll(self) -> str:
        return "4"

    @command("ping")
    async def ping(self) -> str:
        return "pong"

    @command("secret", show_in_help=False, description="Hidden")
    async def secret(self) -> str:
        return "shh"


def _dispatcher() -> Dispatcher:
    dispatcher = Dispatcher(FakeAdapter())
    dispatcher.set_default_prefix("!")
    dispatcher.register_command(Tools())
    dispatcher.register_command(HelpCommand(dispatcher.registry))
    return dispatcher


@pytest.mark.anyio
async def test_help_lists_visible_commands_in_order() -> None:
    dispatcher = _dispatcher()
    sink = ReplySink()

    await dispatcher.handle(make_message("!help", reply=sink))

    assert sink.sent == [
        "!roll <sides> - Rolls a die\n"
        "!ping\n"
        "!help [command] - Shows the available commands"
    ]


@pytest.mark.anyio
async def test_help_for_one_command() -> None:
    dispatcher = _dispatcher()
    sink = ReplySink()

    await dispatcher.handle(make_message("!commands dice", reply=sink))
    await dispatcher.handle(make_message("!help !ROLL", reply=sink))

    detail = "usage: !roll <sides>\ndescription: Rolls a die\naliases: !roll, !dice"
    assert sink.sent == [detail, detail]


@pytest.mark.anyio
@pytest.mark.parametrize("name", ["secret", "nothing"])
async def test_help_for_unknown_or_hidden_command(name: str) -> None:
    dispatcher = _dispatcher()
    sink = ReplySink()

    await dispatcher.handle(make_message(f"!help {name}", reply=sink))

    assert sink.sent == [f"unknown command `{name}`."]


def test_format_help_without_commands() -> None:
    assert format_help(()) == "no commands available."
