"""Command descriptors and the ``@command`` declaration decorator."""

from __future__ import annotations

import inspect
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from functools import partial
from typing import Any, TypeVar

from anyio import to_thread

from ..errors import InvocationError

COMMAND_ATTR = "__chat_command__"

F = TypeVar("F", bound=Callable[..., Any])


class ParamKind(str, Enum):
    """What a command parameter receives when the command runs."""

    TOKEN = "token"
    ARGS = "args"
    PARSED_ARGS = "parsed_args"
    EVENT = "event"
    MESSAGE = "message"
    CLIENT = "client"
    CHANNEL = "channel"
    AUTHOR = "author"
    GUILD = "guild"
    SEQUENCE = "sequence"


@dataclass(frozen=True, slots=True)
class Command:
    aliases: tuple[str, ...]
    invocable: Callable[..., Any]
    parameters: tuple[Any, ...] = ()
    description: str = "none"
    usage: str = ""
    required_permission: str = "none"
    private_messages: bool = True
    channel_messages: bool = True
    show_in_help: bool = True
    run_async: bool = False
    requires_mention: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "aliases", tuple(self.aliases))
        object.__setattr__(self, "parameters", tuple(self.parameters))
        if not self.usage and self.aliases:
            object.__setattr__(self, "usage", self.aliases[0])

    @property
    def name(self) -> str:
        return self.aliases[0] if self.aliases else ""


@dataclass(frozen=True, slots=True)
class RegisteredCommand:
    """A command bound to the executor that contributed it."""

    command: Command
    executor: Any = field(default=None, compare=False)
    prefix: str = ""

    @property
    def name(self) -> str:
        return self.command.name

    @property
    def usage(self) -> str:
        return f"{self.prefix}{self.command.usage}"

    async def invoke(self, args: Sequence[Any]) -> Any:
        """Run the command body with already-resolved arguments.

        Coroutine functions are awaited; plain callables run in a worker
        thread so a blocking command cannot stall other events.
        """
        invocable = self.command.invocable
        try:
            if inspect.iscoroutinefunction(invocable):
                result = await invocable(*args)
            else:
                result = await to_thread.run_sync(partial(invocable, *args))
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            raise InvocationError(self.name) from exc
        return result


def command(
    *aliases: str,
    params: Sequence[Any] = (),
    description: str = "none",
    usage: str = "",
    permission: str = "none",
    private_messages: bool = True,
    channel_messages: bool = True,
    show_in_help: bool = True,
    run_async: bool = False,
    requires_mention: bool = False,
) -> Callable[[F], F]:
    """Declare a method as a chat command.

    ``params`` lists the parameter kinds in positional order; it replaces any
    inspection of the method signature.
    """

    def decorator(fn: F) -> F:
        setattr(
            fn,
            COMMAND_ATTR,
            Command(
                aliases=aliases,
                invocable=fn,
                parameters=tuple(params),
                description=description,
                usage=usage,
                required_permission=permission,
                private_messages=private_messages,
                channel_messages=channel_messages,
                show_in_help=show_in_help,
                run_async=run_async,
                requires_mention=requires_mention,
            ),
        )
        return fn

    return decorator


def commands_of(executor: Any) -> list[Command]:
    """Collect the ``@command`` declarations of an executor, bound to it.

    Order follows class definition, base classes first; a subclass attribute
    with the same name replaces the base declaration in place.
    """
    found: dict[str, Command] = {}
    for klass in reversed(type(executor).__mro__):
        for name, attr in vars(klass).items():
            declared = getattr(attr, COMMAND_ATTR, None)
            if isinstance(declared, Command):
                found[name] = declared
            elif name in found:
                del found[name]
    return [
        replace(declared, invocable=getattr(executor, name))
        for name, declared in found.items()
    ]
