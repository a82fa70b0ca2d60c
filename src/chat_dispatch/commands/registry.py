"""Alias-indexed command registry."""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

from ..errors import InvalidCommandError
from ..logging import get_logger
from .model import Command, RegisteredCommand, commands_of

logger = get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")


def alias_key(alias: str, prefix: str = "") -> str:
    """Normalize an alias to its lookup key: prefixed, lowercased, no whitespace."""
    return _WHITESPACE.sub("", f"{prefix}{alias}").lower()


class CommandRegistry:
    """Commands indexed by alias, plus their registration order.

    When two commands share an alias the later registration takes the
    alias; both stay in :meth:`list`.
    """

    def __init__(self, default_prefix: str = "") -> None:
        self._default_prefix = default_prefix
        self._by_alias: dict[str, RegisteredCommand] = {}
        self._ordered: list[RegisteredCommand] = []

    @property
    def default_prefix(self) -> str:
        return self._default_prefix

    def set_default_prefix(self, prefix: str) -> None:
        """Set the prefix baked into aliases registered from now on."""
        self._default_prefix = prefix or ""

    def register(
        self, executor: Any, commands: Iterable[Command]
    ) -> list[RegisteredCommand]:
        pending = list(commands)
        for cmd in pending:
            _validate(cmd)
        registered: list[RegisteredCommand] = []
        for cmd in pending:
            entry = RegisteredCommand(
                command=cmd, executor=executor, prefix=self._default_prefix
            )
            for alias in cmd.aliases:
                key = alias_key(alias, self._default_prefix)
                previous = self._by_alias.get(key)
                if previous is not None:
                    logger.debug(
                        "registry.alias_overwritten",
                        alias=key,
                        previous=previous.name,
                        command=cmd.name,
                    )
                self._by_alias[key] = entry
            self._ordered.append(entry)
            registered.append(entry)
            logger.debug(
                "registry.registered",
                command=cmd.name,
                aliases=len(cmd.aliases),
                prefix=self._default_prefix,
            )
        return registered

    def register_executor(self, executor: Any) -> list[RegisteredCommand]:
        """Register every ``@command`` method declared on ``executor``."""
        return self.register(executor, commands_of(executor))

    def lookup(self, token: str) -> RegisteredCommand | None:
        return self._by_alias.get(token.lower())

    def list(self) -> tuple[RegisteredCommand, ...]:
        return tuple(self._ordered)

    def __len__(self) -> int:
        return len(self._ordered)


def _validate(cmd: Command) -> None:
    if not cmd.aliases:
        raise InvalidCommandError("Aliases cannot be empty")
    for alias in cmd.aliases:
        if not isinstance(alias, str) or not alias_key(alias):
            raise InvalidCommandError(f"Invalid alias {alias!r}")
