"""Error types raised by the dispatch core."""

from __future__ import annotations


class ChatDispatchError(Exception):
    """Base class for chat_dispatch errors."""


class ConfigError(ChatDispatchError):
    """Configuration file is missing, malformed, or incomplete."""


class RegistrationError(ChatDispatchError):
    """A command could not be registered."""


class InvalidCommandError(RegistrationError, ValueError):
    """A command descriptor is unusable (e.g. no aliases)."""


class InvocationError(ChatDispatchError):
    """A command body raised while running.

    Always caught and logged by the dispatcher; the original exception is
    available as ``__cause__``.
    """

    def __init__(self, command: str) -> None:
        super().__init__(f"command {command!r} failed")
        self.command = command
