"""Transport-agnostic command dispatch for chat bots."""

from __future__ import annotations

from .commands import (
    Command,
    CommandRegistry,
    HelpCommand,
    ParamKind,
    ParameterResolver,
    RegisteredCommand,
    SplitMode,
    command,
)
from .config import DispatchSettings
from .dispatcher import DispatchOutcome, Dispatcher
from .errors import (
    ChatDispatchError,
    ConfigError,
    InvalidCommandError,
    InvocationError,
    RegistrationError,
)
from .permissions import PermissionStore, check_permission
from .types import MessageEvent, ReplyFn

__all__ = [
    "ChatDispatchError",
    "Command",
    "CommandRegistry",
    "ConfigError",
    "DispatchOutcome",
    "DispatchSettings",
    "Dispatcher",
    "HelpCommand",
    "InvalidCommandError",
    "InvocationError",
    "MessageEvent",
    "ParamKind",
    "ParameterResolver",
    "PermissionStore",
    "RegisteredCommand",
    "RegistrationError",
    "ReplyFn",
    "SplitMode",
    "check_permission",
    "command",
]
