"""Inbound-message dispatch: matching, gating, binding and invocation."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from types import TracebackType
from typing import Any

import anyio
from anyio.abc import TaskGroup

from .adapters.base import ChatAdapter
from .commands.model import RegisteredCommand
from .commands.parse import split_message
from .commands.registry import CommandRegistry
from .commands.resolve import ParameterResolver
from .config import DispatchSettings
from .errors import InvocationError
from .logging import get_logger
from .permissions import PermissionStore
from .types import MessageEvent

logger = get_logger(__name__)


class DispatchOutcome(str, Enum):
    """Where processing of one event stopped."""

    IGNORED_SELF = "ignored_self"
    NO_COMMAND = "no_command"
    MENTION_REJECTED = "mention_rejected"
    CHANNEL_REJECTED = "channel_rejected"
    PERMISSION_DENIED = "permission_denied"
    COMPLETED = "completed"
    DETACHED = "detached"
    NOT_RUNNING = "not_running"


class Dispatcher:
    """Routes inbound messages from one adapter to registered commands.

    Use as an async context manager: the dispatcher owns the task group that
    ``run_async`` commands are spawned into. Those run detached, unbounded
    and unordered; leaving the context waits for them to finish. Outside the context
    such commands are logged and skipped.
    """

    def __init__(
        self,
        adapter: ChatAdapter,
        *,
        registry: CommandRegistry | None = None,
        permissions: PermissionStore | None = None,
        settings: DispatchSettings | None = None,
    ) -> None:
        self._adapter = adapter
        self._settings = settings or DispatchSettings()
        self._registry = registry or CommandRegistry(self._settings.default_prefix)
        if permissions is None:
            permissions = PermissionStore(self._settings.permissions)
        self._permissions = permissions
        self._resolver = ParameterResolver(
            mentions=adapter.mentions,
            resolve_user=adapter.resolve_user,
            resolve_channel=adapter.resolve_channel,
        )
        self._task_group: TaskGroup | None = None

    async def __aenter__(self) -> Dispatcher:
        task_group = anyio.create_task_group()
        await task_group.__aenter__()
        self._task_group = task_group
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool | None:
        task_group = self._task_group
        if task_group is None:
            return None
        try:
            return await task_group.__aexit__(exc_type, exc, tb)
        finally:
            self._task_group = None

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    @property
    def permissions(self) -> PermissionStore:
        return self._permissions

    def register_command(self, executor: Any) -> list[RegisteredCommand]:
        return self._registry.register_executor(executor)

    def set_default_prefix(self, prefix: str) -> None:
        self._registry.set_default_prefix(prefix)

    def grant_permission(self, user_id: str, permission: str) -> None:
        self._permissions.grant(user_id, permission)

    def has_permission(self, user_id: str, permission: str) -> bool:
        return self._permissions.check(user_id, permission)

    def list_commands(self) -> tuple[RegisteredCommand, ...]:
        return self._registry.list()

    async def serve(self) -> None:
        """Handle every event the adapter yields, each in its own task.

        Reuses the running task group when called inside ``async with``.
        """
        if self._task_group is not None:
            await self._consume(self._task_group)
            return
        async with self:
            assert self._task_group is not None
            await self._consume(self._task_group)

    async def _consume(self, task_group: TaskGroup) -> None:
        async for event in self._adapter.events():
            task_group.start_soon(self.handle, event)

    async def handle(self, event: MessageEvent) -> DispatchOutcome:
        if event.author_id == self._adapter.self_id:
            return DispatchOutcome.IGNORED_SELF

        tokens = split_message(event.text, self._adapter.split_mode)
        if not tokens:
            return DispatchOutcome.NO_COMMAND
        first = tokens[0]
        registered = self._registry.lookup(first)
        if registered is None:
            # "@bot alias ..." style: accepted only for mention-gated commands.
            if len(tokens) < 2:
                return DispatchOutcome.NO_COMMAND
            registered = self._registry.lookup(tokens[1])
            if registered is None or not registered.command.requires_mention:
                return DispatchOutcome.NO_COMMAND
            tokens = tokens[1:]
        command = registered.command

        if command.requires_mention:
            mentioned = self._adapter.mentions.user_id(first)
            if mentioned is None or mentioned != self._adapter.self_id:
                logger.debug("dispatch.mention_rejected", command=registered.name)
                return DispatchOutcome.MENTION_REJECTED

        if event.is_private and not command.private_messages:
            return DispatchOutcome.CHANNEL_REJECTED
        if not event.is_private and not command.channel_messages:
            return DispatchOutcome.CHANNEL_REJECTED

        if not self._permissions.check(event.author_id, command.required_permission):
            logger.info(
                "dispatch.permission_denied",
                command=registered.name,
                author_id=event.author_id,
                required=command.required_permission,
            )
            message = self._settings.missing_permissions_message
            if message is not None:
                await self._send(event, message, command=registered.name)
            return DispatchOutcome.PERMISSION_DENIED

        args = self._resolver.resolve(command.parameters, tokens, event)

        if command.run_async:
            if self._task_group is None:
                logger.warning("dispatch.not_running", command=registered.name)
                return DispatchOutcome.NOT_RUNNING
            self._task_group.start_soon(self._invoke, registered, event, args)
            return DispatchOutcome.DETACHED
        await self._invoke(registered, event, args)
        return DispatchOutcome.COMPLETED

    async def _invoke(
        self,
        registered: RegisteredCommand,
        event: MessageEvent,
        args: Sequence[Any],
    ) -> None:
        logger.debug(
            "dispatch.invoke",
            command=registered.name,
            author_id=event.author_id,
            transport=event.transport,
        )
        try:
            reply = await registered.invoke(args)
        except InvocationError as exc:
            logger.warning(
                "dispatch.invoke_failed",
                command=exc.command,
                error=repr(exc.__cause__),
                exc_info=exc.__cause__,
            )
            return
        if reply is None:
            return
        await self._send(event, str(reply), command=registered.name)

    async def _send(self, event: MessageEvent, text: str, *, command: str) -> None:
        try:
            await event.reply(text)
        except Exception as exc:
            logger.warning(
                "dispatch.reply_failed",
                command=command,
                channel_id=event.channel_id,
                error=repr(exc),
            )
