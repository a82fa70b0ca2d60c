"""Matrix adapter on top of matrix-nio."""

from __future__ import annotations

import math
import re
import time
from collections.abc import AsyncIterator, Iterable
from functools import partial
from pathlib import Path
from typing import Any

import anyio
import nio
from nio.rooms import MatrixRoom, MatrixUser

from ..commands.builtin import HelpCommand
from ..commands.parse import MentionSyntax, SplitMode
from ..config import load_config, parse_dispatch_settings, parse_matrix_settings
from ..dispatcher import Dispatcher
from ..logging import get_logger
from ..types import MessageEvent

logger = get_logger(__name__)

SYNC_TIMEOUT_MS = 30000

# Clients usually render a mention pill as "@user:server:" in the plain body.
MATRIX_MENTIONS = MentionSyntax(
    user_pattern=re.compile(r"(?P<id>@[^\s:]+:[^\s:]+(?::\d+)?):?"),
    channel_pattern=re.compile(r"(?P<id>[!#][^\s:]+:[^\s:]+(?::\d+)?)"),
)


def _build_reply_content(body: str, reply_to_event_id: str | None) -> dict[str, Any]:
    """Build m.text content, with m.relates_to when replying."""
    content: dict[str, Any] = {
        "msgtype": "m.text",
        "body": body,
    }
    if reply_to_event_id is not None:
        content["m.relates_to"] = {
            "m.in_reply_to": {"event_id": reply_to_event_id},
        }
    return content


def _is_private(room: MatrixRoom) -> bool:
    return room.member_count <= 2


class MatrixAdapter:
    """Feeds nio text events to a dispatcher and sends its replies.

    Rooms with at most two members count as private conversations. Messages
    sent before the adapter was created (room history delivered by the first
    sync) are dropped.
    """

    transport = "matrix"

    def __init__(
        self,
        client: nio.AsyncClient,
        *,
        split_mode: SplitMode = SplitMode.WHITESPACE,
        mentions: MentionSyntax = MATRIX_MENTIONS,
        started_at_ms: int | None = None,
    ) -> None:
        self._client = client
        if started_at_ms is None:
            started_at_ms = int(time.time() * 1000)
        self._started_at_ms = started_at_ms
        self._split_mode = split_mode
        self._mentions = mentions
        self._sequence = 0
        self._send_stream, self._receive_stream = anyio.create_memory_object_stream(
            math.inf
        )
        client.add_event_callback(self._on_message, nio.RoomMessageText)

    @property
    def self_id(self) -> str:
        return self._client.user_id

    @property
    def split_mode(self) -> SplitMode:
        return self._split_mode

    @property
    def mentions(self) -> MentionSyntax:
        return self._mentions

    def resolve_user(self, user_id: str) -> MatrixUser | None:
        for room in self._client.rooms.values():
            user = room.users.get(user_id)
            if user is not None:
                return user
        return None

    def resolve_channel(self, channel_id: str) -> MatrixRoom | None:
        room = self._client.rooms.get(channel_id)
        if room is not None:
            return room
        for candidate in self._client.rooms.values():
            if candidate.canonical_alias == channel_id:
                return candidate
        return None

    async def events(self) -> AsyncIterator[MessageEvent]:
        async for event in self._receive_stream:
            yield event

    async def send_text(
        self, room_id: str, text: str, *, reply_to_event_id: str | None = None
    ) -> None:
        response = await self._client.room_send(
            room_id,
            "m.room.message",
            content=_build_reply_content(text, reply_to_event_id),
            ignore_unverified_devices=True,
        )
        if isinstance(response, nio.RoomSendError):
            logger.warning(
                "matrix.send_failed",
                room_id=room_id,
                error=response.message,
            )

    async def sync_forever(self) -> None:
        await self._client.sync_forever(timeout=SYNC_TIMEOUT_MS, full_state=True)

    async def close(self) -> None:
        self._send_stream.close()
        await self._client.close()

    async def _on_message(
        self, room: MatrixRoom, event: nio.RoomMessageText
    ) -> None:
        sent_at = getattr(event, "server_timestamp", None)
        if sent_at is not None and sent_at < self._started_at_ms:
            logger.debug(
                "matrix.backlog_skipped",
                room_id=room.room_id,
                event_id=event.event_id,
            )
            return
        await self._send_stream.send(self._to_event(room, event))

    def _to_event(
        self, room: MatrixRoom, event: nio.RoomMessageText
    ) -> MessageEvent:
        self._sequence += 1
        return MessageEvent(
            transport=self.transport,
            author_id=event.sender,
            text=event.body,
            is_private=_is_private(room),
            reply=partial(self._reply, room.room_id, event.event_id),
            channel_id=room.room_id,
            author=room.users.get(event.sender),
            channel=room,
            message=event,
            client=self._client,
            sequence=self._sequence,
        )

    async def _reply(self, room_id: str, event_id: str, text: str) -> None:
        await self.send_text(room_id, text, reply_to_event_id=event_id)


def build_client(
    homeserver: str,
    user_id: str,
    access_token: str,
    *,
    device_id: str = "",
    store_path: Path | None = None,
) -> nio.AsyncClient:
    client = nio.AsyncClient(
        homeserver,
        user_id,
        device_id=device_id or None,
        store_path=str(store_path) if store_path is not None else "",
    )
    if device_id:
        client.restore_login(user_id, device_id, access_token)
    else:
        client.access_token = access_token
    return client


async def run_matrix_bot(
    config_path: Path,
    executors: Iterable[Any] = (),
    *,
    include_help: bool = True,
) -> None:
    """Run a dispatcher against a Matrix account until the sync loop stops."""
    data = load_config(config_path)
    settings = parse_dispatch_settings(data)
    matrix = parse_matrix_settings(data)

    client = build_client(
        matrix.homeserver,
        matrix.user_id,
        matrix.access_token,
        device_id=matrix.device_id,
        store_path=matrix.store_path,
    )
    adapter = MatrixAdapter(client, split_mode=matrix.split_mode)
    dispatcher = Dispatcher(adapter, settings=settings)
    for executor in executors:
        dispatcher.register_command(executor)
    if include_help:
        dispatcher.register_command(HelpCommand(dispatcher.registry))

    logger.info(
        "matrix.starting",
        user_id=matrix.user_id,
        commands=len(dispatcher.list_commands()),
        prefix=settings.default_prefix,
    )
    try:
        async with anyio.create_task_group() as tg:
            tg.start_soon(adapter.sync_forever)
            await dispatcher.serve()
    finally:
        await adapter.close()
