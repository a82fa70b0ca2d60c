"""Minimal stand-ins for nio client, room and event objects."""

from __future__ import annotations

import time
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

BOT_USER = "@bot:example.org"


def make_room(
    room_id: str = "!room:example.org",
    *,
    members: tuple[str, ...] = ("@alice:example.org", "@carol:example.org", BOT_USER),
    canonical_alias: str | None = None,
) -> SimpleNamespace:
    return SimpleNamespace(
        room_id=room_id,
        member_count=len(members),
        users={member: SimpleNamespace(user_id=member) for member in members},
        canonical_alias=canonical_alias,
    )


def make_text_event(
    body: str,
    *,
    sender: str = "@alice:example.org",
    event_id: str = "$event:example.org",
    server_timestamp: int | None = None,
) -> SimpleNamespace:
    if server_timestamp is None:
        server_timestamp = int(time.time() * 1000)
    return SimpleNamespace(
        body=body,
        sender=sender,
        event_id=event_id,
        server_timestamp=server_timestamp,
    )


def make_client(*rooms: SimpleNamespace) -> MagicMock:
    client = MagicMock()
    client.user_id = BOT_USER
    client.rooms = {room.room_id: room for room in rooms}
    client.room_send = AsyncMock(return_value=SimpleNamespace())
    client.close = AsyncMock()
    client.sync_forever = AsyncMock()
    return client
