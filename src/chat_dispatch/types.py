"""Normalized inbound message shared by all adapters."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

ReplyFn = Callable[[str], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class MessageEvent:
    """One inbound chat message, as seen by the dispatcher.

    Platform objects (``author``, ``channel``, ``guild``, ``message``,
    ``client``) are opaque; they are only handed to commands that ask for
    them. ``reply`` sends plain text back to the originating channel.
    """

    transport: str
    author_id: str
    text: str
    is_private: bool
    reply: ReplyFn
    channel_id: str | None = None
    author: Any = None
    channel: Any = None
    guild: Any = None
    message: Any = None
    client: Any = None
    sequence: int | None = None
