"""The small surface a chat platform must provide to the dispatcher."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any, Protocol

from ..commands.parse import MentionSyntax, SplitMode
from ..types import MessageEvent


class ChatAdapter(Protocol):
    @property
    def transport(self) -> str: ...

    @property
    def self_id(self) -> str:
        """Id of the bot's own account on the platform."""
        ...

    @property
    def split_mode(self) -> SplitMode: ...

    @property
    def mentions(self) -> MentionSyntax: ...

    def resolve_user(self, user_id: str) -> Any | None: ...

    def resolve_channel(self, channel_id: str) -> Any | None: ...

    def events(self) -> AsyncIterator[MessageEvent]: ...
