"""Message tokenization and mention parsing."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..logging import get_logger

logger = get_logger(__name__)

_WHITESPACE_RUN = re.compile(r"[^\S\n]+")
_INTEGER = re.compile(r"[+-]?\d+")


class SplitMode(str, Enum):
    """How an adapter splits message text into tokens.

    ``SPACE`` splits on every single space and keeps the empty tokens that
    repeated spaces produce. ``WHITESPACE`` splits on runs of whitespace,
    newlines excluded.
    """

    SPACE = "space"
    WHITESPACE = "whitespace"


def split_message(text: str, mode: SplitMode = SplitMode.WHITESPACE) -> list[str]:
    """Split message text into tokens; index 0 is the command candidate.

    Trailing empty tokens are dropped, so blank text yields no tokens.
    """
    if mode is SplitMode.SPACE:
        tokens = text.split(" ")
    else:
        tokens = _WHITESPACE_RUN.split(text)
    while tokens and not tokens[-1]:
        tokens.pop()
    return tokens


@dataclass(frozen=True, slots=True)
class MentionSyntax:
    """Regexes recognising in-text user and channel mentions.

    Both patterns must define a named ``id`` group.
    """

    user_pattern: re.Pattern[str]
    channel_pattern: re.Pattern[str]

    def user_id(self, token: str) -> str | None:
        match = self.user_pattern.fullmatch(token)
        return match.group("id") if match else None

    def channel_id(self, token: str) -> str | None:
        match = self.channel_pattern.fullmatch(token)
        return match.group("id") if match else None


DISCORD_MENTIONS = MentionSyntax(
    user_pattern=re.compile(r"<@!?(?P<id>\d+)>"),
    channel_pattern=re.compile(r"<#(?P<id>\d+)>"),
)


def parse_argument(
    token: str,
    *,
    mentions: MentionSyntax,
    resolve_user: Callable[[str], Any],
    resolve_channel: Callable[[str], Any],
) -> Any:
    """Best-effort conversion of one argument token.

    Tries, in order: integer, resolved user mention, resolved channel
    mention. Falls back to the token itself.
    """
    if _INTEGER.fullmatch(token):
        return int(token)
    user_id = mentions.user_id(token)
    if user_id is not None:
        user = _lookup(resolve_user, user_id, kind="user")
        if user is not None:
            return user
    channel_id = mentions.channel_id(token)
    if channel_id is not None:
        channel = _lookup(resolve_channel, channel_id, kind="channel")
        if channel is not None:
            return channel
    return token


def _lookup(resolve: Callable[[str], Any], target_id: str, *, kind: str) -> Any:
    # A failing platform lookup counts as "not found".
    try:
        return resolve(target_id)
    except Exception as exc:
        logger.warning(
            "resolve.lookup_failed", kind=kind, target_id=target_id, error=repr(exc)
        )
        return None
