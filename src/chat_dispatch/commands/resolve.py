"""Binding of declared parameter kinds to values from a message."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from ..logging import get_logger
from ..types import MessageEvent
from .model import ParamKind
from .parse import DISCORD_MENTIONS, MentionSyntax, parse_argument

logger = get_logger(__name__)

_CONTEXT_FIELDS: dict[ParamKind, str] = {
    ParamKind.MESSAGE: "message",
    ParamKind.CLIENT: "client",
    ParamKind.CHANNEL: "channel",
    ParamKind.AUTHOR: "author",
    ParamKind.GUILD: "guild",
    ParamKind.SEQUENCE: "sequence",
}


def _unresolved(_: str) -> None:
    return None


def _as_kind(value: Any) -> ParamKind | None:
    if isinstance(value, ParamKind):
        return value
    if isinstance(value, str):
        try:
            return ParamKind(value.lower())
        except ValueError:
            return None
    return None


class ParameterResolver:
    """Turns a parameter-kind sequence into positional arguments.

    Resolution never fails: anything unavailable becomes ``None``.
    """

    def __init__(
        self,
        *,
        mentions: MentionSyntax = DISCORD_MENTIONS,
        resolve_user: Callable[[str], Any] = _unresolved,
        resolve_channel: Callable[[str], Any] = _unresolved,
    ) -> None:
        self._mentions = mentions
        self._resolve_user = resolve_user
        self._resolve_channel = resolve_channel

    def resolve(
        self,
        kinds: Sequence[Any],
        tokens: Sequence[str],
        event: MessageEvent,
    ) -> list[Any]:
        """Resolve ``kinds`` against ``tokens`` (index 0 is the matched alias)."""
        args = list(tokens[1:])
        values: list[Any] = []
        token_count = 0
        for declared in kinds:
            kind = _as_kind(declared)
            if kind is ParamKind.TOKEN:
                values.append(self._token_value(tokens, token_count))
                token_count += 1
            elif kind is ParamKind.ARGS:
                values.append(list(args))
            elif kind is ParamKind.PARSED_ARGS:
                values.append([self.parse(arg) for arg in args])
            elif kind is ParamKind.EVENT:
                values.append(event)
            elif kind in _CONTEXT_FIELDS:
                values.append(getattr(event, _CONTEXT_FIELDS[kind], None))
            else:
                logger.debug("resolve.unsupported_kind", kind=repr(declared))
                values.append(None)
        return values

    def parse(self, token: str) -> Any:
        return parse_argument(
            token,
            mentions=self._mentions,
            resolve_user=self._resolve_user,
            resolve_channel=self._resolve_channel,
        )

    @staticmethod
    def _token_value(tokens: Sequence[str], index: int) -> str | None:
        # The first TOKEN parameter gets the alias, later ones get arguments.
        if index < len(tokens):
            return tokens[index]
        return None
