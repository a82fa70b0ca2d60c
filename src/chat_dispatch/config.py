"""TOML configuration for the dispatcher and the Matrix adapter.

Example::

    [dispatch]
    default_prefix = "!"
    missing_permissions_message = false   # disable the denial reply

    [dispatch.permissions]
    "@alice:example.org" = ["admin.*"]

    [transports.matrix]
    homeserver = "https://matrix.example.org"
    user_id = "@bot:example.org"
    access_token = "..."                  # or env MATRIX_ACCESS_TOKEN
    split_mode = "whitespace"
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .commands.parse import SplitMode
from .errors import ConfigError

DEFAULT_MISSING_PERMISSIONS = "You are not allowed to use this command!"


@dataclass(frozen=True, slots=True)
class DispatchSettings:
    default_prefix: str = ""
    missing_permissions_message: str | None = DEFAULT_MISSING_PERMISSIONS
    permissions: Mapping[str, tuple[str, ...]] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class MatrixSettings:
    homeserver: str
    user_id: str
    access_token: str
    device_id: str = ""
    split_mode: SplitMode = SplitMode.WHITESPACE
    store_path: Path | None = None


def expand_path(s: str) -> Path:
    return Path(os.path.expandvars(os.path.expanduser(s)))


def _env(name: str) -> str:
    return (os.environ.get(name) or "").strip()


def load_config(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config at {path}: {exc}") from exc
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    return data


def _table(data: Mapping[str, Any], *keys: str) -> dict[str, Any]:
    cur: Any = data
    for key in keys:
        if not isinstance(cur, Mapping):
            raise ConfigError(f"{'.'.join(keys)} must be a table")
        cur = cur.get(key, {})
    if not isinstance(cur, Mapping):
        raise ConfigError(f"{'.'.join(keys)} must be a table")
    return dict(cur)


def parse_dispatch_settings(data: Mapping[str, Any]) -> DispatchSettings:
    section = _table(data, "dispatch")

    prefix = section.get("default_prefix", "")
    if not isinstance(prefix, str):
        raise ConfigError("dispatch.default_prefix must be a string")

    message = section.get("missing_permissions_message", DEFAULT_MISSING_PERMISSIONS)
    if message is False:
        message = None
    elif not isinstance(message, str):
        raise ConfigError(
            "dispatch.missing_permissions_message must be a string or false"
        )

    permissions: dict[str, tuple[str, ...]] = {}
    for user_id, granted in _table(data, "dispatch", "permissions").items():
        if isinstance(granted, str):
            granted = [granted]
        if not isinstance(granted, list) or not all(
            isinstance(item, str) for item in granted
        ):
            raise ConfigError(
                f"dispatch.permissions.{user_id} must be a list of strings"
            )
        permissions[str(user_id)] = tuple(granted)

    return DispatchSettings(
        default_prefix=prefix,
        missing_permissions_message=message,
        permissions=permissions,
    )


def parse_matrix_settings(data: Mapping[str, Any]) -> MatrixSettings:
    section = _table(data, "transports", "matrix")

    homeserver = str(section.get("homeserver") or "").strip().rstrip("/")
    user_id = str(section.get("user_id") or "").strip()
    access_token = _env("MATRIX_ACCESS_TOKEN") or str(
        section.get("access_token") or ""
    ).strip()
    device_id = _env("MATRIX_DEVICE_ID") or str(section.get("device_id") or "").strip()

    if not homeserver:
        raise ConfigError("Missing transports.matrix.homeserver")
    if not user_id:
        raise ConfigError("Missing transports.matrix.user_id")
    if not access_token:
        raise ConfigError(
            "Missing transports.matrix.access_token (or env MATRIX_ACCESS_TOKEN)"
        )

    raw_mode = str(section.get("split_mode") or SplitMode.WHITESPACE.value)
    try:
        split_mode = SplitMode(raw_mode.strip().lower())
    except ValueError:
        raise ConfigError(
            f"transports.matrix.split_mode must be 'space' or 'whitespace', got {raw_mode!r}"
        ) from None

    store_path = None
    raw_store = section.get("store_path")
    if isinstance(raw_store, str) and raw_store.strip():
        store_path = expand_path(raw_store.strip())

    return MatrixSettings(
        homeserver=homeserver,
        user_id=user_id,
        access_token=access_token,
        device_id=device_id,
        split_mode=split_mode,
        store_path=store_path,
    )


def load_dispatch_settings(path: Path) -> DispatchSettings:
    return parse_dispatch_settings(load_config(path))
