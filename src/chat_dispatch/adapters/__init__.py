"""Chat platform adapters.

Platform modules (e.g. ``chat_dispatch.adapters.matrix``) are imported
explicitly so their client libraries load only when used.
"""

from __future__ import annotations

from .base import ChatAdapter

__all__ = ["ChatAdapter"]
