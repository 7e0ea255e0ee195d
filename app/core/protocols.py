"""
Protocol definitions for generic infrastructure services.

Available Protocols:
    CacheBackend: The cache calls the shop session cache store relies on

Usage:
    from core.protocols import CacheBackend

    def load_cached(cache: CacheBackend, key: str):
        return cache.get(key)

Note:
    Django's cache (django.core.cache.cache) satisfies CacheBackend.
    For the tenant session store protocol, see shops.sessions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from typing import Any


class CacheBackend(Protocol):
    """Minimal cache interface: get and set with a timeout."""

    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any, timeout: int | None = None) -> None: ...
