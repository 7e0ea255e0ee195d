"""
Tenant session stores.

The payment flow needs one thing per shop: an Admin API access token.
Where that token lives is a deployment decision, so the flow depends only
on the SessionStore protocol and the concrete store is chosen with the
SHOP_SESSION_STORE setting.

Available Stores:
    DatabaseSessionStore: ShopSession rows (default)
    CacheSessionStore: Django cache entries with a TTL
    InMemorySessionStore: Process-local dict (tests, local development)

Usage:
    from shops.sessions import ShopSessionData, get_session_store

    store = get_session_store()
    store.store(ShopSessionData(shop="example.myshopify.com", access_token="shpat_xxx"))

    session = store.load("example.myshopify.com")
    if session is None:
        raise NotAuthenticated(...)
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from django.conf import settings
from django.utils.module_loading import import_string

from shops.exceptions import InvalidShopDomain

if TYPE_CHECKING:
    from core.protocols import CacheBackend


logger = logging.getLogger(__name__)

_SHOP_DOMAIN_RE = re.compile(r"^[a-z0-9][a-z0-9.-]*[a-z0-9](:[0-9]{1,5})?$")


def normalize_shop_domain(shop: str | None) -> str:
    """
    Normalize a shop identifier to a bare lower-case host.

    Accepts "Example.myshopify.com", "https://example.myshopify.com/" or a
    custom domain, and returns "example.myshopify.com" style hosts.

    Args:
        shop: Raw shop identifier from a request or payload

    Returns:
        Normalized shop domain

    Raises:
        InvalidShopDomain: If the value is empty or not a host name
    """
    if not shop or not str(shop).strip():
        raise InvalidShopDomain("Missing shop")

    value = str(shop).strip().lower()
    value = re.sub(r"^https?://", "", value)
    value = value.rstrip("/")

    if "." not in value or not _SHOP_DOMAIN_RE.match(value):
        raise InvalidShopDomain("Invalid shop domain", details={"shop": shop})

    return value


@dataclass(frozen=True)
class ShopSessionData:
    """
    Credential bundle for one shop.

    Attributes:
        shop: Normalized shop domain
        access_token: Offline Admin API access token
        scope: Comma separated access scopes
    """

    shop: str
    access_token: str
    scope: str = ""


@runtime_checkable
class SessionStore(Protocol):
    """
    Protocol for tenant session storage.

    Example:
        class RedisSessionStore:
            def load(self, shop): ...
            def store(self, session): ...

        # RedisSessionStore is a valid SessionStore
        # even without explicit inheritance (duck typing)
    """

    def load(self, shop: str) -> ShopSessionData | None:
        """
        Load the session for a shop.

        Args:
            shop: Normalized shop domain

        Returns:
            The stored session, or None if the shop has none
        """
        ...

    def store(self, session: ShopSessionData) -> None:
        """
        Create or replace the session for session.shop.

        Args:
            session: Session to persist
        """
        ...


class DatabaseSessionStore:
    """Session store backed by the ShopSession model."""

    def load(self, shop: str) -> ShopSessionData | None:
        from shops.models import ShopSession

        row = ShopSession.objects.filter(shop=shop).first()
        if row is None:
            return None
        return ShopSessionData(
            shop=row.shop,
            access_token=row.access_token,
            scope=row.scope,
        )

    def store(self, session: ShopSessionData) -> None:
        from shops.models import ShopSession

        ShopSession.objects.update_or_create(
            shop=session.shop,
            defaults={
                "access_token": session.access_token,
                "scope": session.scope,
            },
        )
        logger.info("Stored shop session", extra={"shop": session.shop})


class CacheSessionStore:
    """
    Session store backed by the Django cache.

    Entries expire after SHOP_SESSION_CACHE_TIMEOUT seconds, which bounds
    the number of sessions held at once. Use with Redis in production;
    the local-memory cache is per process.
    """

    key_prefix = "shop_session:"

    def __init__(self, cache: CacheBackend | None = None, timeout: int | None = None):
        if cache is None:
            from django.core.cache import cache as default_cache

            cache = default_cache
        self.cache = cache
        self.timeout = (
            timeout
            if timeout is not None
            else getattr(settings, "SHOP_SESSION_CACHE_TIMEOUT", 86400)
        )

    def _key(self, shop: str) -> str:
        return f"{self.key_prefix}{shop}"

    def load(self, shop: str) -> ShopSessionData | None:
        data = self.cache.get(self._key(shop))
        if not data:
            return None
        return ShopSessionData(**data)

    def store(self, session: ShopSessionData) -> None:
        self.cache.set(self._key(session.shop), asdict(session), timeout=self.timeout)


class InMemorySessionStore:
    """Process-local session store. Sessions are lost on restart."""

    def __init__(self):
        self._sessions: dict[str, ShopSessionData] = {}

    def load(self, shop: str) -> ShopSessionData | None:
        return self._sessions.get(shop)

    def store(self, session: ShopSessionData) -> None:
        self._sessions[session.shop] = session


@lru_cache(maxsize=None)
def _build_store(dotted_path: str) -> SessionStore:
    store_class = import_string(dotted_path)
    store = store_class()
    if not isinstance(store, SessionStore):
        raise TypeError(f"{dotted_path} does not implement SessionStore")
    return store


def get_session_store() -> SessionStore:
    """
    Return the configured session store.

    The instance is shared per SHOP_SESSION_STORE value so that
    InMemorySessionStore keeps its contents between requests.
    """
    return _build_store(settings.SHOP_SESSION_STORE)


def reset_session_store() -> None:
    """Drop cached store instances (settings changes, tests)."""
    _build_store.cache_clear()
