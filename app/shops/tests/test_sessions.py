"""
Tests for shop session stores.

Tests cover:
- Shop domain normalization
- Database, cache and in-memory stores
- Store selection through SHOP_SESSION_STORE
"""

import pytest
from django.core.cache import caches

from shops.exceptions import InvalidShopDomain
from shops.models import ShopSession
from shops.sessions import (
    CacheSessionStore,
    DatabaseSessionStore,
    InMemorySessionStore,
    SessionStore,
    ShopSessionData,
    get_session_store,
    normalize_shop_domain,
    reset_session_store,
)
from shops.tests.factories import ShopSessionFactory


# =============================================================================
# normalize_shop_domain Tests
# =============================================================================


class TestNormalizeShopDomain:
    """Tests for normalize_shop_domain."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("example.myshopify.com", "example.myshopify.com"),
            ("Example.MyShopify.com", "example.myshopify.com"),
            ("https://example.myshopify.com/", "example.myshopify.com"),
            ("  http://shop.example.org  ", "shop.example.org"),
            ("localhost.test:8443", "localhost.test:8443"),
        ],
    )
    def test_normalizes_valid_domains(self, raw, expected):
        """Should lower-case and strip scheme and trailing slash."""
        assert normalize_shop_domain(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_missing_shop(self, raw):
        """Should reject empty values."""
        with pytest.raises(InvalidShopDomain, match="Missing shop"):
            normalize_shop_domain(raw)

    @pytest.mark.parametrize(
        "raw",
        [
            "example",
            "example.myshopify.com/admin",
            "exa mple.myshopify.com",
            "-example.myshopify.com",
            "example.myshopify.com?x=1",
        ],
    )
    def test_invalid_shop(self, raw):
        """Should reject values that are not a bare host."""
        with pytest.raises(InvalidShopDomain, match="Invalid shop domain"):
            normalize_shop_domain(raw)

    def test_invalid_shop_is_validation_error(self):
        """Should be catchable as a core ValidationError."""
        from core.exceptions import ValidationError

        with pytest.raises(ValidationError):
            normalize_shop_domain("not a shop")


# =============================================================================
# Store Implementations
# =============================================================================


class TestInMemorySessionStore:
    """Tests for InMemorySessionStore."""

    def test_load_missing(self):
        """Should return None for unknown shops."""
        assert InMemorySessionStore().load("example.myshopify.com") is None

    def test_store_and_replace(self):
        """Should keep the latest session per shop."""
        store = InMemorySessionStore()
        store.store(ShopSessionData("example.myshopify.com", "shpat_old"))
        store.store(ShopSessionData("example.myshopify.com", "shpat_new"))

        assert store.load("example.myshopify.com").access_token == "shpat_new"

    def test_instances_are_isolated(self):
        """Should not share sessions between instances."""
        first = InMemorySessionStore()
        first.store(ShopSessionData("example.myshopify.com", "shpat_x"))

        assert InMemorySessionStore().load("example.myshopify.com") is None


@pytest.mark.django_db
class TestDatabaseSessionStore:
    """Tests for DatabaseSessionStore."""

    def test_load_existing_row(self):
        """Should build ShopSessionData from the model."""
        row = ShopSessionFactory(shop="example.myshopify.com", access_token="shpat_db")

        session = DatabaseSessionStore().load("example.myshopify.com")

        assert session == ShopSessionData(
            shop="example.myshopify.com",
            access_token="shpat_db",
            scope=row.scope,
        )

    def test_load_missing(self):
        """Should return None when no row exists."""
        assert DatabaseSessionStore().load("missing.myshopify.com") is None

    def test_store_creates_then_updates(self):
        """Should upsert on shop."""
        store = DatabaseSessionStore()
        store.store(ShopSessionData("example.myshopify.com", "shpat_1", "read_orders"))
        store.store(ShopSessionData("example.myshopify.com", "shpat_2", "write_orders"))

        rows = ShopSession.objects.filter(shop="example.myshopify.com")
        assert rows.count() == 1
        assert rows.get().access_token == "shpat_2"
        assert rows.get().scope == "write_orders"


class TestCacheSessionStore:
    """Tests for CacheSessionStore."""

    @pytest.fixture
    def cache(self):
        cache = caches["default"]
        cache.clear()
        yield cache
        cache.clear()

    def test_round_trip(self, cache):
        """Should store under a prefixed key and load it back."""
        store = CacheSessionStore(cache=cache, timeout=60)
        session = ShopSessionData("example.myshopify.com", "shpat_cache", "write_orders")

        store.store(session)

        assert cache.get("shop_session:example.myshopify.com") == {
            "shop": "example.myshopify.com",
            "access_token": "shpat_cache",
            "scope": "write_orders",
        }
        assert store.load("example.myshopify.com") == session

    def test_load_missing(self, cache):
        """Should return None on a cache miss."""
        assert CacheSessionStore(cache=cache).load("example.myshopify.com") is None

    def test_default_timeout_from_settings(self, settings):
        """Should read SHOP_SESSION_CACHE_TIMEOUT when no timeout is given."""
        settings.SHOP_SESSION_CACHE_TIMEOUT = 1234

        assert CacheSessionStore().timeout == 1234


# =============================================================================
# get_session_store Tests
# =============================================================================


class TestGetSessionStore:
    """Tests for store selection."""

    def test_uses_configured_class(self, settings):
        """Should build the class named by SHOP_SESSION_STORE."""
        settings.SHOP_SESSION_STORE = "shops.sessions.CacheSessionStore"

        assert isinstance(get_session_store(), CacheSessionStore)

    def test_instance_is_shared(self):
        """Should return the same instance until the setting changes."""
        store = get_session_store()
        store.store(ShopSessionData("example.myshopify.com", "shpat_shared"))

        assert get_session_store() is store
        assert get_session_store().load("example.myshopify.com").access_token == "shpat_shared"

    def test_setting_change_resets_store(self, settings):
        """Should drop the cached instance when SHOP_SESSION_STORE changes."""
        first = get_session_store()

        settings.SHOP_SESSION_STORE = "shops.sessions.InMemorySessionStore"

        assert get_session_store() is not first

    def test_rejects_non_store(self, settings):
        """Should raise TypeError for classes without load/store."""
        settings.SHOP_SESSION_STORE = "collections.OrderedDict"
        reset_session_store()

        with pytest.raises(TypeError):
            get_session_store()

    def test_implementations_satisfy_protocol(self):
        """Should treat every bundled store as a SessionStore."""
        for store in (InMemorySessionStore(), DatabaseSessionStore(), CacheSessionStore()):
            assert isinstance(store, SessionStore)
