"""Session context and registry tests."""

from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

from support_desk.utils.session_context import (
    SessionContext,
    SessionRegistry,
    customer_cache_key,
)


class TestSessionContext:
    """Key/value behaviour."""

    def test_put_get_remove(self):
        ctx = SessionContext("s1")
        ctx.put("current_customer", "CUST001")
        assert ctx.get("current_customer") == "CUST001"
        assert "current_customer" in ctx
        assert ctx.remove("current_customer") is True
        assert ctx.get("current_customer") is None
        assert ctx.remove("current_customer") is False

    def test_remove_reports_presence_of_falsy_values(self):
        ctx = SessionContext()
        ctx.put("refund_eligible", False)
        assert ctx.remove("refund_eligible") is True

    def test_get_default(self):
        assert SessionContext().get("missing", "fallback") == "fallback"

    def test_snapshot_is_a_copy(self):
        ctx = SessionContext()
        ctx.put("customer:CUST001", {"success": True, "customer": {"name": "John Doe"}})
        snapshot = ctx.snapshot()
        snapshot["customer:CUST001"]["customer"]["name"] = "Mallory"
        assert ctx.get("customer:CUST001")["customer"]["name"] == "John Doe"

    def test_clear(self):
        ctx = SessionContext()
        ctx.put("a", 1)
        ctx.clear()
        assert len(ctx) == 0

    def test_transaction_is_reentrant(self):
        ctx = SessionContext()
        with ctx.transaction():
            ctx.put("refund_eligible", True)
            with ctx.transaction():
                assert ctx.get("refund_eligible") is True

    def test_concurrent_puts(self):
        ctx = SessionContext()
        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda i: ctx.put(f"k{i}", i), range(500)))
        assert len(ctx) == 500

    def test_cache_key(self):
        assert customer_cache_key("CUST001") == "customer:CUST001"


class TestSessionRegistry:
    """LRU and TTL behaviour of the registry."""

    def test_same_id_returns_same_context(self):
        registry = SessionRegistry()
        assert registry.get_or_create("a") is registry.get_or_create("a")
        assert registry.get_or_create("a") is not registry.get_or_create("b")

    def test_eviction_drops_least_recently_used(self):
        registry = SessionRegistry(max_size=2)
        first = registry.get_or_create("a")
        registry.get_or_create("b")
        registry.get_or_create("a")
        registry.get_or_create("c")  # evicts b
        assert registry.stats()["size"] == 2
        assert registry.get_or_create("a") is first

    def test_expired_session_starts_fresh(self):
        registry = SessionRegistry(ttl_seconds=0)
        old = registry.get_or_create("a")
        old.put("refund_eligible", True)
        with patch("support_desk.utils.session_context.datetime") as mock_datetime:
            from datetime import datetime, timedelta, timezone

            mock_datetime.now.return_value = datetime.now(timezone.utc) + timedelta(seconds=5)
            fresh = registry.get_or_create("a")
        assert fresh is not old
        assert fresh.get("refund_eligible") is None

    def test_drop_and_clear(self):
        registry = SessionRegistry()
        registry.get_or_create("a")
        assert registry.drop("a") is True
        assert registry.drop("a") is False
        registry.get_or_create("b")
        registry.clear()
        assert registry.stats()["size"] == 0
