"""
Per-conversation session state.

A SessionContext is both the read-through cache for account lookups and
the channel that carries refund approval from the validation step to the
processing step. SessionRegistry keeps one context per session ID in a
bounded LRU map with TTL, so idle conversations expire on their own.
"""

from collections import OrderedDict
from contextlib import contextmanager
from copy import deepcopy
from datetime import datetime, timedelta, timezone
from threading import Lock, RLock
from typing import Any, Dict, Iterator, Optional

CUSTOMER_CACHE_PREFIX = "customer:"
CURRENT_CUSTOMER = "current_customer"
REFUND_ELIGIBLE = "refund_eligible"
REFUND_CUSTOMER = "refund_customer"
LAST_TRANSACTION_ID = "last_transaction_id"
LAST_PAYMENT_AMOUNT = "last_payment_amount"
LAST_REFUND_ID = "last_refund_id"
REFUND_AMOUNT = "refund_amount"


_MISSING = object()


def customer_cache_key(customer_id: str) -> str:
    return f"{CUSTOMER_CACHE_PREFIX}{customer_id}"


class SessionContext:
    """Thread-safe key/value store scoped to one conversation."""

    def __init__(self, session_id: Optional[str] = None):
        self.session_id = session_id
        self._state: Dict[str, Any] = {}
        self._lock = RLock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._state.get(key, default)

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            self._state[key] = value

    def remove(self, key: str) -> bool:
        """Delete key; return whether it was present."""
        with self._lock:
            return self._state.pop(key, _MISSING) is not _MISSING

    def clear(self) -> None:
        with self._lock:
            self._state.clear()

    def snapshot(self) -> Dict[str, Any]:
        """Deep copy of the current state."""
        with self._lock:
            return deepcopy(self._state)

    @contextmanager
    def transaction(self) -> Iterator["SessionContext"]:
        """Hold the context lock across several get/put/remove calls."""
        with self._lock:
            yield self

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._state

    def __len__(self) -> int:
        with self._lock:
            return len(self._state)


class SessionRegistry:
    """Thread-safe LRU of SessionContext objects with idle TTL."""

    def __init__(self, max_size: int = 1000, ttl_seconds: int = 1800):
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._sessions: "OrderedDict[str, tuple[SessionContext, datetime]]" = OrderedDict()
        self._lock = Lock()

    def get_or_create(self, session_id: str) -> SessionContext:
        """Return the live context for session_id, creating one if needed."""
        now = datetime.now(timezone.utc)
        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is not None:
                context, touched = entry
                if now - touched <= timedelta(seconds=self.ttl_seconds):
                    self._sessions[session_id] = (context, now)
                    self._sessions.move_to_end(session_id)
                    return context
                del self._sessions[session_id]

            context = SessionContext(session_id)
            self._sessions[session_id] = (context, now)
            while len(self._sessions) > self.max_size:
                self._sessions.popitem(last=False)
            return context

    def drop(self, session_id: str) -> bool:
        """Forget a session."""
        with self._lock:
            if session_id in self._sessions:
                del self._sessions[session_id]
                return True
            return False

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def stats(self) -> dict:
        """Return registry statistics."""
        with self._lock:
            return {
                "size": len(self._sessions),
                "max_size": self.max_size,
                "ttl_seconds": self.ttl_seconds,
            }
