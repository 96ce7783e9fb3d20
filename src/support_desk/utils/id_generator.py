"""
Human-readable, process-unique identifiers.

Format examples::

    TXN-251212-001000
    REF-251212-001001
    TICKET-251212-001000

Each prefix family has its own counter starting at 1000.
"""

from datetime import datetime, timezone
from threading import Lock
from typing import Callable, Dict

TRANSACTION_PREFIX = "TXN"
TICKET_PREFIX = "TICKET"
REFUND_PREFIX = "REF"

_FIRST_SEQUENCE = 1000


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class IdGenerator:
    """Thread-safe per-prefix sequence generator."""

    def __init__(self, clock: Callable[[], datetime] = _utc_now):
        self._clock = clock
        self._sequences: Dict[str, int] = {}
        self._lock = Lock()

    def next_id(self, prefix: str) -> str:
        """Return the next ID for ``prefix``, e.g. ``TXN-251212-001000``."""
        family = prefix.strip().upper()
        with self._lock:
            sequence = self._sequences.get(family, _FIRST_SEQUENCE)
            self._sequences[family] = sequence + 1
        return f"{family}-{self._clock():%y%m%d}-{sequence:06d}"

    def transaction_id(self) -> str:
        return self.next_id(TRANSACTION_PREFIX)

    def ticket_id(self) -> str:
        return self.next_id(TICKET_PREFIX)

    def refund_id(self) -> str:
        return self.next_id(REFUND_PREFIX)

    def reset(self) -> None:
        """Clear all counters. Used by tests."""
        with self._lock:
            self._sequences.clear()
