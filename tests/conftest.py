"""
Shared pytest fixtures.

Every test gets freshly seeded repositories and a service pinned to a
fixed clock, so date-based refund rules do not drift with the calendar.
"""

import os
from datetime import datetime, timezone

import pytest

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from support_desk.repositories.account_repo import AccountRepository  # noqa: E402
from support_desk.repositories.ticket_repo import TicketRepository  # noqa: E402
from support_desk.services.support_service import SupportService  # noqa: E402
from support_desk.utils.id_generator import IdGenerator  # noqa: E402
from support_desk.utils.session_context import SessionContext  # noqa: E402

FIXED_NOW = datetime(2025, 12, 12, 10, 30, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


def fixed_today():
    return FIXED_NOW.date()


@pytest.fixture
def accounts() -> AccountRepository:
    return AccountRepository(today=fixed_today)


@pytest.fixture
def tickets() -> TicketRepository:
    return TicketRepository(today=fixed_today)


@pytest.fixture
def id_generator() -> IdGenerator:
    return IdGenerator(clock=fixed_clock)


@pytest.fixture
def service(accounts, tickets, id_generator) -> SupportService:
    return SupportService(accounts, tickets, id_generator, clock=fixed_clock)


@pytest.fixture
def ctx() -> SessionContext:
    return SessionContext("test-session")
