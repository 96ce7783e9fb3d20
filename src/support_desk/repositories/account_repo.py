"""
In-memory account repository.

Accounts are frozen models. Every write runs under a lock owned by that
one account and stores a freshly validated copy, so a read-modify-write
on the balance can never lose a concurrent update, and writes to
different customers never wait on each other.
"""

from datetime import date
from decimal import Decimal
from threading import Lock
from typing import Any, Callable, Dict, List, NamedTuple, Optional

from pydantic import ValidationError as ModelValidationError

from support_desk.models.customer import CustomerAccount
from support_desk.repositories.fixtures import seed_accounts
from support_desk.utils.error_handling import (
    BusinessRuleError,
    InternalServiceError,
    NotFoundError,
)
from support_desk.utils.logging_config import get_logger

logger = get_logger(__name__)

# Fields a settings update may touch; customer_id and balance are never among them.
MUTABLE_FIELDS = frozenset({"name", "email", "tier", "status", "last_payment_date"})


class BalanceChange(NamedTuple):
    previous_balance: Decimal
    new_balance: Decimal


def _not_found(customer_id: str) -> NotFoundError:
    return NotFoundError(f"Customer not found: {customer_id}")


class AccountRepository:
    """Concurrency-safe store of customer accounts keyed by customer ID."""

    def __init__(self, today: Callable[[], date] = date.today, seed: bool = True):
        self._today = today
        self._accounts: Dict[str, CustomerAccount] = {}
        self._locks: Dict[str, Lock] = {}
        self._registry_lock = Lock()
        if seed:
            self.seed()

    def seed(self) -> None:
        """Load the fixture accounts, replacing anything already stored."""
        accounts = seed_accounts(self._today())
        with self._registry_lock:
            self._accounts = {account.customer_id: account for account in accounts}
            self._locks = {account.customer_id: Lock() for account in accounts}
        logger.info("Accounts seeded", extra={"count": len(accounts)})

    def reset(self) -> None:
        self.seed()

    def add(self, account: CustomerAccount) -> None:
        """Insert a new account. Existing IDs are rejected because IDs never change hands."""
        with self._registry_lock:
            if account.customer_id in self._accounts:
                raise BusinessRuleError(f"Customer already exists: {account.customer_id}")
            self._accounts[account.customer_id] = account
            self._locks[account.customer_id] = Lock()

    def get(self, customer_id: str) -> Optional[CustomerAccount]:
        """Return the current account, or None if absent."""
        with self._registry_lock:
            return self._accounts.get(customer_id)

    def list_ids(self) -> List[str]:
        with self._registry_lock:
            return sorted(self._accounts)

    def update_balance(
        self,
        customer_id: str,
        delta: Decimal,
        *,
        payment_date: Optional[date] = None,
    ) -> BalanceChange:
        """
        Atomically add ``delta`` to the balance.

        A negative delta larger than the balance raises BusinessRuleError. ``payment_date`` also moves
        ``last_payment_date`` in the same write.
        """
        with self._account_lock(customer_id):
            account = self._require(customer_id)
            previous = account.balance
            new_balance = previous + delta
            if new_balance < 0:
                raise BusinessRuleError(
                    f"Amount {-delta} exceeds current balance of {previous}"
                )
            changes: Dict[str, Any] = {"balance": new_balance}
            if payment_date is not None:
                changes["last_payment_date"] = payment_date
            updated = self._store(account, changes)
        return BalanceChange(previous_balance=previous, new_balance=updated.balance)

    def update_fields(self, customer_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Apply all ``changes`` in one write and return them as stored."""
        unknown = set(changes) - MUTABLE_FIELDS
        if unknown:
            raise BusinessRuleError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
        with self._account_lock(customer_id):
            account = self._require(customer_id)
            updated = self._store(account, changes)
        return {field: getattr(updated, field) for field in changes}

    def _account_lock(self, customer_id: str) -> Lock:
        with self._registry_lock:
            lock = self._locks.get(customer_id)
        if lock is None:
            raise _not_found(customer_id)
        return lock

    def _require(self, customer_id: str) -> CustomerAccount:
        account = self.get(customer_id)
        if account is None:
            raise _not_found(customer_id)
        if not isinstance(account, CustomerAccount):
            logger.error(
                "Corrupted account entry",
                extra={"customer_id": customer_id, "type": type(account).__name__},
            )
            raise InternalServiceError(f"Corrupted account entry for {customer_id}")
        return account

    def _store(self, account: CustomerAccount, changes: Dict[str, Any]) -> CustomerAccount:
        """Validate the merged record and swap it in. Caller holds the account lock."""
        try:
            updated = CustomerAccount.model_validate({**account.model_dump(), **changes})
        except ModelValidationError as exc:
            raise InternalServiceError(
                f"Rejected write for {account.customer_id}: {exc.error_count()} invalid field(s)"
            ) from exc
        with self._registry_lock:
            self._accounts[account.customer_id] = updated
        return updated
