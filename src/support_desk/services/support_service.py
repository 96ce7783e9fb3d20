"""
Support Service.

The seven operations an assistant can invoke on behalf of a customer:
account lookup, payment, ticket creation and listing, settings update,
and the two-step refund workflow. Every operation takes the caller's
SessionContext explicitly and returns ``{"success": ...}``; no exception
escapes to the caller.

Refund workflow per session::

    Unvalidated --validate_refund_eligibility--> ValidatedEligible | ValidatedIneligible
    ValidatedEligible --process_refund (same customer)--> Unvalidated
"""

from __future__ import annotations

from copy import deepcopy
from datetime import date, datetime, timezone
from functools import wraps
from typing import Any, Callable, Dict, Optional

from support_desk.config.settings import Settings
from support_desk.models.customer import AccountStatus, CustomerAccount
from support_desk.models.response import success
from support_desk.models.ticket import SupportTicket, TicketStatus
from support_desk.repositories.account_repo import AccountRepository
from support_desk.repositories.ticket_repo import TicketRepository
from support_desk.utils.error_handling import (
    AppError,
    InternalServiceError,
    NotFoundError,
    ValidationError,
    WorkflowStateError,
    to_failure,
)
from support_desk.utils.id_generator import IdGenerator
from support_desk.utils.logging_config import get_logger
from support_desk.utils.session_context import (
    CURRENT_CUSTOMER,
    LAST_PAYMENT_AMOUNT,
    LAST_REFUND_ID,
    LAST_TRANSACTION_ID,
    REFUND_AMOUNT,
    REFUND_CUSTOMER,
    REFUND_ELIGIBLE,
    SessionContext,
    customer_cache_key,
)
from support_desk.utils.validators import (
    ensure_present,
    validate_amount,
    validate_customer_id,
    validate_email,
    validate_priority,
    validate_tier,
)

logger = get_logger(__name__)

Result = Dict[str, Any]

REFUND_NOT_VALIDATED = "Refund validation must be completed first"
REFUND_MESSAGE = "Refund processed successfully. Funds will appear in 5-7 business days."


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _operation(func: Callable[..., Result]) -> Callable[..., Result]:
    """Turn raised errors into failure results."""
    name = func.__name__

    @wraps(func)
    def wrapper(self: "SupportService", *args: Any, **kwargs: Any) -> Result:
        try:
            return func(self, *args, **kwargs)
        except InternalServiceError:
            logger.exception("Operation failed", extra={"operation": name})
            return _internal_failure(name)
        except AppError as exc:
            logger.info(
                "Operation rejected",
                extra={"operation": name, "error_type": type(exc).__name__, "error": str(exc)},
            )
            return to_failure(exc)
        except Exception:
            logger.exception("Unexpected error", extra={"operation": name})
            return _internal_failure(name)

    return wrapper


def _internal_failure(operation: str) -> Result:
    return to_failure(
        InternalServiceError(f"An internal error occurred while processing {operation}")
    )


class SupportService:
    """Orchestrates validation, the repositories and the session context."""

    def __init__(
        self,
        accounts: AccountRepository,
        tickets: TicketRepository,
        id_generator: Optional[IdGenerator] = None,
        *,
        refund_window_days: int = 30,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.accounts = accounts
        self.tickets = tickets
        self.id_generator = id_generator or IdGenerator(clock=clock)
        self.refund_window_days = refund_window_days
        self._clock = clock

    @classmethod
    def from_settings(
        cls, settings: Settings, clock: Callable[[], datetime] = _utc_now
    ) -> "SupportService":
        """Build the service and its repositories from settings."""

        def today() -> date:
            return clock().date()

        return cls(
            AccountRepository(today=today, seed=settings.seed_fixtures),
            TicketRepository(today=today, seed=settings.seed_fixtures),
            IdGenerator(clock=clock),
            refund_window_days=settings.refund_window_days,
            clock=clock,
        )

    def reset(self) -> None:
        """Restore fixture data and ID counters."""
        self.accounts.reset()
        self.tickets.reset()
        self.id_generator.reset()

    # ------------------------------------------------------------------ accounts

    @_operation
    def get_customer_account(self, customer_id: Optional[str], *, ctx: SessionContext) -> Result:
        """Look up an account, serving repeat lookups from the session cache."""
        customer_id = validate_customer_id(customer_id)
        cache_key = customer_cache_key(customer_id)

        cached = ctx.get(cache_key)
        if cached is not None:
            logger.info("Customer cache hit", extra={"customer_id": customer_id})
            ctx.put(CURRENT_CUSTOMER, customer_id)
            return deepcopy(cached)

        account = self._require_account(customer_id)
        result = success(customer=account.model_dump())
        ctx.put(cache_key, deepcopy(result))
        ctx.put(CURRENT_CUSTOMER, customer_id)
        logger.info(
            "Customer account served",
            extra={"customer_id": customer_id, "tier": account.tier},
        )
        return result

    @_operation
    def process_payment(self, customer_id: Optional[str], amount: Any, *, ctx: SessionContext) -> Result:
        """Credit a payment to the balance and stamp the payment date."""
        customer_id = validate_customer_id(customer_id)
        amount = validate_amount(amount)

        change = self.accounts.update_balance(
            customer_id, amount, payment_date=self._today()
        )
        transaction_id = self.id_generator.transaction_id()

        ctx.put(LAST_TRANSACTION_ID, transaction_id)
        ctx.put(LAST_PAYMENT_AMOUNT, amount)
        self._invalidate_cache(ctx, customer_id)

        logger.info(
            "Payment processed",
            extra={
                "customer_id": customer_id,
                "transaction_id": transaction_id,
                "amount": str(amount),
            },
        )
        return success(
            transaction_id=transaction_id,
            amount=amount,
            previous_balance=change.previous_balance,
            new_balance=change.new_balance,
        )

    @_operation
    def update_account_settings(
        self,
        customer_id: Optional[str],
        email: Optional[str] = None,
        tier: Optional[str] = None,
        *,
        ctx: SessionContext,
    ) -> Result:
        """Change email and/or tier; all requested fields apply or none do."""
        customer_id = validate_customer_id(customer_id)
        self._require_account(customer_id)

        wants_email = email is not None and bool(str(email).strip())
        wants_tier = tier is not None and bool(str(tier).strip())
        if not (wants_email or wants_tier):
            raise ValidationError("No valid updates provided. Specify email or tier.")

        changes: Dict[str, Any] = {}
        if wants_email:
            changes["email"] = validate_email(str(email))
        if wants_tier:
            changes["tier"] = validate_tier(str(tier)).value

        applied = self.accounts.update_fields(customer_id, changes)
        self._invalidate_cache(ctx, customer_id)
        logger.info(
            "Account settings updated",
            extra={"customer_id": customer_id, "fields": sorted(applied)},
        )
        return success(updates=applied)

    # ------------------------------------------------------------------ tickets

    @_operation
    def create_ticket(
        self,
        customer_id: Optional[str],
        subject: Optional[str],
        description: Optional[str],
        priority: Optional[str] = None,
        *,
        ctx: SessionContext,
    ) -> Result:
        """Open a ticket; unknown priorities fall back to MEDIUM."""
        customer_id = validate_customer_id(customer_id)
        subject = ensure_present(subject, "Subject")
        description = ensure_present(description, "Description")
        self._require_account(customer_id)

        ticket = SupportTicket(
            ticket_id=self.id_generator.ticket_id(),
            customer_id=customer_id,
            subject=subject,
            description=description,
            priority=validate_priority(priority),
            status=TicketStatus.OPEN,
            created_at=self._clock(),
        )
        self.tickets.append(ticket)
        logger.info(
            "Ticket created",
            extra={
                "customer_id": customer_id,
                "ticket_id": ticket.ticket_id,
                "priority": ticket.priority,
            },
        )
        return success(ticket=ticket.model_dump())

    @_operation
    def get_tickets(
        self, customer_id: Optional[str], status: Optional[str] = None, *, ctx: SessionContext
    ) -> Result:
        """List a customer's tickets in creation order, optionally by status."""
        customer_id = validate_customer_id(customer_id)
        self._require_account(customer_id)

        tickets = self.tickets.list_by_customer(customer_id, status)
        return success(
            count=len(tickets),
            tickets=[ticket.model_dump() for ticket in tickets],
        )

    # ------------------------------------------------------------------ refunds

    @_operation
    def validate_refund_eligibility(self, customer_id: Optional[str], *, ctx: SessionContext) -> Result:
        """
        Refund step one.

        Eligible means the account is Active and the last payment falls
        within the refund window. The verdict is written to the session
        whatever it is, so step two can reject without re-deriving it.
        """
        customer_id = validate_customer_id(customer_id)

        account = self.accounts.get(customer_id)
        if account is None:
            self._record_eligibility(ctx, customer_id, False)
            raise NotFoundError(f"Customer not found: {customer_id}")

        days_since_payment = (self._today() - account.last_payment_date).days
        reasons = []
        if account.status != AccountStatus.ACTIVE:
            reasons.append(
                f"Account status is {account.status}; only Active accounts can be refunded"
            )
        if days_since_payment > self.refund_window_days:
            reasons.append(
                f"Last payment was {days_since_payment} days ago, outside the "
                f"{self.refund_window_days} days refund window"
            )
        eligible = not reasons

        self._record_eligibility(ctx, customer_id, eligible)
        logger.info(
            "Refund eligibility checked",
            extra={"customer_id": customer_id, "eligible": eligible},
        )
        return success(
            eligible=eligible,
            reasons=reasons,
            tier=account.tier,
            days_since_last_payment=days_since_payment,
        )

    @_operation
    def process_refund(self, customer_id: Optional[str], amount: Any, *, ctx: SessionContext) -> Result:
        """
        Refund step two.

        Only runs after an eligible verdict for the same customer in this
        session, and consumes that verdict on success.
        """
        with ctx.transaction():
            if ctx.get(REFUND_ELIGIBLE) is not True or ctx.get(REFUND_CUSTOMER) != _canonical(customer_id):
                raise WorkflowStateError(REFUND_NOT_VALIDATED)

            customer_id = validate_customer_id(customer_id)
            amount = validate_amount(amount)

            change = self.accounts.update_balance(customer_id, -amount)
            refund_id = self.id_generator.refund_id()

            ctx.remove(REFUND_ELIGIBLE)
            ctx.remove(REFUND_CUSTOMER)
            ctx.put(LAST_REFUND_ID, refund_id)
            ctx.put(REFUND_AMOUNT, amount)
            self._invalidate_cache(ctx, customer_id)

        logger.info(
            "Refund processed",
            extra={"customer_id": customer_id, "refund_id": refund_id, "amount": str(amount)},
        )
        return success(
            refund_id=refund_id,
            amount=amount,
            previous_balance=change.previous_balance,
            new_balance=change.new_balance,
            message=REFUND_MESSAGE,
        )

    # ------------------------------------------------------------------ helpers

    def _today(self) -> date:
        return self._clock().date()

    def _require_account(self, customer_id: str) -> CustomerAccount:
        account = self.accounts.get(customer_id)
        if account is None:
            raise NotFoundError(f"Customer not found: {customer_id}")
        return account

    @staticmethod
    def _record_eligibility(ctx: SessionContext, customer_id: str, eligible: bool) -> None:
        with ctx.transaction():
            ctx.put(REFUND_ELIGIBLE, eligible)
            ctx.put(REFUND_CUSTOMER, customer_id)

    @staticmethod
    def _invalidate_cache(ctx: SessionContext, customer_id: str) -> None:
        if ctx.remove(customer_cache_key(customer_id)):
            logger.info("Customer cache invalidated", extra={"customer_id": customer_id})


def _canonical(customer_id: Any) -> Optional[str]:
    """Trim and upper-case without validating, for comparing against the session."""
    if customer_id is None:
        return None
    return str(customer_id).strip().upper()
