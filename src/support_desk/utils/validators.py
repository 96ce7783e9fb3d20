"""
Input normalization for the support operations.

Every helper either returns the canonical form of its input or raises
ValidationError with a caller-facing message. Priority is the exception:
unknown values quietly fall back to MEDIUM.
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

from support_desk.models.customer import AccountTier
from support_desk.models.ticket import TicketPriority
from support_desk.utils.error_handling import TransactionLimitError, ValidationError

CUSTOMER_ID_PATTERN = re.compile(r"CUST\d{3,}", re.ASCII)
EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
MAX_TRANSACTION_AMOUNT = Decimal("100000.00")
CENT = Decimal("0.01")


def ensure_present(value: Any, field: str) -> str:
    """Return the trimmed text, or raise ValidationError if it is blank."""
    cleaned = "" if value is None else str(value).strip()
    if not cleaned:
        raise ValidationError(f"{field} is required")
    return cleaned


def to_cents(value: Decimal) -> Decimal:
    """Round half-up to two decimal places."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def validate_customer_id(raw: Optional[str]) -> str:
    """Normalize a customer ID to upper case, e.g. ``cust001`` -> ``CUST001``."""
    if raw is None or not str(raw).strip():
        raise ValidationError("Customer ID is required")
    customer_id = str(raw).strip().upper()
    if not CUSTOMER_ID_PATTERN.fullmatch(customer_id):
        raise ValidationError(
            "Invalid customer ID format. Must be CUST followed by at least "
            "three digits (e.g., CUST001)"
        )
    return customer_id


def validate_amount(raw: Any) -> Decimal:
    """
    Parse a monetary amount from a number or numeric string.

    Bounds are checked before rounding so huge exponents never reach
    ``quantize``; the rounded value is checked again, so ``0.001`` is
    rejected and ``99.999`` becomes ``100.00``.
    """
    if raw is None:
        raise ValidationError("Amount is required")
    if isinstance(raw, bool):
        raise ValidationError("Amount must be a number")

    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            raise ValidationError("Amount is required")
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise ValidationError(f"Invalid amount format: {raw}") from None
    elif isinstance(raw, Decimal):
        amount = raw
    elif isinstance(raw, (int, float)):
        # str() keeps the shortest repr, so 99.999 parses as written.
        amount = Decimal(str(raw))
    else:
        raise ValidationError("Amount must be a number")

    if not amount.is_finite():
        raise ValidationError(f"Invalid amount format: {raw}")

    if amount <= 0:
        raise ValidationError("Amount must be greater than zero")
    if amount > MAX_TRANSACTION_AMOUNT:
        raise TransactionLimitError(
            f"Amount exceeds maximum limit of {MAX_TRANSACTION_AMOUNT} per transaction"
        )

    amount = to_cents(amount)
    if amount <= 0:
        raise ValidationError("Amount must be greater than zero")
    return amount


def validate_email(raw: Optional[str]) -> str:
    """Return the trimmed email if it looks like ``local@domain.tld``."""
    if raw is None or not str(raw).strip():
        raise ValidationError("Email cannot be empty")
    email = str(raw).strip()
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Invalid email format")
    return email


def validate_tier(raw: Optional[str]) -> AccountTier:
    """Match a tier case-insensitively and return its canonical member."""
    if raw is None or not str(raw).strip():
        raise ValidationError("Account tier cannot be empty")
    wanted = str(raw).strip().lower()
    for tier in AccountTier:
        if tier.value.lower() == wanted:
            return tier
    raise ValidationError("Invalid tier. Must be one of: Basic, Premium, or Enterprise")


def validate_priority(raw: Optional[str]) -> TicketPriority:
    """Never fails: blank or unknown input maps to MEDIUM."""
    if raw is None or not str(raw).strip():
        return TicketPriority.MEDIUM
    try:
        return TicketPriority(str(raw).strip().upper())
    except ValueError:
        return TicketPriority.MEDIUM
