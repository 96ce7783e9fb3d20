"""Customer account models."""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AccountTier(str, Enum):
    """Service level of an account."""

    BASIC = "Basic"
    PREMIUM = "Premium"
    ENTERPRISE = "Enterprise"


class AccountStatus(str, Enum):
    """Whether the account is in good standing."""

    ACTIVE = "Active"
    INACTIVE = "Inactive"


class CustomerAccount(BaseModel):
    """
    One customer account.

    Instances are frozen; the repository swaps in a new copy on every
    change, so a reference handed to a caller never sees later writes.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True, validate_default=True)

    customer_id: str = Field(pattern=r"^CUST[0-9]{3,}$")
    name: str
    email: str
    balance: Decimal
    tier: AccountTier
    status: AccountStatus = AccountStatus.ACTIVE
    last_payment_date: date

    @field_validator("balance")
    @classmethod
    def round_to_cent(cls, value: Decimal) -> Decimal:
        """Balances are always held to the cent."""
        return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
