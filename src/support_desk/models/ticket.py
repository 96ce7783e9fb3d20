"""Support ticket models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator


class TicketPriority(str, Enum):
    """Ticket urgency."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class TicketStatus(str, Enum):
    """Ticket lifecycle states."""

    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"


class SupportTicket(BaseModel):
    """A support ticket raised for one customer."""

    model_config = ConfigDict(frozen=True, use_enum_values=True, validate_default=True)

    ticket_id: str
    customer_id: str
    subject: str
    description: str
    priority: TicketPriority = TicketPriority.MEDIUM
    status: TicketStatus = TicketStatus.OPEN
    created_at: datetime

    @field_validator("subject", "description")
    @classmethod
    def validate_required(cls, value: str) -> str:
        """Reject blank text once trimmed."""
        cleaned = (value or "").strip()
        if not cleaned:
            raise ValueError("subject and description must be provided")
        return cleaned
