"""Pydantic models for accounts and tickets."""

from support_desk.models.customer import AccountStatus, AccountTier, CustomerAccount  # noqa: F401
from support_desk.models.response import success  # noqa: F401
from support_desk.models.ticket import SupportTicket, TicketPriority, TicketStatus  # noqa: F401
