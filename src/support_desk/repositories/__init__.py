"""In-memory repositories for accounts and tickets."""

from support_desk.repositories.account_repo import AccountRepository, BalanceChange  # noqa: F401
from support_desk.repositories.ticket_repo import TicketRepository  # noqa: F401
