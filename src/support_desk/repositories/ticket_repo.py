"""In-memory ticket repository, grouped by customer in insertion order."""

from datetime import date
from threading import Lock
from typing import Callable, Dict, List, Optional

from support_desk.models.ticket import SupportTicket
from support_desk.repositories.fixtures import seed_tickets
from support_desk.utils.logging_config import get_logger

logger = get_logger(__name__)


class TicketRepository:
    """Concurrency-safe store of support tickets."""

    def __init__(self, today: Callable[[], date] = date.today, seed: bool = True):
        self._today = today
        self._tickets: Dict[str, List[SupportTicket]] = {}
        self._lock = Lock()
        if seed:
            self.seed()

    def seed(self) -> None:
        """Load the fixture tickets, replacing anything already stored."""
        tickets = [SupportTicket.model_validate(row) for row in seed_tickets(self._today())]
        with self._lock:
            self._tickets = {}
            for ticket in tickets:
                self._tickets.setdefault(ticket.customer_id, []).append(ticket)
        logger.info("Tickets seeded", extra={"count": len(tickets)})

    def reset(self) -> None:
        self.seed()

    def append(self, ticket: SupportTicket) -> SupportTicket:
        with self._lock:
            self._tickets.setdefault(ticket.customer_id, []).append(ticket)
        return ticket

    def list_by_customer(
        self, customer_id: str, status: Optional[str] = None
    ) -> List[SupportTicket]:
        """
        Tickets for one customer, oldest first.

        ``status`` matches case-insensitively; None or blank returns all.
        """
        with self._lock:
            tickets = list(self._tickets.get(customer_id, []))
        wanted = "" if status is None else str(status).strip().upper()
        if not wanted:
            return tickets
        return [ticket for ticket in tickets if ticket.status.upper() == wanted]
