"""Seed data loaded into the repositories at start-up and on reset."""

from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, List

from support_desk.models.customer import AccountStatus, AccountTier, CustomerAccount


def seed_accounts(today: date) -> List[CustomerAccount]:
    """
    Three demo customers covering the refund cases.

    CUST001 is eligible, CUST002 paid too long ago, CUST003 is inactive.
    """
    return [
        CustomerAccount(
            customer_id="CUST001",
            name="John Doe",
            email="john.doe@acme.com",
            balance=Decimal("1250.00"),
            tier=AccountTier.PREMIUM,
            status=AccountStatus.ACTIVE,
            last_payment_date=today - timedelta(days=10),
        ),
        CustomerAccount(
            customer_id="CUST002",
            name="Jane Smith",
            email="jane.smith@acme.com",
            balance=Decimal("0.00"),
            tier=AccountTier.BASIC,
            status=AccountStatus.ACTIVE,
            last_payment_date=today - timedelta(days=45),
        ),
        CustomerAccount(
            customer_id="CUST003",
            name="Bob Johnson",
            email="bob.j@acme.com",
            balance=Decimal("5000.00"),
            tier=AccountTier.ENTERPRISE,
            status=AccountStatus.INACTIVE,
            last_payment_date=today - timedelta(days=5),
        ),
    ]


def seed_tickets(today: date) -> List[Dict]:
    """Raw ticket rows; the ticket repository turns them into models."""
    return [
        {
            "ticket_id": "TICKET-100",
            "customer_id": "CUST001",
            "subject": "Login Fail",
            "description": "Unable to sign in after password reset",
            "priority": "MEDIUM",
            "status": "CLOSED",
            "created_at": f"{today - timedelta(days=60)}T09:00:00+00:00",
        }
    ]
