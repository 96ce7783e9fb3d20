"""Support desk domain service: accounts, tickets, payments and refunds."""

__version__ = "0.1.0"
