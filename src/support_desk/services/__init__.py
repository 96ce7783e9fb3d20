"""Business logic services used by handlers."""

from support_desk.services.support_service import SupportService  # noqa: F401
