"""Environment-driven settings."""

from support_desk.config.settings import Settings  # noqa: F401
