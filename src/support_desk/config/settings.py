"""
Environment-specific configuration settings.

Only domain knobs live here; API keys and transport settings belong to
the layers that call this service.
"""

from dataclasses import dataclass
import os


def _env_bool(name: str, default: bool) -> bool:
    return os.environ.get(name, str(default)).strip().lower() in ("1", "true", "yes")


@dataclass
class Settings:
    """Application settings with demo-friendly defaults."""

    # Environment
    environment: str = "dev"
    log_level: str = "INFO"

    # Refund workflow
    refund_window_days: int = 30

    # Session registry
    session_max_size: int = 1000
    session_ttl_seconds: int = 1800  # 30 minutes

    # Load CUST001..CUST003 and their tickets at start-up
    seed_fixtures: bool = True

    @classmethod
    def from_environment(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            environment=os.environ.get("ENVIRONMENT", "dev"),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            refund_window_days=int(os.environ.get("REFUND_WINDOW_DAYS", "30")),
            session_max_size=int(os.environ.get("SESSION_MAX_SIZE", "1000")),
            session_ttl_seconds=int(os.environ.get("SESSION_TTL_SECONDS", "1800")),
            seed_fixtures=_env_bool("SEED_FIXTURES", True),
        )
