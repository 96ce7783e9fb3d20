"""Uniform success shape returned by every support operation."""

from typing import Any, Dict


def success(**payload: Any) -> Dict[str, Any]:
    """Build ``{"success": True, **payload}``; failures come from ``to_failure``."""
    return {"success": True, **payload}
