"""
Single entrypoint that routes tool invocations to SupportService.

The orchestration layer sends one event per tool call::

    {"operation": "processPayment", "session_id": "abc",
     "arguments": {"customerId": "CUST001", "amount": "50.00"}}

Events arriving through an HTTP proxy carry the same object as a JSON
``body``. Operation and argument names are accepted in camelCase or
snake_case.
"""

from __future__ import annotations

import json
import re
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from support_desk.config.settings import Settings
from support_desk.utils.logging_config import get_logger
from support_desk.utils.session_context import SessionRegistry

logger = get_logger(__name__)

# Lazy-loaded so importing the handler does not seed data.
_support_service: Optional["SupportService"] = None
_sessions: Optional[SessionRegistry] = None

# operation -> (service method, accepted arguments)
ROUTE_TABLE: Dict[str, Tuple[str, Tuple[str, ...]]] = {
    "get_customer_account": ("get_customer_account", ("customer_id",)),
    "process_payment": ("process_payment", ("customer_id", "amount")),
    "create_ticket": ("create_ticket", ("customer_id", "subject", "description", "priority")),
    "get_tickets": ("get_tickets", ("customer_id", "status")),
    "update_account_settings": ("update_account_settings", ("customer_id", "email", "tier")),
    "validate_refund_eligibility": ("validate_refund_eligibility", ("customer_id",)),
    "process_refund": ("process_refund", ("customer_id", "amount")),
}

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _get_support_service():
    """Lazy-load SupportService."""
    global _support_service
    if _support_service is None:
        from support_desk.services.support_service import SupportService

        settings = Settings.from_environment()
        _support_service = SupportService.from_settings(settings)
        logger.info("Support service initialized", extra={"environment": settings.environment})
    return _support_service


def _get_sessions() -> SessionRegistry:
    """Lazy-load the session registry."""
    global _sessions
    if _sessions is None:
        settings = Settings.from_environment()
        _sessions = SessionRegistry(
            max_size=settings.session_max_size,
            ttl_seconds=settings.session_ttl_seconds,
        )
    return _sessions


def _snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name.strip()).lower()


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _response(status: int, body: Dict) -> Dict:
    """Format a JSON API response."""
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body, default=_json_default),
    }


def _parse_event(event: Dict) -> Dict:
    if "body" in event:
        body = event.get("body") or "{}"
        return json.loads(body) if isinstance(body, str) else body
    return event


def lambda_handler(event, context):
    """Dispatch one tool call and wrap its result."""
    try:
        request = _parse_event(event or {})
    except json.JSONDecodeError:
        return _response(400, {"success": False, "error": "Request body is not valid JSON"})
    if not isinstance(request, dict):
        return _response(400, {"success": False, "error": "Request must be a JSON object"})

    operation = _snake(str(request.get("operation") or ""))
    session_id = str(request.get("session_id") or request.get("sessionId") or "").strip()
    arguments = request.get("arguments") or {}

    if not operation:
        return _response(400, {"success": False, "error": "operation is required"})
    if not session_id:
        return _response(400, {"success": False, "error": "session_id is required"})
    if not isinstance(arguments, dict):
        return _response(400, {"success": False, "error": "arguments must be an object"})

    if operation == "clear_session":
        dropped = _get_sessions().drop(session_id)
        return _response(200, {"success": True, "cleared": dropped})
    if operation == "session_state":
        state = _get_sessions().get_or_create(session_id).snapshot()
        return _response(200, {"success": True, "state": state})

    route = ROUTE_TABLE.get(operation)
    if route is None:
        return _response(404, {"success": False, "error": f"Unknown operation: {operation}"})

    method_name, accepted = route
    kwargs = {_snake(key): value for key, value in arguments.items()}
    unexpected = sorted(set(kwargs) - set(accepted))
    if unexpected:
        return _response(
            400,
            {"success": False, "error": f"Unexpected arguments: {', '.join(unexpected)}"},
        )

    ctx = _get_sessions().get_or_create(session_id)
    method = getattr(_get_support_service(), method_name)
    call_args = {name: kwargs.get(name) for name in accepted}
    result = method(**call_args, ctx=ctx)

    logger.info(
        "Tool call served",
        extra={"operation": operation, "session_id": session_id, "success": result["success"]},
    )
    return _response(200, result)
