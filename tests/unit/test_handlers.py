"""
Tool dispatch handler tests.

Run with: pytest tests/unit/test_handlers.py -v
"""

import json

import pytest

from support_desk.handlers import main
from support_desk.utils.session_context import SessionRegistry


@pytest.fixture(autouse=True)
def wired_handler(service):
    """Point the lazy-loaded globals at the test service."""
    main._support_service = service
    main._sessions = SessionRegistry()
    yield
    main._support_service = None
    main._sessions = None


def _call(operation, session_id="session-1", **arguments):
    event = {"operation": operation, "session_id": session_id, "arguments": arguments}
    resp = main.lambda_handler(event, None)
    return resp["statusCode"], json.loads(resp["body"])


def test_get_customer_account_camel_case():
    status, body = _call("getCustomerAccount", customerId="cust001")
    assert status == 200
    assert body["success"] is True
    assert body["customer"]["customer_id"] == "CUST001"
    assert body["customer"]["balance"] == "1250.00"
    assert body["customer"]["last_payment_date"] == "2025-12-02"


def test_snake_case_operation_and_arguments():
    status, body = _call("process_payment", customer_id="CUST001", amount="100")
    assert status == 200
    assert body["new_balance"] == "1350.00"


def test_failure_results_are_still_200():
    status, body = _call("getCustomerAccount", customerId="CUST999")
    assert status == 200
    assert body == {"success": False, "error": "Customer not found: CUST999"}


def test_refund_workflow_shares_session_state():
    _call("validateRefundEligibility", customerId="CUST001")
    status, body = _call("processRefund", customerId="CUST001", amount=100)
    assert body["success"] is True
    assert body["new_balance"] == "1150.00"

    _, again = _call("processRefund", customerId="CUST001", amount=100)
    assert again["error"] == "Refund validation must be completed first"


def test_sessions_are_isolated():
    _call("validateRefundEligibility", session_id="a", customerId="CUST001")
    _, body = _call("processRefund", session_id="b", customerId="CUST001", amount=10)
    assert body["success"] is False


def test_optional_arguments_may_be_omitted():
    _, body = _call("createTicket", customerId="CUST001", subject="Help", description="Broken")
    assert body["ticket"]["priority"] == "MEDIUM"
    _, listed = _call("getTickets", customerId="CUST001")
    assert listed["count"] == 2


def test_session_state_and_clear():
    _call("getCustomerAccount", customerId="CUST001")

    _, state = _call("sessionState")
    assert state["state"]["current_customer"] == "CUST001"
    assert "customer:CUST001" in state["state"]

    _, cleared = _call("clearSession")
    assert cleared == {"success": True, "cleared": True}
    _, state = _call("sessionState")
    assert state["state"] == {}


def test_http_proxy_body_is_accepted():
    event = {
        "body": json.dumps(
            {
                "operation": "getTickets",
                "sessionId": "s",
                "arguments": {"customerId": "CUST001", "status": "closed"},
            }
        )
    }
    resp = main.lambda_handler(event, None)
    assert resp["statusCode"] == 200
    assert json.loads(resp["body"])["count"] == 1


def test_unknown_operation_returns_404():
    status, body = _call("deleteEverything")
    assert status == 404
    assert "Unknown operation" in body["error"]


@pytest.mark.parametrize(
    "event",
    [
        {"session_id": "s"},
        {"operation": "getTickets"},
        {"operation": "getTickets", "session_id": "s", "arguments": ["CUST001"]},
        {"body": "{not json"},
        {"body": "[1, 2]"},
    ],
)
def test_malformed_events_return_400(event):
    resp = main.lambda_handler(event, None)
    assert resp["statusCode"] == 400
    assert json.loads(resp["body"])["success"] is False


def test_unexpected_arguments_return_400():
    status, body = _call("getCustomerAccount", customerId="CUST001", dryRun=True)
    assert status == 400
    assert "dry_run" in body["error"]


def test_lazy_loading_builds_service_from_environment(monkeypatch):
    main._support_service = None
    main._sessions = None
    monkeypatch.setenv("SESSION_MAX_SIZE", "5")

    status, body = _call("getCustomerAccount", customerId="CUST002")

    assert status == 200
    assert body["customer"]["name"] == "Jane Smith"
    assert main._sessions.stats()["max_size"] == 5
