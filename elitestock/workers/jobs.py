"""
RQ Jobs - Notification tasks

Each job receives the payload of one domain event. Email delivery is an
external collaborator; these jobs format the message and log it.
"""

import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)


def _send_email(to: str, subject: str, body: str) -> None:
    if not to:
        logger.warning(f"No recipient for notification '{subject}', dropping")
        return
    logger.info(f"Sending email to {to}: {subject}", extra={"email_subject": subject})
    logger.debug(body)


def notify_trade_executed(payload: Dict[str, Any]) -> None:
    kind = "Copied trade" if payload.get("copied_from_trade_id") else "Trade"
    _send_email(
        payload.get("email"),
        f"{kind} executed: {payload['trade_type'].upper()} {payload['amount']} {payload['asset_symbol']}",
        f"Your {payload['trade_type']} order for {payload['amount']} {payload['asset_symbol']} "
        f"at {payload['price']} was executed. Total: {payload['cost']}.",
    )


def notify_investment_opened(payload: Dict[str, Any]) -> None:
    _send_email(
        payload.get("email"),
        f"Investment confirmed: {payload['plan_name']}",
        f"Your investment of {payload['amount']} in {payload['plan_name']} is active "
        f"at {payload['roi_percentage']}% and matures on {payload['end_date']}.",
    )


def notify_investment_matured(payload: Dict[str, Any]) -> None:
    _send_email(
        payload.get("email"),
        "Your investment has matured",
        f"Principal {payload['principal']} plus profit {payload['profit']} "
        f"({payload['total_return']} total) has been credited to your balance.",
    )


def notify_transaction_reviewed(payload: Dict[str, Any]) -> None:
    outcome = "approved" if payload["action"] == "approve" else "rejected"
    body = f"Your {payload['transaction_type']} of {payload['amount']} was {outcome}."
    if payload.get("notes"):
        body += f" Note from our team: {payload['notes']}"
    _send_email(
        payload.get("email"),
        f"{payload['transaction_type'].capitalize()} {outcome}",
        body,
    )
