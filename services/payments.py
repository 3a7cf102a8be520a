"""
PayPal order orchestration: create an order for a number of Euros and credit
the wallet once the provider confirms the capture.

Per order: CREATED -> CAPTURED or CREATED -> FAILED, both terminal. The order
id is the idempotency key: a capture is credited at most once per
(user, order), and a client retry returns the recorded outcome.
"""
import re
from collections import namedtuple

from flask import current_app

from services.wallet import credit_capture, find_transaction, get_balance, parse_amount, round_euros
from utils.errors import Forbidden, PaymentFailed, ValidationError

CaptureResult = namedtuple("CaptureResult", ["transaction", "balance", "already_captured"])

COMPLETED = "COMPLETED"

# Order ids as PayPal issues them; also keeps the id a single URL path segment
ORDER_ID_RE = re.compile(r"[A-Za-z0-9-]{1,64}")


def _gateway():
    return current_app.extensions["payment_gateway"]


def _unit_price():
    unit_price = float(current_app.config["EURO_UNIT_PRICE"])
    if unit_price <= 0:
        raise RuntimeError("EURO_UNIT_PRICE must be positive")
    return unit_price


def create_order(user_id, euros):
    """Ask the provider for an order charging euros x unit price, tagged with user_id."""
    amount = parse_amount(euros)
    if amount is None or amount <= 0:
        raise ValidationError("A positive amount of euros is required")
    charge = f"{round_euros(amount * _unit_price()):.2f}"
    currency = current_app.config["PAYPAL_CURRENCY"]
    order = _gateway().create_order(charge, currency, user_id)
    current_app.logger.info("Created order %s for user %s (%s %s)", order.get("id"), user_id, charge, currency)
    return order


def capture_order(user_id, order_id):
    """Capture an order and credit the wallet exactly once."""
    order_id = str(order_id or "").strip()
    if not order_id:
        raise ValidationError("orderId is required")
    if not ORDER_ID_RE.fullmatch(order_id):
        raise ValidationError("Invalid orderId")

    existing = find_transaction(order_id)
    if existing is not None:
        if existing.user_id != user_id:
            current_app.logger.warning("User %s tried to capture order %s owned by %s", user_id, order_id, existing.user_id)
            raise Forbidden("Order does not belong to this user")
        return CaptureResult(existing, get_balance(user_id), True)

    capture = _gateway().capture_order(order_id)

    if capture.owner_tag != user_id:
        current_app.logger.warning("Capture of order %s tagged for %s requested by %s", order_id, capture.owner_tag, user_id)
        raise Forbidden("Order does not belong to this user")
    if capture.status != COMPLETED:
        current_app.logger.warning("Order %s captured with status %s, not crediting", order_id, capture.status)
        raise PaymentFailed(f"Payment was not completed (status {capture.status or 'unknown'})")

    euros = round_euros(capture.captured_amount / _unit_price())
    result = credit_capture(
        user_id=user_id,
        order_id=order_id,
        euros=euros,
        amount_paid=capture.captured_amount,
        currency=capture.currency,
        status=capture.status,
    )
    return CaptureResult(result.transaction, result.balance, not result.created)
