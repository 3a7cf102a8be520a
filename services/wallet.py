"""
Wallet and ledger: user Euro balances and the append-only transaction log.
"""
import math
import uuid
from collections import namedtuple
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from flask import current_app

from models import store
from models.transaction import Transaction
from utils.dates import utcnow, to_iso
from utils.errors import NotFound, ValidationError

CENT = Decimal("0.01")
# Largest amount accepted from user or admin input
MAX_EUROS = 1_000_000_000

CreditResult = namedtuple("CreditResult", ["transaction", "balance", "created"])


def round_euros(value):
    """Round to cents, half up."""
    return float(Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP))


def parse_amount(value):
    """Finite float from user input within +-MAX_EUROS, or None."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        amount = float(Decimal(str(value).strip()))
    except (InvalidOperation, ValueError):
        return None
    if not math.isfinite(amount) or abs(amount) > MAX_EUROS:
        return None
    return amount


def _user_index(users, user_id):
    for idx, record in enumerate(users):
        if record.get("id") == user_id:
            return idx
    raise NotFound("User not found")


def _apply_balance(record, balance):
    record["balance"] = round_euros(balance)
    record["updated_at"] = to_iso(utcnow())
    return record["balance"]


def get_balance(user_id):
    users = store.read("users")
    return round_euros(users[_user_index(users, user_id)].get("balance") or 0)


def set_balance(user_id, amount):
    """
    Admin override of a balance.
    Malformed, non-finite or negative input sets the balance to 0.
    """
    parsed = parse_amount(amount)
    if parsed is None or parsed < 0:
        current_app.logger.warning("Invalid balance %r for user %s, defaulting to 0", amount, user_id)
        parsed = 0.0
    with store.transaction("users") as data:
        record = data["users"][_user_index(data["users"], user_id)]
        return _apply_balance(record, parsed)


def adjust_balance(user_id, delta):
    """Admin relative adjustment; the result never goes below 0."""
    parsed = parse_amount(delta)
    if parsed is None:
        raise ValidationError("Delta must be a number")
    with store.transaction("users") as data:
        record = data["users"][_user_index(data["users"], user_id)]
        return _apply_balance(record, max(0.0, (record.get("balance") or 0) + parsed))


def increment_balance(user_id, delta):
    with store.transaction("users") as data:
        record = data["users"][_user_index(data["users"], user_id)]
        return _apply_balance(record, (record.get("balance") or 0) + round_euros(delta))


def _new_transaction(user_id, order_id, euros, amount_paid, currency, status):
    return Transaction(
        id=str(uuid.uuid4()),
        user_id=user_id,
        order_id=order_id,
        euros=round_euros(euros),
        amount_paid=round_euros(amount_paid),
        currency=currency,
        status=status,
        created_at=to_iso(utcnow()),
    )


def add_transaction(user_id, order_id, euros, amount_paid, currency, status="COMPLETED"):
    """Append one transaction record. Records are never changed afterwards."""
    transaction = _new_transaction(user_id, order_id, euros, amount_paid, currency, status)
    with store.transaction("transactions") as data:
        data["transactions"].append(transaction.to_record())
    return transaction


def list_transactions(user_id):
    """The user's own transactions, most recent first."""
    owned = [Transaction.from_record(r) for r in store.read("transactions") if r.get("user_id") == user_id]
    return sorted(owned, key=lambda t: t.created_at or "", reverse=True)


def find_transaction(order_id):
    for record in store.read("transactions"):
        if record.get("order_id") == order_id:
            return Transaction.from_record(record)
    return None


def credit_capture(user_id, order_id, euros, amount_paid, currency, status):
    """
    Credit a captured order to the user's balance and record it, at most once.

    Runs in one store transaction over users and transactions; if a row for
    (user_id, order_id) already exists it is returned and nothing changes.
    The balance is written before the ledger row is appended.
    """
    with store.transaction("users", "transactions") as data:
        for record in data["transactions"]:
            if record.get("user_id") == user_id and record.get("order_id") == order_id:
                user = data["users"][_user_index(data["users"], user_id)]
                return CreditResult(Transaction.from_record(record), round_euros(user.get("balance") or 0), False)

        user = data["users"][_user_index(data["users"], user_id)]
        balance = _apply_balance(user, (user.get("balance") or 0) + round_euros(euros))
        transaction = _new_transaction(user_id, order_id, euros, amount_paid, currency, status)
        data["transactions"].append(transaction.to_record())

    current_app.logger.info("Credited %.2f euros to user %s for order %s", transaction.euros, user_id, order_id)
    return CreditResult(transaction, balance, True)
