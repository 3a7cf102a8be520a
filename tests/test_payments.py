import pytest

from services import payments, wallet
from utils.errors import Forbidden, PaymentFailed, UpstreamUnavailable, ValidationError


def test_create_order_charges_euros_times_unit_price(ctx, paypal, verified_user):
    ctx.config["EURO_UNIT_PRICE"] = 1.5
    order = payments.create_order(verified_user.id, "4")
    assert paypal.orders[order["id"]] == {"amount": "6.00", "currency": "EUR", "owner_tag": verified_user.id}


@pytest.mark.parametrize("euros", [None, "", "abc", 0, -5, "inf", "1e30"])
def test_create_order_rejects_bad_amount(ctx, paypal, verified_user, euros):
    with pytest.raises(ValidationError):
        payments.create_order(verified_user.id, euros)
    assert paypal.orders == {}


def test_capture_credits_wallet(ctx, paypal, verified_user):
    order = payments.create_order(verified_user.id, 10)

    result = payments.capture_order(verified_user.id, order["id"])

    assert result.already_captured is False
    assert result.balance == 10.0
    assert result.transaction.euros == 10.0
    assert result.transaction.amount_paid == 10.0
    assert result.transaction.status == "COMPLETED"
    assert wallet.get_balance(verified_user.id) == 10.0


def test_double_capture_credits_once(ctx, paypal, verified_user):
    order = payments.create_order(verified_user.id, 10)

    first = payments.capture_order(verified_user.id, order["id"])
    second = payments.capture_order(verified_user.id, order["id"])

    assert second.already_captured is True
    assert second.transaction == first.transaction
    assert wallet.get_balance(verified_user.id) == 10.0
    assert len(wallet.list_transactions(verified_user.id)) == 1
    assert paypal.capture_calls == [order["id"]]


def test_capture_for_another_owner_is_forbidden(ctx, paypal, verified_user, player):
    order = payments.create_order(verified_user.id, 10)

    with pytest.raises(Forbidden):
        payments.capture_order(player.id, order["id"])

    assert wallet.get_balance(player.id) == 0.0
    assert wallet.get_balance(verified_user.id) == 0.0
    assert wallet.list_transactions(player.id) == []


def test_capture_without_owner_tag_is_forbidden(ctx, paypal, verified_user):
    order = payments.create_order(verified_user.id, 10)
    paypal.orders[order["id"]]["owner_tag"] = None

    with pytest.raises(Forbidden):
        payments.capture_order(verified_user.id, order["id"])
    assert wallet.get_balance(verified_user.id) == 0.0


def test_already_recorded_order_of_another_user_is_forbidden(ctx, paypal, verified_user, player):
    order = payments.create_order(verified_user.id, 10)
    payments.capture_order(verified_user.id, order["id"])

    with pytest.raises(Forbidden):
        payments.capture_order(player.id, order["id"])
    assert paypal.capture_calls == [order["id"]]
    assert wallet.get_balance(player.id) == 0.0


def test_provider_failure_changes_nothing(ctx, paypal, verified_user):
    order = payments.create_order(verified_user.id, 10)
    paypal.capture_error = UpstreamUnavailable("PayPal request timed out", 504)

    with pytest.raises(UpstreamUnavailable):
        payments.capture_order(verified_user.id, order["id"])

    assert wallet.get_balance(verified_user.id) == 0.0
    assert wallet.list_transactions(verified_user.id) == []

    paypal.capture_error = None
    assert payments.capture_order(verified_user.id, order["id"]).balance == 10.0


def test_incomplete_capture_is_not_credited(ctx, paypal, verified_user):
    order = payments.create_order(verified_user.id, 10)
    paypal.capture_status = "PENDING"

    with pytest.raises(PaymentFailed) as excinfo:
        payments.capture_order(verified_user.id, order["id"])

    assert excinfo.value.status_code == 402
    assert wallet.get_balance(verified_user.id) == 0.0
    assert wallet.list_transactions(verified_user.id) == []


def test_capture_converts_paid_amount_with_unit_price(ctx, paypal, verified_user):
    ctx.config["EURO_UNIT_PRICE"] = 0.5
    order = payments.create_order(verified_user.id, 7)
    result = payments.capture_order(verified_user.id, order["id"])
    assert result.transaction.amount_paid == 3.5
    assert result.balance == 7.0


def test_capture_requires_order_id(ctx, verified_user):
    with pytest.raises(ValidationError):
        payments.capture_order(verified_user.id, "  ")


@pytest.mark.parametrize("order_id", ["../x", "ORDER-1/../../v1/payments/payouts", "ORDER 1", "ORDER-1?x=1", "A" * 65])
def test_capture_rejects_malformed_order_id(ctx, paypal, verified_user, order_id):
    with pytest.raises(ValidationError):
        payments.capture_order(verified_user.id, order_id)
    assert paypal.capture_calls == []
