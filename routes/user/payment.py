"""
User payment routes: PayPal order creation and capture
"""
from flask import Blueprint, jsonify
from flask_login import login_required, current_user

from services import payments
from utils.payload import request_payload

payment_bp = Blueprint('user_payment', __name__, url_prefix='/api/paypal')


@payment_bp.route('/create-order', methods=['POST'])
@login_required
def create_order():
    data = request_payload()
    order = payments.create_order(current_user.id, data.get("euros"))
    return jsonify(order)


@payment_bp.route('/capture-order', methods=['POST'])
@login_required
def capture_order():
    """Capture an approved order and credit the wallet (idempotent per order)"""
    data = request_payload()
    result = payments.capture_order(current_user.id, data.get("orderId"))
    return jsonify({
        "success": True,
        "balance": result.balance,
        "transaction": result.transaction.to_record(),
        "alreadyCaptured": result.already_captured,
    })
