"""
User wallet routes: balance and transaction history
"""
from flask import Blueprint, jsonify
from flask_login import login_required, current_user

from services import wallet

coins_bp = Blueprint('user_coins', __name__, url_prefix='/api/coins')


@coins_bp.route('/balance', methods=['GET'])
@login_required
def balance():
    return jsonify({"success": True, "balance": wallet.get_balance(current_user.id)})


@coins_bp.route('/transactions', methods=['GET'])
@login_required
def transactions():
    """Current user's transactions, newest first"""
    records = [t.to_record() for t in wallet.list_transactions(current_user.id)]
    return jsonify({"success": True, "transactions": records})
