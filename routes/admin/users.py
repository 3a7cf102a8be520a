"""
Admin user management routes: lookup and balance adjustment
"""
from flask import Blueprint, jsonify, current_app

from routes.admin.auth import admin_required, get_current_admin
from services import identity, wallet
from utils.errors import NotFound, ValidationError
from utils.payload import request_payload

admin_users_bp = Blueprint('admin_users', __name__, url_prefix='/api')


def _target_user(data):
    """Resolve the user an admin request is about, by userId or email"""
    user = None
    if data.get("userId"):
        user = identity.get_user_by_id(data.get("userId"))
    elif data.get("email"):
        user = identity.get_user_by_email(data.get("email"))
    else:
        raise ValidationError("userId or email is required")
    if user is None:
        raise NotFound("User not found")
    return user


@admin_users_bp.route('/admin/users', methods=['GET'])
@admin_required
def list_users():
    users = identity.list_users()
    return jsonify({"success": True, "users": [identity.sanitize_user(u) for u in users]})


@admin_users_bp.route('/admin/users/find', methods=['POST'])
@admin_required
def find_user():
    user = _target_user(request_payload())
    return jsonify({"success": True, "user": identity.sanitize_user(user)})


@admin_users_bp.route('/coins/update', methods=['POST'])
@admin_required
def update_balance():
    """Set a user's balance (admin panel)"""
    data = request_payload()
    user = _target_user(data)
    balance = wallet.set_balance(user.id, data.get("balance"))
    current_app.logger.info("Admin %s set balance of %s to %.2f", get_current_admin().id, user.id, balance)
    return jsonify({"success": True, "balance": balance})


@admin_users_bp.route('/admin/users/<user_id>', methods=['PATCH'])
@admin_required
def patch_user_balance(user_id):
    """Set (balance) or adjust (delta) a user's balance"""
    data = request_payload()
    if identity.get_user_by_id(user_id) is None:
        raise NotFound("User not found")
    if data.get("balance") is not None:
        balance = wallet.set_balance(user_id, data.get("balance"))
    elif data.get("delta") is not None:
        balance = wallet.adjust_balance(user_id, data.get("delta"))
    else:
        raise ValidationError("balance or delta is required")
    current_app.logger.info("Admin %s changed balance of %s to %.2f", get_current_admin().id, user_id, balance)
    user = identity.get_user_by_id(user_id)
    return jsonify({"success": True, "user": identity.sanitize_user(user)})
