"""
Public routes: client configuration
"""
from flask import Blueprint, jsonify, current_app

public_bp = Blueprint('public', __name__, url_prefix='/api')


@public_bp.route('/config', methods=['GET'])
def client_config():
    """Public settings the browser client needs for PayPal and Google sign-in"""
    config = current_app.config
    return jsonify({
        "paypalClientId": config.get("PAYPAL_CLIENT_ID"),
        "currency": config.get("PAYPAL_CURRENCY"),
        "unitPrice": config.get("EURO_UNIT_PRICE"),
        "googleClientId": config.get("GOOGLE_CLIENT_ID"),
    })
