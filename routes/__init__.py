"""
Routes package for the Euro Arcade application
"""
# Export blueprints for registration in app.py
from routes.public import public_bp
from routes.auth import auth_bp
from routes.user.coins import coins_bp as user_coins_bp
from routes.user.payment import payment_bp as user_payment_bp
from routes.admin.users import admin_users_bp

__all__ = [
    'public_bp',
    'auth_bp',
    'user_coins_bp',
    'user_payment_bp',
    'admin_users_bp',
]
