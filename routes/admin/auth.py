"""
Admin authorization helpers
"""
from functools import wraps

from flask_login import current_user

from utils.errors import Forbidden, Unauthorized


def admin_required(f):
    """Decorator to require a live session whose user has the admin role"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            raise Unauthorized()
        if not current_user.is_admin:
            raise Forbidden("Admin access required")
        return f(*args, **kwargs)
    return decorated_function


def get_current_admin():
    """Current user if it is an admin, else None"""
    if current_user.is_authenticated and current_user.is_admin:
        return current_user._get_current_object()
    return None
