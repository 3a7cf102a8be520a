"""
Authentication routes: register, email verification, password and Google login, logout
"""
from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user

from services import identity
from services.sessions import token_from_request
from utils.payload import request_payload

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')

REGISTER_SUCCESS_MSG = "Account created. Check your email for the verification link."
RESEND_SUCCESS_MSG = "Verification email sent"
RESEND_FAIL_MSG = "Unable to send verification email. Please try again later."
ALREADY_VERIFIED_MSG = "Account is already verified"
VERIFY_SUCCESS_MSG = "Email verified successfully"


def _session_response(token, user):
    """Login response: sanitized user plus the session token, also set as a cookie."""
    resp = jsonify({"success": True, "token": token, "user": identity.sanitize_user(user)})
    resp.set_cookie(
        current_app.config["SESSION_TOKEN_COOKIE"],
        token,
        max_age=int(current_app.config["SESSION_LIFETIME"].total_seconds()),
        httponly=True,
        samesite=current_app.config["SESSION_COOKIE_SAMESITE"],
        secure=current_app.config["SESSION_COOKIE_SECURE"],
        path="/",
    )
    return resp


@auth_bp.route('/register', methods=['POST'])
def register():
    """Create an account; the verification link goes out by email"""
    data = request_payload()
    user = identity.register(data.get("email"), data.get("password"), data.get("displayName"))
    return jsonify({"success": True, "message": REGISTER_SUCCESS_MSG, "user": identity.sanitize_user(user)}), 201


@auth_bp.route('/resend', methods=['POST'])
def resend_verification():
    user, sent = identity.resend_verification(request_payload().get("email"))
    if user.verified:
        return jsonify({"success": True, "message": ALREADY_VERIFIED_MSG})
    return jsonify({"success": sent, "message": RESEND_SUCCESS_MSG if sent else RESEND_FAIL_MSG})


@auth_bp.route('/verify', methods=['POST'])
def verify():
    user = identity.verify_email(request_payload().get("token"))
    return jsonify({"success": True, "message": VERIFY_SUCCESS_MSG, "user": identity.sanitize_user(user)})


@auth_bp.route('/login', methods=['POST'])
def login():
    data = request_payload()
    token, user = identity.login(data.get("email"), data.get("password"))
    return _session_response(token, user)


@auth_bp.route('/google', methods=['POST'])
def google_login():
    data = request_payload()
    token, user = identity.google_login(data.get("idToken") or data.get("credential"))
    return _session_response(token, user)


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """Revoke the current session (if any) and clear the cookie"""
    token = token_from_request(request)
    if token:
        identity.logout(token)
    resp = jsonify({"success": True})
    resp.delete_cookie(current_app.config["SESSION_TOKEN_COOKIE"], path="/")
    return resp


@auth_bp.route('/me', methods=['GET'])
@login_required
def me():
    return jsonify({"success": True, "user": identity.sanitize_user(current_user._get_current_object())})
