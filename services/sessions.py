"""
Opaque, store-backed login sessions.

The client holds a random token; the sessions collection holds its SHA-256,
the owning user id and an expiry. A session is valid only while it is present
and unexpired, so deleting it (logout) revokes it immediately.
"""
import hmac

from flask import current_app

from models import store
from models.session import Session
from models.user import User
from utils.auth_utils import generate_session_token, hash_session_token
from utils.dates import utcnow, to_iso


def issue_session(user):
    """Create a session for user. Returns (token, Session)."""
    now = utcnow()
    token = generate_session_token(current_app.config["SESSION_TOKEN_BYTES"])
    session = Session(
        token_hash=hash_session_token(token),
        user_id=user.id,
        created_at=to_iso(now),
        expires_at=to_iso(now + current_app.config["SESSION_LIFETIME"]),
    )
    with store.transaction("sessions") as data:
        data["sessions"].append(session.to_record())
    return token, session


def _find(records, token_hash):
    for record in records:
        if hmac.compare_digest(record.get("token_hash", ""), token_hash):
            return record
    return None


def get_session(token):
    """Return the live Session for token, or None. Expired sessions are deleted on sight."""
    if not token:
        return None
    token_hash = hash_session_token(token)
    record = _find(store.read("sessions"), token_hash)
    if record is None:
        return None
    session = Session.from_record(record)
    if session.is_expired():
        revoke_session(token)
        return None
    return session


def revoke_session(token):
    """Delete a session (logout). Unknown tokens are ignored."""
    if not token:
        return False
    token_hash = hash_session_token(token)
    with store.transaction("sessions") as data:
        before = len(data["sessions"])
        data["sessions"] = [s for s in data["sessions"] if s.get("token_hash") != token_hash]
        return len(data["sessions"]) != before


def purge_expired_sessions():
    """Remove all expired sessions. Returns how many were removed."""
    now = utcnow()
    with store.transaction("sessions") as data:
        live = [s for s in data["sessions"] if not Session.from_record(s).is_expired(now)]
        removed = len(data["sessions"]) - len(live)
        data["sessions"] = live
    return removed


def token_from_request(request):
    """Session token from the session cookie or an Authorization: Bearer header."""
    header = request.headers.get("Authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return request.cookies.get(current_app.config["SESSION_TOKEN_COOKIE"]) or None


def load_user_from_request(request):
    """Flask-Login request loader: resolve the request's session to a User."""
    session = get_session(token_from_request(request))
    if session is None:
        return None
    for record in store.read("users"):
        if record.get("id") == session.user_id:
            return User.from_record(record)
    return None
