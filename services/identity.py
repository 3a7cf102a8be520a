"""
Identity service: registration, email verification, password and Google login,
explicit user updates and sanitizing users for external exposure.
"""
import re
import uuid

from flask import current_app

from models import store
from models.user import User, ROLE_ADMIN, ROLE_USER, PRIVATE_FIELDS
from services.sessions import issue_session, revoke_session
from services.wallet import parse_amount, round_euros
from utils.auth_utils import hash_password, verify_password, generate_verification_token, verification_expires_at
from utils.dates import utcnow, to_iso, from_iso
from utils.errors import (
    Conflict,
    EmailNotVerified,
    InvalidCredentials,
    InvalidToken,
    NotFound,
    TokenExpired,
    ValidationError,
)
from utils.mail import send_verification_email

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Fields update_user() accepts; anything else is a programming error
UPDATABLE_FIELDS = frozenset({"display_name", "password", "verified", "google_id", "balance", "role"})


def normalize_email(email):
    return str(email or "").strip().lower()


def sanitize_user(user):
    """Public view of a user: no password hash, salt or verification token."""
    if user is None:
        return None
    record = user.to_record() if isinstance(user, User) else dict(user)
    for field in PRIVATE_FIELDS:
        record.pop(field, None)
    return record


def _find_index(records, **criteria):
    for idx, record in enumerate(records):
        if all(record.get(k) == v for k, v in criteria.items()):
            return idx
    return None


def get_user_by_id(user_id):
    records = store.read("users")
    idx = _find_index(records, id=user_id) if user_id else None
    return User.from_record(records[idx]) if idx is not None else None


def get_user_by_email(email):
    email = normalize_email(email)
    records = store.read("users")
    idx = _find_index(records, email=email) if email else None
    return User.from_record(records[idx]) if idx is not None else None


def list_users():
    return [User.from_record(r) for r in store.read("users")]


def _check_password_type(password):
    if not isinstance(password, str):
        raise ValidationError("Password must be a string")


def _validate_registration(email, password):
    if not email or not password:
        raise ValidationError("Email and password are required")
    _check_password_type(password)
    if not EMAIL_RE.match(email):
        raise ValidationError("Please enter a valid email address.")
    min_length = current_app.config["PASSWORD_MIN_LENGTH"]
    if len(password) < min_length:
        raise ValidationError(f"Password must be at least {min_length} characters long")


_DUMMY_CREDENTIAL = None


def _dummy_credential():
    global _DUMMY_CREDENTIAL
    if _DUMMY_CREDENTIAL is None:
        _DUMMY_CREDENTIAL = hash_password(uuid.uuid4().hex)
    return _DUMMY_CREDENTIAL


def _display_name(display_name, email):
    name = str(display_name or "").strip() or email.split("@")[0]
    return name[:current_app.config["DISPLAY_NAME_MAX_LENGTH"]] or "Player"


def _new_verification(user):
    user.verification_token = generate_verification_token(current_app.config["VERIFICATION_TOKEN_BYTES"])
    user.verification_token_expires_at = verification_expires_at(current_app.config["VERIFICATION_TOKEN_LIFETIME"])


def _notify_verification(user):
    """Send the verification email. Failure is logged, never raised."""
    try:
        sent = send_verification_email(user)
    except Exception as e:
        current_app.logger.error(f"Failed to send verification email to {user.email}: {str(e)}", exc_info=True)
        return False
    if not sent:
        current_app.logger.error(f"Verification email to {user.email} was not delivered")
    return sent


def register(email, password, display_name=None):
    """
    Create an unverified password account and send its verification email.

    The first account registered while no admin exists is promoted to admin
    (when BOOTSTRAP_FIRST_ADMIN is on). Returns the stored User.
    """
    email = normalize_email(email)
    password = password or ""
    _validate_registration(email, password)

    credential = hash_password(password)
    now = to_iso(utcnow())
    user = User(
        id=str(uuid.uuid4()),
        email=email,
        display_name=_display_name(display_name, email),
        password_hash=credential.hash,
        password_salt=credential.salt,
        verified=False,
        role=ROLE_USER,
        balance=0.0,
        created_at=now,
        updated_at=now,
    )
    _new_verification(user)

    with store.transaction("users") as data:
        users = data["users"]
        if _find_index(users, email=email) is not None:
            raise Conflict("Email already registered")
        if current_app.config["BOOTSTRAP_FIRST_ADMIN"] and not any(u.get("role") == ROLE_ADMIN for u in users):
            user.role = ROLE_ADMIN
        users.append(user.to_record())

    if user.is_admin:
        current_app.logger.warning("Bootstrap: first registered account %s promoted to admin", user.email)
    current_app.logger.info("Registered user %s", user.id)

    _notify_verification(user)
    return user


def resend_verification(email):
    """
    Replace the verification token and send it again.
    Returns (user, sent); sent is False when the account is already verified.
    """
    email = normalize_email(email)
    if not email:
        raise ValidationError("Email is required")

    with store.transaction("users") as data:
        idx = _find_index(data["users"], email=email)
        if idx is None:
            raise NotFound("No account found for this email")
        user = User.from_record(data["users"][idx])
        if user.verified:
            return user, False
        _new_verification(user)
        user.updated_at = to_iso(utcnow())
        data["users"][idx] = user.to_record()

    return user, _notify_verification(user)


def verify_email(token):
    """Consume a verification token. A token verifies exactly once."""
    token = str(token or "").strip()
    if not token:
        raise ValidationError("Verification token is required")

    with store.transaction("users") as data:
        idx = _find_index(data["users"], verification_token=token)
        if idx is None:
            raise InvalidToken()
        user = User.from_record(data["users"][idx])
        expires_at = from_iso(user.verification_token_expires_at)
        if expires_at is not None and expires_at <= utcnow():
            raise TokenExpired()
        user.verified = True
        user.verification_token = None
        user.verification_token_expires_at = None
        user.updated_at = to_iso(utcnow())
        data["users"][idx] = user.to_record()
    return user


def login(email, password):
    """Password login. Returns (session_token, user)."""
    email = normalize_email(email)
    if not email or not password:
        raise ValidationError("Email and password are required")
    _check_password_type(password)

    user = get_user_by_email(email)
    # Unknown email, Google-only account and bad password are indistinguishable
    if user is None or not user.has_password:
        # one PBKDF2 check either way
        dummy = _dummy_credential()
        verify_password(password, dummy.salt, dummy.hash)
        raise InvalidCredentials()
    if not verify_password(password, user.password_salt, user.password_hash):
        raise InvalidCredentials()
    if not user.verified:
        raise EmailNotVerified()

    token, _session = issue_session(user)
    return token, user


def google_login(id_token):
    """Sign in (or sign up) with a Google ID token. Returns (session_token, user)."""
    if not id_token:
        raise ValidationError("Google token missing")
    identity = current_app.extensions["google_verifier"].verify(id_token)

    email = normalize_email(identity.email)
    now = to_iso(utcnow())
    with store.transaction("users") as data:
        users = data["users"]
        idx = _find_index(users, google_id=identity.subject)
        if idx is None:
            idx = _find_index(users, email=email)
        if idx is not None:
            user = User.from_record(users[idx])
            user.google_id = identity.subject
            user.verified = True
            user.verification_token = None
            user.verification_token_expires_at = None
            user.updated_at = now
            users[idx] = user.to_record()
        else:
            user = User(
                id=str(uuid.uuid4()),
                email=email,
                display_name=_display_name(identity.name, email),
                google_id=identity.subject,
                verified=True,
                role=ROLE_USER,
                balance=0.0,
                created_at=now,
                updated_at=now,
            )
            users.append(user.to_record())
            current_app.logger.info("Created Google account %s", user.id)

    token, _session = issue_session(user)
    return token, user


def logout(token):
    return revoke_session(token)


def update_user(user_id, **changes):
    """
    Apply an explicit set of field changes to a user.
    Only UPDATABLE_FIELDS are accepted; updated_at is always set here.
    """
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update user fields: {', '.join(sorted(unknown))}")
    if "role" in changes and changes["role"] not in (ROLE_USER, ROLE_ADMIN):
        raise ValidationError("Unknown role")

    with store.transaction("users") as data:
        idx = _find_index(data["users"], id=user_id)
        if idx is None:
            raise NotFound("User not found")
        user = User.from_record(data["users"][idx])
        for field, value in changes.items():
            if field == "password":
                _check_password_type(value)
                credential = hash_password(value)
                user.password_hash = credential.hash
                user.password_salt = credential.salt
            elif field == "google_id" and value is not None:
                owner = _find_index(data["users"], google_id=value)
                if owner is not None and owner != idx:
                    raise Conflict("Google account already linked to another user")
                user.google_id = value
            elif field == "balance":
                amount = parse_amount(value)
                if amount is None or amount < 0:
                    raise ValidationError("Balance must be a non-negative number")
                user.balance = round_euros(amount)
            elif field == "verified":
                user.verified = bool(value)
            elif field == "display_name":
                user.display_name = _display_name(value, user.email)
            else:
                setattr(user, field, value)
        user.updated_at = to_iso(utcnow())
        data["users"][idx] = user.to_record()
    return user


def promote_to_admin(email):
    user = get_user_by_email(email)
    if user is None:
        raise NotFound("No account found for this email")
    return update_user(user.id, role=ROLE_ADMIN)
