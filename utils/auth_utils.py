"""
Authentication utility functions: password hashing, session and verification tokens.
Tokens are opaque random strings; session tokens are hashed before storage.
"""
import hashlib
import secrets
from collections import namedtuple
from datetime import timedelta

from werkzeug.security import generate_password_hash, check_password_hash

from utils.dates import utcnow, to_iso

# PBKDF2-HMAC-SHA256, 310k iterations, 32-byte derived key
PASSWORD_METHOD = "pbkdf2:sha256:310000"
PASSWORD_SALT_LENGTH = 32

SESSION_TOKEN_BYTES = 32
VERIFICATION_TOKEN_BYTES = 24
VERIFICATION_TOKEN_LIFETIME = timedelta(hours=24)

PasswordCredential = namedtuple("PasswordCredential", ["salt", "hash"])


def hash_password(password):
    """Generate a fresh salt and PBKDF2 hash for a plaintext password."""
    encoded = generate_password_hash(password, method=PASSWORD_METHOD, salt_length=PASSWORD_SALT_LENGTH)
    _method, salt, digest = encoded.split("$", 2)
    return PasswordCredential(salt=salt, hash=digest)


def verify_password(password, salt, password_hash):
    """Verify password against stored salt and hash (constant-time compare)."""
    if not password or not salt or not password_hash:
        return False
    return check_password_hash(f"{PASSWORD_METHOD}${salt}${password_hash}", password)


def generate_session_token(nbytes=SESSION_TOKEN_BYTES):
    return secrets.token_hex(nbytes)


def hash_session_token(token):
    """Digest stored server-side in place of the session token itself."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def generate_verification_token(nbytes=VERIFICATION_TOKEN_BYTES):
    return secrets.token_hex(nbytes)


def verification_expires_at(lifetime=VERIFICATION_TOKEN_LIFETIME):
    """Return ISO expiry for a new verification token (24 hours from now)."""
    return to_iso(utcnow() + lifetime)
