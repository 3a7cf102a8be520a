"""
User model definition
"""
from dataclasses import dataclass, asdict
from typing import Optional

from flask_login import UserMixin

ROLE_USER = "user"
ROLE_ADMIN = "admin"

# Never leave the server
PRIVATE_FIELDS = ("password_hash", "password_salt", "verification_token", "verification_token_expires_at")


@dataclass(eq=False)
class User(UserMixin):
    """User model for player accounts"""
    id: str
    email: str
    display_name: str
    password_hash: Optional[str] = None
    password_salt: Optional[str] = None
    google_id: Optional[str] = None
    verified: bool = False
    verification_token: Optional[str] = None
    verification_token_expires_at: Optional[str] = None
    role: str = ROLE_USER
    balance: float = 0.0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_record(cls, record):
        known = {k: v for k, v in record.items() if k in cls.__dataclass_fields__}
        return cls(**known)

    def to_record(self):
        return asdict(self)

    @property
    def is_admin(self):
        return self.role == ROLE_ADMIN

    @property
    def has_password(self):
        return bool(self.password_hash and self.password_salt)

    def __repr__(self):
        return f'<User {self.email}>'
