"""
Session model definition
"""
from dataclasses import dataclass, asdict

from utils.dates import utcnow, from_iso


@dataclass
class Session:
    """Server-side login session. Only the SHA-256 of the token is stored."""
    token_hash: str
    user_id: str
    created_at: str
    expires_at: str

    @classmethod
    def from_record(cls, record):
        return cls(
            token_hash=record["token_hash"],
            user_id=record["user_id"],
            created_at=record.get("created_at"),
            expires_at=record["expires_at"],
        )

    def to_record(self):
        return asdict(self)

    def is_expired(self, now=None):
        return (now or utcnow()) >= from_iso(self.expires_at)

    def __repr__(self):
        return f'<Session user={self.user_id}>'
