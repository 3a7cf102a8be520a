"""
Transaction model definition
"""
from dataclasses import dataclass, asdict
from typing import Optional


@dataclass(frozen=True)
class Transaction:
    """Wallet credit recorded for a captured payment. Append-only."""
    id: str
    user_id: str
    order_id: str
    euros: float
    amount_paid: float
    currency: Optional[str]
    status: str
    created_at: str
    provider: str = "paypal"

    @classmethod
    def from_record(cls, record):
        known = {k: v for k, v in record.items() if k in cls.__dataclass_fields__}
        return cls(**known)

    def to_record(self):
        return asdict(self)

    def __repr__(self):
        return f'<Transaction {self.order_id}>'
