"""
Models package for the Euro Arcade application
"""
from models.store import RecordStore

store = RecordStore()

# Import all models here so callers can use models.<Name>
from models.user import User
from models.session import Session
from models.transaction import Transaction

__all__ = [
    'store',
    'User',
    'Session',
    'Transaction',
]
