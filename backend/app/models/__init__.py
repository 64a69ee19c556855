"""
Database models package.
"""

from app.models.household import Household
from app.models.account import Account, AccountType
from app.models.category import Category
from app.models.transaction import Transaction
from app.models.recurring import RecurringPattern, Frequency, Direction

__all__ = [
    "Household",
    "Account",
    "AccountType",
    "Category",
    "Transaction",
    "RecurringPattern",
    "Frequency",
    "Direction",
]
