"""
Account database model.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship
import enum
from app.database import Base


class AccountType(str, enum.Enum):
    """Account type enumeration."""
    credit = "credit"
    debit = "debit"
    bank = "bank"
    cash = "cash"
    other = "other"


class Account(Base):
    """Account model."""

    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    household_id = Column(String(36), ForeignKey("households.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    account_type = Column(Enum(AccountType), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    household = relationship("Household", back_populates="accounts")
    transactions = relationship("Transaction", back_populates="account")
    recurring_patterns = relationship("RecurringPattern", back_populates="account")
