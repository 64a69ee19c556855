"""
Household database model.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from app.database import Base


class Household(Base):
    """Household (or business) that scopes all ledger data."""

    __tablename__ = "households"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    accounts = relationship("Account", back_populates="household")
    transactions = relationship("Transaction", back_populates="household")
    recurring_patterns = relationship("RecurringPattern", back_populates="household")
