"""
Recurring pattern database model.
"""

import uuid
from datetime import datetime
from sqlalchemy import (
    Column, String, Boolean, DateTime, Date, Numeric, Integer, Enum, ForeignKey, Text,
    Index, UniqueConstraint, CheckConstraint,
)
from sqlalchemy.orm import relationship
import enum
from app.database import Base


class Frequency(str, enum.Enum):
    """Recurring frequency enumeration."""
    monthly = "monthly"


class Direction(str, enum.Enum):
    """Money flow of a pattern."""
    expense = "expense"
    income = "income"


class RecurringPattern(Base):
    """Detected recurring obligation (rent, salary, subscription) within a household."""

    __tablename__ = "recurring_patterns"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    household_id = Column(String(36), ForeignKey("households.id"), nullable=False)
    description = Column(Text, nullable=False)  # Normalized grouping key, unbounded like Transaction.description
    amount = Column(Numeric(12, 2), nullable=False)  # Signed average
    direction = Column(Enum(Direction), nullable=False)
    frequency = Column(Enum(Frequency), default=Frequency.monthly, nullable=False)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=True)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=True)
    last_seen_date = Column(Date, nullable=False)
    occurrences = Column(Integer, nullable=False)
    is_confirmed = Column(Boolean, default=False, nullable=False)
    is_dismissed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    household = relationship("Household", back_populates="recurring_patterns")
    category = relationship("Category", back_populates="recurring_patterns")
    account = relationship("Account", back_populates="recurring_patterns")

    __table_args__ = (
        # Concurrent detection runs for one household must not duplicate a pattern
        UniqueConstraint(
            "household_id", "description", "direction",
            name="uq_recurring_pattern_household_description_direction",
        ),
        CheckConstraint("occurrences >= 2", name="ck_recurring_pattern_occurrences"),
        Index("idx_recurring_pattern_household", "household_id"),
    )
