"""Pydantic schemas for recurring patterns."""

from pydantic import BaseModel, computed_field
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal

from app.models.recurring import Direction, Frequency
from app.services.recurring_detection import next_expected_date as calculate_next_expected


class RecurringPatternResponse(BaseModel):
    id: str
    household_id: str
    description: str
    amount: Decimal
    direction: Direction
    frequency: Frequency
    category_id: Optional[str] = None
    account_id: Optional[str] = None
    last_seen_date: date
    occurrences: int
    is_confirmed: bool
    is_dismissed: bool
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def next_expected_date(self) -> date:
        return calculate_next_expected(self.last_seen_date)

    model_config = {"from_attributes": True}


class DetectionResponse(BaseModel):
    """Response from recurring detection."""
    patterns: List[RecurringPatternResponse]
    total_found: int


class ApplyConfirmedResponse(BaseModel):
    patterns_applied: int
    transactions_updated: int


class FixedTransaction(BaseModel):
    """A transaction flagged as recurring, as shown in fixed expense/income lists."""
    id: str
    date: date
    description: str
    amount: Decimal
    category_id: Optional[str] = None
    category_name: Optional[str] = None
