"""
Transaction schemas.
"""

from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime
from decimal import Decimal


class TransactionResponse(BaseModel):
    id: str
    household_id: str
    date: date
    amount: Decimal
    description: str
    category_id: Optional[str]
    account_id: str
    is_recurring: bool
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TransactionListResponse(BaseModel):
    items: list[TransactionResponse]
    total: int
    page: int
    pages: int
