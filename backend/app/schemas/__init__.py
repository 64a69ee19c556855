"""
Pydantic schemas package.
"""

from app.schemas.alert import (
    AlertType,
    Severity,
    AlertResponse,
    AlertsListResponse,
)
from app.schemas.recurring import (
    RecurringPatternResponse,
    DetectionResponse,
    ApplyConfirmedResponse,
    FixedTransaction,
)
from app.schemas.transaction import (
    TransactionResponse,
    TransactionListResponse,
)

__all__ = [
    "AlertType",
    "Severity",
    "AlertResponse",
    "AlertsListResponse",
    "RecurringPatternResponse",
    "DetectionResponse",
    "ApplyConfirmedResponse",
    "FixedTransaction",
    "TransactionResponse",
    "TransactionListResponse",
]
