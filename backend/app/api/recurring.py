"""API endpoints for recurring pattern management."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List

from app.dependencies import get_db, get_household_id
from app.models.recurring import Direction
from app.schemas.recurring import (
    RecurringPatternResponse,
    DetectionResponse,
    ApplyConfirmedResponse,
    FixedTransaction,
)
from app.services import recurring_service
from app.services.recurring_service import PatternNotFoundError

router = APIRouter(prefix="/recurring", tags=["recurring"])


@router.get("", response_model=List[RecurringPatternResponse])
def list_patterns(
    household_id: str = Depends(get_household_id),
    db: Session = Depends(get_db)
):
    """List detected (non-dismissed) recurring patterns."""
    return recurring_service.list_patterns(db, household_id)


@router.post("/detect", response_model=DetectionResponse)
def detect_patterns(
    household_id: str = Depends(get_household_id),
    db: Session = Depends(get_db)
):
    """
    Analyze the last 6 months of transactions and create or refresh
    monthly recurring income and expense patterns.
    """
    patterns = recurring_service.detect_recurring_patterns(db, household_id)
    return DetectionResponse(
        patterns=[RecurringPatternResponse.model_validate(p) for p in patterns],
        total_found=len(patterns)
    )


@router.post("/apply-confirmed", response_model=ApplyConfirmedResponse)
def apply_confirmed(
    household_id: str = Depends(get_household_id),
    db: Session = Depends(get_db)
):
    """Flag new transactions matching any confirmed pattern as recurring."""
    return ApplyConfirmedResponse(**recurring_service.apply_confirmed_patterns(db, household_id))


@router.get("/fixed", response_model=List[FixedTransaction])
def list_fixed_transactions(
    direction: Direction = Query(Direction.expense),
    household_id: str = Depends(get_household_id),
    db: Session = Depends(get_db)
):
    """Transactions flagged as recurring: fixed expenses or fixed income."""
    transactions = recurring_service.get_fixed_transactions(db, household_id, direction)
    return [
        FixedTransaction(
            id=t.id,
            date=t.date,
            description=t.description,
            amount=t.amount,
            category_id=t.category_id,
            category_name=t.category.name if t.category else None,
        )
        for t in transactions
    ]


@router.post("/{pattern_id}/confirm", response_model=RecurringPatternResponse)
def confirm_pattern(
    pattern_id: str,
    household_id: str = Depends(get_household_id),
    db: Session = Depends(get_db)
):
    """Confirm a pattern and mark matching transactions as recurring."""
    try:
        return recurring_service.confirm_pattern(db, household_id, pattern_id)
    except PatternNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{pattern_id}/dismiss", response_model=RecurringPatternResponse)
def dismiss_pattern(
    pattern_id: str,
    household_id: str = Depends(get_household_id),
    db: Session = Depends(get_db)
):
    """Dismiss a pattern so it won't appear or be detected again."""
    try:
        return recurring_service.dismiss_pattern(db, household_id, pattern_id)
    except PatternNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
