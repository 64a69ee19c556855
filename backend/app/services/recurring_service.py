"""Service for recurring transaction detection and management."""

import logging
from datetime import date
from typing import List, Optional, Dict

from sqlalchemy.orm import Session

from app.models.recurring import RecurringPattern, Direction
from app.models.transaction import Transaction
from app.repositories.recurring_repository import RecurringRepository
from app.services.recurring_detection import (
    build_candidates,
    detection_window,
    matching_band,
    normalize_description,
)

logger = logging.getLogger(__name__)


class PatternNotFoundError(ValueError):
    """Raised when a pattern id does not exist in the given household."""

    def __init__(self, pattern_id: str):
        super().__init__(f"Recurring pattern {pattern_id} not found")
        self.pattern_id = pattern_id


def detect_recurring_patterns(
    db: Session,
    household_id: str,
    today: Optional[date] = None
) -> List[RecurringPattern]:
    """
    Detect monthly recurring income and expenses in the last 6 months and
    create or refresh the matching patterns.

    Patterns whose description was dismissed are never recreated. Returns
    every pattern touched by this run, in detection order.
    """
    today = today or date.today()
    repo = RecurringRepository(db)

    date_from, date_to = detection_window(today)
    transactions = repo.list_transactions(household_id, date_from, date_to)
    dismissed = repo.list_dismissed_descriptions(household_id)

    candidates = build_candidates(transactions, dismissed)
    logger.debug(
        "Household %s: %d transactions between %s and %s gave %d candidates",
        household_id, len(transactions), date_from, date_to, len(candidates)
    )

    results: List[RecurringPattern] = []
    seen_ids = set()
    for candidate in candidates:
        # Two amount clusters of one description can share a key; the later upsert wins
        pattern = repo.upsert_pattern(household_id, candidate)
        if pattern.id not in seen_ids:
            seen_ids.add(pattern.id)
            results.append(pattern)

    logger.info(
        "Recurring detection for household %s: %d patterns created or refreshed",
        household_id, len(results)
    )
    return results


def list_patterns(db: Session, household_id: str) -> List[RecurringPattern]:
    """Non-dismissed patterns ordered by direction, then amount descending."""
    return RecurringRepository(db).list_patterns(household_id)


def get_pattern(db: Session, household_id: str, pattern_id: str) -> RecurringPattern:
    pattern = RecurringRepository(db).get_pattern(household_id, pattern_id)
    if pattern is None:
        raise PatternNotFoundError(pattern_id)
    return pattern


def confirm_pattern(db: Session, household_id: str, pattern_id: str) -> RecurringPattern:
    """Confirm a pattern and immediately flag its matching transactions as recurring."""
    pattern = get_pattern(db, household_id, pattern_id)
    pattern = RecurringRepository(db).set_pattern_status(pattern, is_confirmed=True, is_dismissed=False)
    mark_matching_transactions(db, household_id, pattern)
    return pattern


def dismiss_pattern(db: Session, household_id: str, pattern_id: str) -> RecurringPattern:
    """Dismiss a pattern so it is hidden and never detected again."""
    pattern = get_pattern(db, household_id, pattern_id)
    return RecurringRepository(db).set_pattern_status(pattern, is_confirmed=False, is_dismissed=True)


def mark_matching_transactions(
    db: Session,
    household_id: str,
    pattern: RecurringPattern
) -> int:
    """
    Flag transactions that match a pattern as recurring.

    A transaction matches when its amount is within 10% of the pattern amount
    and its normalized description equals the pattern's. The store only
    filters by amount; descriptions are compared here because normalization
    is not expressible in the query. Returns the number of transactions
    updated.
    """
    repo = RecurringRepository(db)
    lower_bound, upper_bound = matching_band(pattern.amount)

    in_band = repo.find_matchable_transactions(household_id, lower_bound, upper_bound)
    key = normalize_description(pattern.description)
    ids = [t.id for t in in_band if normalize_description(t.description) == key]

    count = repo.mark_transactions_recurring(ids)
    logger.debug(
        "Pattern %s matched %d of %d transactions in [%s, %s]",
        pattern.id, count, len(in_band), lower_bound, upper_bound
    )
    return count


def apply_confirmed_patterns(db: Session, household_id: str) -> Dict[str, int]:
    """Run the matcher for every confirmed, non-dismissed pattern of a household."""
    confirmed = RecurringRepository(db).list_confirmed_patterns(household_id)

    total_updated = 0
    for pattern in confirmed:
        total_updated += mark_matching_transactions(db, household_id, pattern)

    logger.info(
        "Applied %d confirmed patterns for household %s, %d transactions updated",
        len(confirmed), household_id, total_updated
    )
    return {"patterns_applied": len(confirmed), "transactions_updated": total_updated}


def get_fixed_transactions(
    db: Session,
    household_id: str,
    direction: Direction = Direction.expense
) -> List[Transaction]:
    """Transactions flagged as recurring (fixed expenses or fixed income), newest first."""
    query = db.query(Transaction).filter(
        Transaction.household_id == household_id,
        Transaction.is_recurring == True,
    )
    if direction == Direction.income:
        query = query.filter(Transaction.amount > 0)
    else:
        query = query.filter(Transaction.amount < 0)

    return query.order_by(Transaction.date.desc()).all()
