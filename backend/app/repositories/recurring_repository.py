"""SQLAlchemy access layer for recurring pattern detection.

Wraps every read and write the detector needs behind one household-agnostic
class; callers pass the household id explicitly on each call. Each write is
committed on its own, so a failure part-way through a detection run leaves
earlier patterns in place.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.recurring import RecurringPattern, Direction, Frequency
from app.models.transaction import Transaction
from app.services.recurring_detection import PatternCandidate

logger = logging.getLogger(__name__)


class RecurringRepository:
    """Reads ledger transactions and reads/writes recurring patterns."""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Ledger
    # ------------------------------------------------------------------

    def list_transactions(
        self,
        household_id: str,
        date_from: date,
        date_to: date
    ) -> List[Transaction]:
        """Transactions dated within [date_from, date_to], oldest first."""
        return self.db.query(Transaction).filter(
            Transaction.household_id == household_id,
            Transaction.date >= date_from,
            Transaction.date <= date_to,
        ).order_by(
            Transaction.date.asc(),
            Transaction.created_at.asc(),
            Transaction.id.asc(),
        ).all()

    def find_matchable_transactions(
        self,
        household_id: str,
        lower_bound: Decimal,
        upper_bound: Decimal
    ) -> List[Transaction]:
        """Not-yet-recurring transactions whose amount lies in the inclusive band."""
        return self.db.query(Transaction).filter(
            Transaction.household_id == household_id,
            Transaction.is_recurring == False,
            Transaction.amount >= lower_bound,
            Transaction.amount <= upper_bound,
        ).all()

    def mark_transactions_recurring(self, transaction_ids: Sequence[str]) -> int:
        if not transaction_ids:
            return 0

        count = self.db.query(Transaction).filter(
            Transaction.id.in_(list(transaction_ids))
        ).update(
            {Transaction.is_recurring: True},
            synchronize_session=False
        )
        self.db.commit()
        return count

    # ------------------------------------------------------------------
    # Patterns
    # ------------------------------------------------------------------

    def list_dismissed_descriptions(self, household_id: str) -> List[str]:
        rows = self.db.query(RecurringPattern.description).filter(
            RecurringPattern.household_id == household_id,
            RecurringPattern.is_dismissed == True,
        ).all()
        return [row.description for row in rows]

    def get_pattern(self, household_id: str, pattern_id: str) -> Optional[RecurringPattern]:
        return self.db.query(RecurringPattern).filter(
            RecurringPattern.household_id == household_id,
            RecurringPattern.id == pattern_id,
        ).first()

    def find_pattern(
        self,
        household_id: str,
        description: str,
        direction: Direction
    ) -> Optional[RecurringPattern]:
        return self.db.query(RecurringPattern).filter(
            RecurringPattern.household_id == household_id,
            RecurringPattern.description == description,
            RecurringPattern.direction == direction,
        ).first()

    def list_patterns(self, household_id: str) -> List[RecurringPattern]:
        """Non-dismissed patterns, expenses before income, larger amounts first."""
        return self.db.query(RecurringPattern).filter(
            RecurringPattern.household_id == household_id,
            RecurringPattern.is_dismissed == False,
        ).order_by(
            RecurringPattern.direction.asc(),
            RecurringPattern.amount.desc(),
        ).all()

    def list_confirmed_patterns(self, household_id: str) -> List[RecurringPattern]:
        return self.db.query(RecurringPattern).filter(
            RecurringPattern.household_id == household_id,
            RecurringPattern.is_confirmed == True,
            RecurringPattern.is_dismissed == False,
        ).all()

    def upsert_pattern(self, household_id: str, candidate: PatternCandidate) -> RecurringPattern:
        """
        Insert the candidate or overwrite the stored pattern with the same
        (household, description, direction) key.

        If another detection run inserts the same key between our lookup and
        our insert, the unique constraint rejects ours and the winner's row is
        updated instead.
        """
        existing = self.find_pattern(household_id, candidate.description, candidate.direction)
        if existing is not None:
            return self._refresh(existing, candidate)

        pattern = RecurringPattern(
            household_id=household_id,
            description=candidate.description,
            amount=candidate.amount,
            direction=candidate.direction,
            frequency=Frequency.monthly,
            category_id=candidate.category_id,
            account_id=candidate.account_id,
            last_seen_date=candidate.last_seen_date,
            occurrences=candidate.occurrences,
            is_confirmed=False,
            is_dismissed=False,
        )
        self.db.add(pattern)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            existing = self.find_pattern(household_id, candidate.description, candidate.direction)
            if existing is None:
                raise
            logger.info(
                "Pattern %r (%s) was created concurrently, updating it instead",
                candidate.description, candidate.direction.value
            )
            return self._refresh(existing, candidate)

        self.db.refresh(pattern)
        return pattern

    def set_pattern_status(
        self,
        pattern: RecurringPattern,
        is_confirmed: bool,
        is_dismissed: bool
    ) -> RecurringPattern:
        pattern.is_confirmed = is_confirmed
        pattern.is_dismissed = is_dismissed
        self.db.commit()
        self.db.refresh(pattern)
        return pattern

    def _refresh(self, pattern: RecurringPattern, candidate: PatternCandidate) -> RecurringPattern:
        pattern.amount = candidate.amount
        pattern.last_seen_date = candidate.last_seen_date
        pattern.occurrences = candidate.occurrences
        pattern.category_id = candidate.category_id
        pattern.account_id = candidate.account_id
        self.db.commit()
        self.db.refresh(pattern)
        return pattern
