"""
Periodic sweep: flag new transactions matching confirmed recurring patterns.

Meant to be run from cron or a scheduler:

    python -m app.sweep [--detect] [--today YYYY-MM-DD]
"""

import argparse
import logging
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.database import SessionLocal
from app.models import Household
from app.services import recurring_service

logger = logging.getLogger(__name__)


def run_sweep(db: Session, detect: bool = False, today: Optional[date] = None) -> Dict[str, int]:
    """
    Apply confirmed patterns for every household, optionally re-running
    detection first. Households are processed one after another.
    """
    household_ids: List[str] = [h.id for h in db.query(Household.id).all()]

    totals = {"households": 0, "patterns_detected": 0, "patterns_applied": 0, "transactions_updated": 0}
    for household_id in household_ids:
        if detect:
            detected = recurring_service.detect_recurring_patterns(db, household_id, today)
            totals["patterns_detected"] += len(detected)

        result = recurring_service.apply_confirmed_patterns(db, household_id)
        totals["patterns_applied"] += result["patterns_applied"]
        totals["transactions_updated"] += result["transactions_updated"]
        totals["households"] += 1

    logger.info(
        "Sweep done: %d households, %d patterns detected, %d patterns applied, %d transactions updated",
        totals["households"], totals["patterns_detected"], totals["patterns_applied"], totals["transactions_updated"]
    )
    return totals


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Apply confirmed recurring patterns to new transactions.")
    parser.add_argument("--detect", action="store_true", help="re-run pattern detection first")
    parser.add_argument("--today", type=date.fromisoformat, default=None, help="detection date (YYYY-MM-DD)")
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.log_level)

    db = SessionLocal()
    try:
        run_sweep(db, detect=args.detect, today=args.today)
    finally:
        db.close()


if __name__ == "__main__":
    main()
