"""Service for alert detection.

Alerts are computed on demand from the ledger and the recurring patterns;
nothing is stored. Each check returns its own list and ``generate_alerts``
concatenates them.
"""

import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Dict, Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.config import settings
from app.models.recurring import RecurringPattern, Frequency
from app.models.transaction import Transaction
from app.schemas.alert import AlertType, Severity
from app.services.recurring_detection import subtract_months

logger = logging.getLogger(__name__)

SEVERITY_ORDER = {Severity.critical: 0, Severity.warning: 1, Severity.info: 2}

RECENT_DAYS = 7
AVERAGE_LOOKBACK_MONTHS = 3
RECENT_CANDIDATES = 5
WHOLE = Decimal("1")


def _alert(
    alert_id: str,
    alert_type: AlertType,
    severity: Severity,
    data: Dict[str, Any],
    created_at: datetime
) -> Dict[str, Any]:
    return {
        "id": alert_id,
        "type": alert_type,
        "severity": severity,
        "title": alert_type.value,
        "description": f"{alert_type.value}_desc",
        "data": data,
        "created_at": created_at,
    }


def _whole(value: Decimal) -> int:
    """Round to a whole currency unit, halves up."""
    return int(value.quantize(WHOLE, rounding=ROUND_HALF_UP))


def get_average_expense(db: Session, household_id: str, date_from: date, date_to: date) -> Decimal:
    """Average expense magnitude for dates in [date_from, date_to); 0 when there are none."""
    result = db.query(func.avg(Transaction.amount)).filter(
        Transaction.household_id == household_id,
        Transaction.amount < 0,
        Transaction.date >= date_from,
        Transaction.date < date_to,
    ).scalar()

    if result is None:
        return Decimal("0")
    return abs(Decimal(str(result)))


def check_unusual_expenses(db: Session, household_id: str, today: date) -> List[Dict[str, Any]]:
    """Recent expenses far above the household's usual expense size."""
    recent_from = today - timedelta(days=RECENT_DAYS)
    average_from = subtract_months(today, AVERAGE_LOOKBACK_MONTHS)

    average = get_average_expense(db, household_id, average_from, recent_from)
    if average == 0:
        # No baseline to compare against
        return []

    recent = db.query(Transaction).filter(
        Transaction.household_id == household_id,
        Transaction.amount < 0,
        Transaction.date >= recent_from,
    ).order_by(Transaction.amount.asc()).limit(RECENT_CANDIDATES).all()

    multiplier = Decimal(settings.unusual_expense_multiplier)
    minimum = Decimal(settings.unusual_expense_minimum)
    created_at = datetime.combine(today, time.min)

    alerts = []
    for txn in recent:
        amount = abs(Decimal(txn.amount))
        if amount > average * multiplier and amount > minimum:
            alerts.append(_alert(
                f"unusual-{txn.id}",
                AlertType.unusual_expense,
                Severity.info,
                {
                    "amount": _whole(amount),
                    "description": txn.description,
                    "average": _whole(average),
                },
                created_at,
            ))
    return alerts


def check_missed_recurring(db: Session, household_id: str, today: date) -> List[Dict[str, Any]]:
    """Confirmed monthly patterns that have not shown up for too long."""
    patterns = db.query(RecurringPattern).filter(
        RecurringPattern.household_id == household_id,
        RecurringPattern.is_confirmed == True,
        RecurringPattern.is_dismissed == False,
        RecurringPattern.frequency == Frequency.monthly,
    ).all()

    created_at = datetime.combine(today, time.min)

    alerts = []
    for pattern in patterns:
        days_since = (today - pattern.last_seen_date).days
        if days_since > settings.missed_recurring_days:
            alerts.append(_alert(
                f"recurring-{pattern.id}",
                AlertType.recurring_missed,
                Severity.info,
                {"description": pattern.description, "days_since": days_since},
                created_at,
            ))
    return alerts


def generate_alerts(
    db: Session,
    household_id: str,
    today: Optional[date] = None
) -> List[Dict[str, Any]]:
    """All current alerts for a household, most severe first."""
    today = today or date.today()

    alerts = (
        check_unusual_expenses(db, household_id, today)
        + check_missed_recurring(db, household_id, today)
    )
    alerts.sort(key=lambda a: SEVERITY_ORDER[a["severity"]])

    logger.debug("Household %s: %d alerts generated", household_id, len(alerts))
    return alerts
