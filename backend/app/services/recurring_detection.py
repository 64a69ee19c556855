"""
Rule-based detection of monthly recurring transactions.

Every function here is pure: it takes transactions (anything exposing
``id``, ``date``, ``amount``, ``description``, ``category_id`` and
``account_id``, normally ``Transaction`` rows) and returns new values without
touching the database. ``recurring_service`` feeds it from the repository and
persists what it returns.

Pipeline per household:

    normalize -> group by description -> split income/expense
    -> cluster by amount -> longest monthly chain -> aggregate
"""

import calendar
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple, TypeVar

from app.models.recurring import Direction

T = TypeVar("T")

LOOKBACK_MONTHS = 6
AMOUNT_TOLERANCE = Decimal("0.10")
MIN_MONTHLY_GAP_DAYS = 25
MAX_MONTHLY_GAP_DAYS = 35
MIN_OCCURRENCES = 2

SECONDS_PER_DAY = 86400
CENTS = Decimal("0.01")


@dataclass(frozen=True)
class PatternCandidate:
    """A recurring pattern derived from one monthly chain, not yet persisted."""
    description: str
    amount: Decimal
    direction: Direction
    category_id: Optional[str]
    account_id: Optional[str]
    last_seen_date: date
    occurrences: int


def normalize_description(description: Optional[str]) -> str:
    """Grouping key for a transaction description: trimmed and lower-cased."""
    if not description:
        return ""
    return description.strip().lower()


def subtract_months(day: date, months: int) -> date:
    """Same day N calendar months earlier, clamped to the end of a shorter month."""
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def add_months(day: date, months: int) -> date:
    """Same day N calendar months later, clamped to the end of a shorter month."""
    return subtract_months(day, -months)


def detection_window(today: date) -> Tuple[date, date]:
    """Inclusive (from, to) date range of transactions considered by detection."""
    return subtract_months(today, LOOKBACK_MONTHS), today


def group_transactions(
    transactions: Iterable[T],
    dismissed_descriptions: Set[str]
) -> "OrderedDict[str, List[T]]":
    """
    Bucket transactions by normalized description.

    Empty keys and dismissed descriptions are dropped. Insertion order is
    preserved, so date-ascending input gives date-ascending groups.
    """
    groups: "OrderedDict[str, List[T]]" = OrderedDict()
    for txn in transactions:
        key = normalize_description(txn.description)
        if not key or key in dismissed_descriptions:
            continue
        groups.setdefault(key, []).append(txn)
    return groups


def split_by_sign(group: Sequence[T]) -> Tuple[List[T], List[T]]:
    """Split a group into (income, expense). Zero amounts belong to neither."""
    income = [t for t in group if t.amount > 0]
    expense = [t for t in group if t.amount < 0]
    return income, expense


def cluster_by_amount(transactions: Sequence[T]) -> List[List[T]]:
    """
    Greedy first-fit clustering by amount magnitude.

    Transactions are visited smallest magnitude first. Each one joins the
    first cluster (in creation order) whose average magnitude is zero or
    within 10% of its own magnitude; otherwise it starts a new cluster.
    This is a heuristic, not an optimal partition: a later cluster may fit
    better and is still not chosen. All clusters are returned, including
    singletons.
    """
    if not transactions:
        return []

    ordered = sorted(transactions, key=lambda t: abs(t.amount))

    clusters: List[List[T]] = [[ordered[0]]]
    totals: List[Decimal] = [abs(ordered[0].amount)]

    for txn in ordered[1:]:
        magnitude = abs(txn.amount)
        for index, cluster in enumerate(clusters):
            total = totals[index]
            # |magnitude - total/n| / (total/n) <= tolerance, kept exact
            if total == 0 or abs(magnitude * len(cluster) - total) <= total * AMOUNT_TOLERANCE:
                cluster.append(txn)
                totals[index] = total + magnitude
                break
        else:
            clusters.append([txn])
            totals.append(magnitude)

    return clusters


def days_between(earlier: date, later: date) -> int:
    """Whole days between two dates or datetimes, rounded half-up."""
    seconds = abs((later - earlier).total_seconds())
    return int(seconds / SECONDS_PER_DAY + 0.5)


def is_monthly_gap(days: int) -> bool:
    return MIN_MONTHLY_GAP_DAYS <= days <= MAX_MONTHLY_GAP_DAYS


def find_monthly_chain(cluster: Sequence[T]) -> List[T]:
    """
    Longest run of transactions spaced roughly one month apart.

    A chain is grown greedily from every start index: a later transaction is
    appended when it is 25-35 days after the chain's current last element,
    otherwise it is skipped. The longest chain wins; on a tie the earliest
    start is kept. Returns an empty list when no chain reaches two members.
    """
    ordered = sorted(cluster, key=lambda t: t.date)
    if len(ordered) < MIN_OCCURRENCES:
        return []

    best: List[T] = []
    for start in range(len(ordered)):
        chain = [ordered[start]]
        for candidate in ordered[start + 1:]:
            if is_monthly_gap(days_between(chain[-1].date, candidate.date)):
                chain.append(candidate)
        if len(chain) > len(best):
            best = chain

    return best if len(best) >= MIN_OCCURRENCES else []


def most_common(values: Iterable[Optional[T]]) -> Optional[T]:
    """Most frequent non-null value; ties go to the value seen first."""
    counts: Dict[T, int] = {}
    for value in values:
        if value is None:
            continue
        counts[value] = counts.get(value, 0) + 1

    best: Optional[T] = None
    best_count = 0
    for value, count in counts.items():
        if count > best_count:
            best, best_count = value, count
    return best


def aggregate_chain(description: str, chain: Sequence[T]) -> Optional[PatternCandidate]:
    """Reduce a monthly chain to a pattern candidate, or None if it is too short."""
    if len(chain) < MIN_OCCURRENCES:
        return None

    total = sum((Decimal(t.amount) for t in chain), Decimal("0"))
    average = (total / len(chain)).quantize(CENTS, rounding=ROUND_HALF_UP)
    last = chain[-1]

    account_id = most_common(t.account_id for t in chain)
    if account_id is None:
        account_id = last.account_id

    return PatternCandidate(
        description=description,
        amount=average,
        direction=Direction.income if average > 0 else Direction.expense,
        category_id=most_common(t.category_id for t in chain),
        account_id=account_id,
        last_seen_date=last.date,
        occurrences=len(chain),
    )


def candidates_for_group(description: str, group: Sequence[T]) -> List[PatternCandidate]:
    """All pattern candidates found in one description group."""
    if len(group) < MIN_OCCURRENCES:
        return []

    candidates: List[PatternCandidate] = []
    for sub_group in split_by_sign(group):
        if len(sub_group) < MIN_OCCURRENCES:
            continue
        for cluster in cluster_by_amount(sub_group):
            if len(cluster) < MIN_OCCURRENCES:
                continue
            candidate = aggregate_chain(description, find_monthly_chain(cluster))
            if candidate is not None:
                candidates.append(candidate)
    return candidates


def build_candidates(
    transactions: Iterable[T],
    dismissed_descriptions: Iterable[str]
) -> List[PatternCandidate]:
    """Run the whole pipeline over a household's transaction window."""
    dismissed = {normalize_description(d) for d in dismissed_descriptions}
    groups = group_transactions(transactions, dismissed)

    candidates: List[PatternCandidate] = []
    for description, group in groups.items():
        candidates.extend(candidates_for_group(description, group))
    return candidates


def matching_band(amount: Decimal) -> Tuple[Decimal, Decimal]:
    """Inclusive (lower, upper) amount range matched by a pattern, for either sign."""
    amount = Decimal(amount)
    tolerance = abs(amount) * AMOUNT_TOLERANCE
    low, high = amount - tolerance, amount + tolerance
    # Bounds are rounded to cents
    low = low.quantize(CENTS, rounding=ROUND_HALF_UP)
    high = high.quantize(CENTS, rounding=ROUND_HALF_UP)
    return min(low, high), max(low, high)


def next_expected_date(last_seen_date: date) -> date:
    """When a monthly pattern should show up next."""
    return add_months(last_seen_date, 1)
