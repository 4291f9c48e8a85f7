"""Financial aggregation over transaction rows already filtered by the store"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, Iterable, List, Optional

from storefront_gateway.domain.models import Amount, MarginPoint, TransactionRow
from storefront_gateway.utils.date_utils import day_key

UNCATEGORIZED = "Uncategorized"


def _amount(row: TransactionRow) -> Amount:
    return row.amount if row.amount is not None else 0


def sum_amounts(rows: Iterable[TransactionRow]) -> Amount:
    """
    Scalar total of `amount` over the given rows.

    Status/type filtering is the caller's job. Missing amounts count as 0
    and an empty input yields 0.
    """
    total: Amount = 0
    for row in rows:
        total += _amount(row)
    return total


def group_sum(
    rows: Iterable[TransactionRow],
    key: Callable[[TransactionRow], Optional[str]],
) -> Dict[str, Amount]:
    """
    Sum amounts per group key in a single pass.

    Rows whose key is missing fall into "Uncategorized".
    """
    totals: Dict[str, Amount] = {}
    for row in rows:
        group = key(row) or UNCATEGORIZED
        if group not in totals:
            totals[group] = 0
        totals[group] += _amount(row)
    return totals


def revenue_by_category(rows: Iterable[TransactionRow]) -> Dict[str, Amount]:
    return group_sum(rows, key=lambda row: row.category)


def total_profit(
    income_rows: Iterable[TransactionRow],
    expense_rows: Iterable[TransactionRow],
) -> Amount:
    return sum_amounts(income_rows) - sum_amounts(expense_rows)


def cash_flow_by_day(rows: Iterable[TransactionRow]) -> Dict[str, Amount]:
    """
    Net cash flow per UTC day: income adds, expense subtracts.

    Rows of any other type still register their day with a zero balance.
    """
    flow: Dict[str, Amount] = {}
    for row in rows:
        day = day_key(row.created_at)
        if day not in flow:
            flow[day] = 0
        if row.type == "income":
            flow[day] += _amount(row)
        elif row.type == "expense":
            flow[day] -= _amount(row)
    return flow


def profit_margin_series(rows: Iterable[TransactionRow]) -> List[MarginPoint]:
    """
    Daily profit margin in percent, sorted by date.

    margin = (income - expense) / income * 100, rounded to 2 decimals.
    Days without income have a margin of 0.
    """
    by_day: Dict[str, Dict[str, Amount]] = {}
    for row in rows:
        day = day_key(row.created_at)
        if day not in by_day:
            by_day[day] = {"income": 0, "expense": 0}
        if row.type in ("income", "expense"):
            by_day[day][row.type] += _amount(row)

    series = []
    for day, totals in by_day.items():
        income = Decimal(str(totals["income"]))
        expense = Decimal(str(totals["expense"]))
        margin = (income - expense) / income * 100 if income > 0 else Decimal(0)
        series.append(
            MarginPoint(date=day, margin=float(margin.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)))
        )

    return sorted(series, key=lambda point: point.date)


def to_cents(amount: Amount) -> int:
    """Convert a currency amount to integer minor units, rounding half up"""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
