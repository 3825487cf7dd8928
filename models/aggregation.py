from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from models.ledger import Transaction

WEEKLY_TARGET = 9000000
THURSDAY = 4  # 0=Sun ... 6=Sat

def js_weekday(now: datetime) -> int:
    """Weekday with Sunday as 0 and Saturday as 6."""
    return (now.weekday() + 1) % 7

def week_offset(weekday: int) -> int:
    """Days back from `weekday` to the most recent Saturday (weeks start on Saturday)."""
    return weekday + 1 if weekday < 6 else weekday - 6

def _midnight_ms(now: datetime, days_back: int = 0) -> int:
    day = now.date() - timedelta(days=days_back)
    midnight = datetime(day.year, day.month, day.day, tzinfo=now.tzinfo)
    return int(midnight.timestamp() * 1000)

def start_of_today(now: datetime) -> int:
    return _midnight_ms(now)

def start_of_week(now: datetime) -> int:
    return _midnight_ms(now, week_offset(js_weekday(now)))

def daily_transactions(transactions: Iterable[Transaction], now: datetime) -> List[Transaction]:
    cutoff = start_of_today(now)
    return [t for t in transactions if t.timestamp >= cutoff]

def weekly_transactions(transactions: Iterable[Transaction], now: datetime) -> List[Transaction]:
    cutoff = start_of_week(now)
    return [t for t in transactions if t.timestamp >= cutoff]


@dataclass
class SalesSummary:
    total_sales_today: float
    total_items_today: int
    total_sales_this_week: float
    show_warning: bool
    start_of_today: int
    start_of_week: int
    weekly_target: float
    transactions_today: List[Transaction] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "total_sales_today": self.total_sales_today,
            "total_items_today": self.total_items_today,
            "total_sales_this_week": self.total_sales_this_week,
            "show_warning": self.show_warning,
            "start_of_today": self.start_of_today,
            "start_of_week": self.start_of_week,
            "weekly_target": self.weekly_target,
            "transactions_today": [t.to_dict() for t in self.transactions_today],
        }


def summarize(
    transactions: Iterable[Transaction],
    now: Optional[datetime] = None,
    weekly_target: float = WEEKLY_TARGET,
    warning_weekday: int = THURSDAY,
) -> SalesSummary:
    """
    Compute today's and this week's totals from scratch.

    `now` defaults to the local wall clock. The warning only fires on
    `warning_weekday` (Thursday unless configured otherwise) and only when the
    week's sales are still below `weekly_target`.
    """
    now = now or datetime.now()
    weekly = weekly_transactions(transactions, now)
    daily = daily_transactions(weekly, now)

    week_sales = sum(t.total for t in weekly)
    day_sales = sum(t.total for t in daily)
    day_items = sum(t.quantity for t in daily)

    show_warning = js_weekday(now) == warning_weekday and week_sales < weekly_target

    return SalesSummary(
        total_sales_today=day_sales,
        total_items_today=day_items,
        total_sales_this_week=week_sales,
        show_warning=show_warning,
        start_of_today=start_of_today(now),
        start_of_week=start_of_week(now),
        weekly_target=weekly_target,
        transactions_today=daily,
    )
