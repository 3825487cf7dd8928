from datetime import datetime, timedelta

from models.aggregation import (
    summarize,
    week_offset,
    js_weekday,
    start_of_today,
    start_of_week,
    daily_transactions,
    weekly_transactions,
)
from models.ledger import Transaction

# 2025-09-04 is a Thursday; its custom week started on Saturday 2025-08-30.
THURSDAY_NOON = datetime(2025, 9, 4, 12, 0)
FRIDAY_NOON = datetime(2025, 9, 5, 12, 0)


def ms(dt):
    return int(dt.timestamp() * 1000)


def tx(tx_id, qty, price, when):
    return Transaction(id=tx_id, name=tx_id, quantity=qty, price=price, timestamp=ms(when))


def test_week_offset_table():
    # Sun=0 ... Sat=6
    assert [week_offset(d) for d in range(7)] == [1, 2, 3, 4, 5, 6, 0]


def test_js_weekday():
    assert js_weekday(datetime(2025, 9, 7)) == 0  # Sunday
    assert js_weekday(THURSDAY_NOON) == 4
    assert js_weekday(datetime(2025, 9, 6)) == 6  # Saturday


def test_boundaries():
    assert start_of_today(THURSDAY_NOON) == ms(datetime(2025, 9, 4))
    assert start_of_week(THURSDAY_NOON) == ms(datetime(2025, 8, 30))
    saturday = datetime(2025, 9, 6, 9, 30)
    assert start_of_week(saturday) == ms(datetime(2025, 9, 6))
    sunday = datetime(2025, 9, 7, 23, 59)
    assert start_of_week(sunday) == ms(datetime(2025, 9, 6))


def test_daily_and_weekly_totals():
    txs = [
        tx("today", 2, 18000, THURSDAY_NOON - timedelta(hours=1)),
        tx("yesterday", 1, 25000, THURSDAY_NOON - timedelta(days=1)),
    ]
    s = summarize(txs, now=THURSDAY_NOON)
    assert s.total_items_today == 2
    assert s.total_sales_today == 36000
    assert s.total_sales_this_week == 61000
    assert [t.id for t in s.transactions_today] == ["today"]


def test_records_before_week_start_are_ignored():
    txs = [
        tx("this-sat", 1, 1000, datetime(2025, 8, 30, 0, 0)),
        tx("last-fri", 1, 5000, datetime(2025, 8, 29, 23, 59)),
    ]
    s = summarize(txs, now=THURSDAY_NOON)
    assert s.total_sales_this_week == 1000
    assert s.total_sales_today == 0


def test_daily_is_subset_of_weekly():
    txs = [tx(f"t{i}", 1, 1000 * (i + 1), THURSDAY_NOON - timedelta(hours=13 * i)) for i in range(20)]
    daily = daily_transactions(txs, THURSDAY_NOON)
    weekly = weekly_transactions(txs, THURSDAY_NOON)
    assert set(daily) <= set(weekly)
    s = summarize(txs, now=THURSDAY_NOON)
    assert s.total_sales_today <= s.total_sales_this_week


def test_warning_only_on_thursday_below_target():
    txs = [tx("big", 1, 8_000_000, datetime(2025, 9, 1, 10, 0))]
    assert summarize(txs, now=THURSDAY_NOON).show_warning is True
    assert summarize(txs, now=FRIDAY_NOON).show_warning is False


def test_no_warning_when_target_met():
    txs = [tx("big", 1, 9_000_000, datetime(2025, 9, 1, 10, 0))]
    assert summarize(txs, now=THURSDAY_NOON).show_warning is False
    assert summarize(txs, now=THURSDAY_NOON, weekly_target=10_000_000).show_warning is True


def test_summary_to_dict():
    txs = [tx("today", 2, 18000, THURSDAY_NOON)]
    d = summarize(txs, now=THURSDAY_NOON).to_dict()
    assert d["total_sales_today"] == 36000
    assert d["weekly_target"] == 9000000
    assert d["transactions_today"][0]["id"] == "today"
