from datetime import date, datetime

import pytest

from domain.models import Sale, SaleItem
from services.analytics_service import (
    aggregate_items,
    best_periods,
    filter_by_period,
    group_by_period,
    period_label,
    search_sales,
    summarize,
    top_products,
    visible_sales,
    worst_periods,
)
from utils import timeutils


def sale(sale_id, created_at, total=0, items=(), items_count=None, hidden=False):
    items = list(items)
    return Sale(
        id=sale_id,
        items=items,
        total_amount=total,
        items_count=items_count if items_count is not None else sum(i.quantity for i in items),
        created_at=created_at,
        hidden=hidden,
    )


def item(name, size, qty, revenue, product_id="p"):
    return SaleItem(product_id, name, size, qty, revenue / qty if qty else 0, revenue)


def test_period_filter_includes_both_boundary_days():
    start_edge = sale("a", datetime(2026, 10, 1, 0, 0, 0))
    end_edge = sale("b", datetime(2026, 10, 5, 23, 59, 59, 999000))
    before = sale("c", datetime(2026, 9, 30, 23, 59, 59, 999000))
    after = sale("d", datetime(2026, 10, 6, 0, 0, 0))

    kept = filter_by_period([start_edge, end_edge, before, after], date(2026, 10, 1), date(2026, 10, 5))

    assert [s.id for s in kept] == ["a", "b"]


def test_period_filter_open_bounds():
    sales = [sale("a", datetime(2020, 1, 1)), sale("b", datetime(2030, 1, 1))]

    assert [s.id for s in filter_by_period(sales, start_date=date(2025, 1, 1))] == ["b"]
    assert [s.id for s in filter_by_period(sales, end_date=date(2025, 1, 1))] == ["a"]
    assert len(filter_by_period(sales)) == 2


def test_period_filter_and_missing_timestamps():
    undated = sale("x", None)
    assert filter_by_period([undated]) == [undated]
    assert filter_by_period([undated], start_date=date(2026, 1, 1)) == []


def test_summary_of_no_sales_is_zero():
    summary = summarize([])
    assert summary.revenue == 0
    assert summary.transactions == 0
    assert summary.items_sold == 0
    assert summary.average == 0


def test_summary_totals_include_hidden_sales():
    sales = [
        sale("a", datetime(2026, 10, 1), total=30000, items_count=2),
        sale("b", datetime(2026, 10, 2), total=10000, items_count=1, hidden=True),
    ]

    summary = summarize(sales)

    assert summary.revenue == 40000
    assert summary.transactions == 2
    assert summary.items_sold == 3
    assert summary.average == 20000
    assert [s.id for s in visible_sales(sales)] == ["a"]


def test_top_products_groups_by_name_and_size():
    sales = [
        sale("1", datetime(2026, 10, 1), items=[item("A", "M", 2, 20)]),
        sale("2", datetime(2026, 10, 1), items=[item("B", "M", 1, 50)]),
        sale("3", datetime(2026, 10, 2), items=[item("A", "M", 1, 10)]),
    ]

    groups = aggregate_items(sales)

    assert [(g.product_name, g.size, g.quantity, g.revenue) for g in groups] == [
        ("B", "M", 1, 50),
        ("A", "M", 3, 30),
    ]


def test_top_products_keeps_n():
    sales = [sale(str(i), datetime(2026, 10, 1), items=[item(f"P{i}", "M", 1, i)]) for i in range(1, 9)]

    top = top_products(sales, n=5)

    assert [g.product_name for g in top] == ["P8", "P7", "P6", "P5", "P4"]
    assert top_products([]) == []


def test_search_matches_name_id_and_sale_id():
    sales = [
        sale("abc-1", datetime(2026, 10, 1), items=[item("Robe Wax", "M", 1, 10, product_id="p-77")]),
        sale("def-2", datetime(2026, 10, 1), items=[item("Chemise", "L", 1, 10, product_id="p-88")]),
    ]

    assert [s.id for s in search_sales(sales, "ROBE")] == ["abc-1"]
    assert [s.id for s in search_sales(sales, "p-88")] == ["def-2"]
    assert [s.id for s in search_sales(sales, "def")] == ["def-2"]
    assert len(search_sales(sales, "  ")) == 2


@pytest.mark.parametrize(
    "granularity, expected",
    [
        ("day", "17/10/2026"),
        ("week", "semaine du 12/10/2026"),
        ("month", "octobre 2026"),
    ],
)
def test_period_labels(granularity, expected):
    sales = [sale("a", datetime(2026, 10, 17, 15, 0), total=100)]
    groups = group_by_period(sales, granularity)
    assert [g.key for g in groups] == [expected]


def test_month_label_with_accent():
    assert period_label(date(2026, 8, 1), "month") == "août 2026"


def test_group_by_period_sums_and_counts():
    sales = [
        sale("a", datetime(2026, 10, 12, 9), total=100),
        sale("b", datetime(2026, 10, 18, 20), total=50),
        sale("c", datetime(2026, 10, 19, 8), total=10),
        sale("d", None, total=999),
    ]

    weeks = group_by_period(sales, "week")

    assert [(w.key, w.revenue, w.transactions) for w in weeks] == [
        ("semaine du 12/10/2026", 150, 2),
        ("semaine du 19/10/2026", 10, 1),
    ]
    assert weeks[0].start == date(2026, 10, 12)


def test_group_by_period_rejects_unknown_granularity():
    with pytest.raises(ValueError):
        group_by_period([], "year")


def test_best_and_worst_periods():
    sales = [sale(str(d), datetime(2026, 10, d), total=d * 10) for d in range(1, 8)]

    best = best_periods(sales, "day", n=3)
    worst = worst_periods(sales, "day", n=3)

    assert [p.revenue for p in best] == [70, 60, 50]
    assert [p.revenue for p in worst] == [10, 20, 30]
    assert worst[0].key == "01/10/2026"


def test_worst_periods_with_fewer_groups_than_n():
    sales = [sale("a", datetime(2026, 10, 1), total=5), sale("b", datetime(2026, 10, 2), total=9)]

    assert [p.revenue for p in worst_periods(sales, "day", n=5)] == [5, 9]
    assert worst_periods([], "month") == []


def test_period_filter_uses_local_day_not_utc_day(monkeypatch):
    monkeypatch.setattr(timeutils, "TIMEZONE", "Europe/Paris")
    late = Sale.from_row({"id": "late", "items": [], "total_amount": 25000, "created_at": "2026-10-01T23:30:00+00:00"})

    assert [s.id for s in filter_by_period([late], date(2026, 10, 2), date(2026, 10, 2))] == ["late"]
    assert filter_by_period([late], date(2026, 10, 1), date(2026, 10, 1)) == []
    assert [p.key for p in group_by_period([late], "day")] == ["02/10/2026"]
