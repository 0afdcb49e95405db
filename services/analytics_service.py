# services/analytics_service.py
import logging
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from domain.models import ItemAggregate, PeriodAggregate, Sale, SalesSummary
from utils.settings import TOP_N

logger = logging.getLogger(__name__)

GRANULARITIES = ("day", "week", "month")

MONTHS_FR = (
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
)


def filter_by_period(
        sales: Iterable[Sale],
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
) -> List[Sale]:
    """
    Sales created between start_date 00:00:00 and end_date 23:59:59.999, both days included.
    A missing bound leaves that side open. Sales without a timestamp only pass
    when no bound is set.
    """
    lower = datetime.combine(start_date, time.min) if start_date else None
    upper = datetime.combine(end_date, time.max) if end_date else None

    result = []
    for sale in sales:
        ts = sale.timestamp
        if ts is None:
            if lower is None and upper is None:
                result.append(sale)
            continue
        if lower is not None and ts < lower:
            continue
        if upper is not None and ts > upper:
            continue
        result.append(sale)
    return result


def search_sales(sales: Iterable[Sale], query: str) -> List[Sale]:
    """Case-insensitive match on an item's product name or id, or the sale id."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(sales)

    return [
        sale for sale in sales
        if needle in sale.id.lower()
        or any(
            needle in item.product_name.lower() or needle in item.product_id.lower()
            for item in sale.items
        )
    ]


def visible_sales(sales: Iterable[Sale]) -> List[Sale]:
    return [sale for sale in sales if not sale.hidden]


def summarize(sales: Iterable[Sale]) -> SalesSummary:
    """Revenue, number of sales, items sold and average ticket. All 0 on no sales."""
    sales = list(sales)
    revenue = sum(sale.total_amount for sale in sales)
    transactions = len(sales)
    items_sold = sum(sale.items_count for sale in sales)
    average = revenue / transactions if transactions else 0.0

    return SalesSummary(
        revenue=revenue,
        transactions=transactions,
        items_sold=items_sold,
        average=average,
    )


def aggregate_items(sales: Iterable[Sale]) -> List[ItemAggregate]:
    """
    Flatten the sale items and group them by (product name, size),
    highest revenue first.
    """
    groups: Dict[Tuple[str, str], ItemAggregate] = {}

    for sale in sales:
        for item in sale.items:
            key = (item.product_name, item.size)
            if key not in groups:
                groups[key] = ItemAggregate(product_name=item.product_name, size=item.size)
            groups[key].quantity += item.quantity
            groups[key].revenue += item.total_price

    return sorted(groups.values(), key=lambda g: g.revenue, reverse=True)


def top_products(sales: Iterable[Sale], n: int = TOP_N) -> List[ItemAggregate]:
    return aggregate_items(sales)[:n]


def period_start(day: date, granularity: str) -> date:
    if granularity == "day":
        return day
    if granularity == "week":
        # ISO weeks start on Monday
        return day - timedelta(days=day.weekday())
    if granularity == "month":
        return day.replace(day=1)
    raise ValueError(f"Unknown granularity: {granularity}")


def period_label(start: date, granularity: str) -> str:
    if granularity == "day":
        return start.strftime("%d/%m/%Y")
    if granularity == "week":
        return f"semaine du {start.strftime('%d/%m/%Y')}"
    if granularity == "month":
        return f"{MONTHS_FR[start.month - 1]} {start.year}"
    raise ValueError(f"Unknown granularity: {granularity}")


def group_by_period(sales: Iterable[Sale], granularity: str = "day") -> List[PeriodAggregate]:
    """
    Revenue and number of sales per day, week or month,
    in order of first appearance. Sales without a timestamp are left out.
    """
    if granularity not in GRANULARITIES:
        raise ValueError(f"granularity must be one of {GRANULARITIES}, got {granularity!r}")

    groups: Dict[str, PeriodAggregate] = {}
    skipped = 0

    for sale in sales:
        ts = sale.timestamp
        if ts is None:
            skipped += 1
            continue

        start = period_start(ts.date(), granularity)
        key = period_label(start, granularity)
        if key not in groups:
            groups[key] = PeriodAggregate(key=key, start=start)
        groups[key].revenue += sale.total_amount
        groups[key].transactions += 1

    if skipped:
        logger.warning("%d sale(s) without a timestamp left out of the %s grouping", skipped, granularity)

    return list(groups.values())


def _rank_periods(sales: Iterable[Sale], granularity: str) -> List[PeriodAggregate]:
    return sorted(group_by_period(sales, granularity), key=lambda p: p.revenue, reverse=True)


def best_periods(sales: Iterable[Sale], granularity: str = "day", n: int = TOP_N) -> List[PeriodAggregate]:
    return _rank_periods(sales, granularity)[:n]


def worst_periods(sales: Iterable[Sale], granularity: str = "day", n: int = TOP_N) -> List[PeriodAggregate]:
    """The bottom n of the ranking, worst first."""
    if n <= 0:
        return []
    ranked = _rank_periods(sales, granularity)
    return list(reversed(ranked[-n:]))
