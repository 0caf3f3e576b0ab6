"""
Dashboard-style observations over analysed items.

Every function accepts SKU-level analyses and aggregated items alike and
returns plain lists/dicts, ready to be logged or exported.
"""
import logging
import math
from datetime import date
from enum import Enum
from typing import Iterable, NamedTuple, Optional

from . import settings
from .risk import STATUS_SEVERITY
from .schemas import AggregatedItem, CoverageResult, SkuAnalysis, StockStatus

logger = logging.getLogger(__name__)


class SizeHarmony(str, Enum):
    CRITICAL = "Critical"
    NEEDS_ATTENTION = "NeedsAttention"
    GOOD = "Good"


class DepletionAlert(NamedTuple):
    item: SkuAnalysis
    days_since_start: int
    depletion_rate_pct: float


def _total_stock(item: CoverageResult) -> float:
    if isinstance(item, AggregatedItem):
        return item.total_stock
    if isinstance(item, SkuAnalysis):
        return item.record.stock_total
    return item.coverage_stock


def _ready_to_ship(item: CoverageResult) -> float:
    if isinstance(item, AggregatedItem):
        return item.total_ready_to_ship
    if isinstance(item, SkuAnalysis):
        return item.record.stock_ready_to_ship
    return item.coverage_stock


def high_demand_low_coverage(
    items: Iterable[CoverageResult],
    min_daily_sales: float = settings.HIGH_DEMAND_DAILY_SALES,
    max_coverage_days: float = settings.HIGH_DEMAND_MAX_COVERAGE_DAYS,
) -> list[CoverageResult]:
    """Fast sellers about to run out."""
    return [
        item
        for item in items
        if item.daily_average_sales > min_daily_sales
        and item.days_of_stock < max_coverage_days
    ]


def stagnant_stock(items: Iterable[CoverageResult]) -> list[CoverageResult]:
    """Stock on hand that did not sell at all in the window."""
    return [i for i in items if i.daily_average_sales == 0 and i.coverage_stock > 0]


def recent_collection_fast_depletion(
    analyses: Iterable[SkuAnalysis],
    as_of: Optional[date] = None,
    max_age_days: int = settings.RECENT_COLLECTION_DAYS,
    min_rate_pct: float = settings.FAST_DEPLETION_RATE_PCT,
) -> list[DepletionAlert]:
    """
    SKUs from a collection launched in the last `max_age_days` days that lose
    more than `min_rate_pct` % of their stock per day.
    """
    as_of = as_of or date.today()
    alerts = []
    for analysis in analyses:
        start = analysis.record.collection_start_date
        if start is None or analysis.coverage_stock <= 0:
            continue
        age = (as_of - start).days
        if not 0 <= age <= max_age_days:
            continue
        rate = analysis.daily_average_sales * 100 / analysis.coverage_stock
        if rate > min_rate_pct:
            alerts.append(DepletionAlert(analysis, age, rate))

    alerts.sort(key=lambda a: a.depletion_rate_pct, reverse=True)
    return alerts


def daily_sales_exceeds_ready_to_ship(items: Iterable[CoverageResult]) -> list[CoverageResult]:
    """Items whose ready-to-ship stock would not cover a single day of sales."""
    calm = {StockStatus.HEALTHY, StockStatus.OVERSTOCKED}
    return [
        item
        for item in items
        if _ready_to_ship(item) < item.daily_average_sales and item.status not in calm
    ]


def restock_opportunities(
    items: Iterable[CoverageResult], threshold: float = settings.RESTOCK_LOW_STOCK_THRESHOLD
) -> list[CoverageResult]:
    """Low total stock that can be topped up from ready-to-ship or open orders."""
    return [
        item
        for item in items
        if _total_stock(item) <= threshold
        and (_ready_to_ship(item) > 0 or item.open_orders > 0)
    ]


def status_breakdown(items: Iterable[CoverageResult]) -> dict[StockStatus, dict]:
    """Per-status counts, stock and suggested units, most severe status first."""
    breakdown = {
        status: {"count": 0, "stock": 0.0, "replenishment": 0}
        for status in sorted(STATUS_SEVERITY, key=STATUS_SEVERITY.get)
    }
    for item in items:
        bucket = breakdown[item.status]
        bucket["count"] += 1
        bucket["stock"] += item.coverage_stock
        bucket["replenishment"] += item.replenishment_suggestion
    return breakdown


def coverage_overview(items: Iterable[CoverageResult]) -> dict:
    items = list(items)
    finite = [i.days_of_stock for i in items if not math.isinf(i.days_of_stock)]
    return {
        "items": len(items),
        "mean_coverage_days": sum(finite) / len(finite) if finite else None,
        "critical": sum(1 for i in items if i.status == StockStatus.CRITICAL),
        "needing_replenishment": sum(1 for i in items if i.replenishment_suggestion > 0),
        "suggested_units": sum(i.replenishment_suggestion for i in items),
    }


def _size_sort_key(size: str) -> tuple:
    if size in settings.BED_SIZE_ORDER:
        return (0, settings.BED_SIZE_ORDER.index(size), "")
    return (1, 0, size.lower())


def bed_size_summaries(items: Iterable[AggregatedItem]) -> list[dict]:
    """
    Groups aggregated linha-branca items by bed size and rates how well the
    size is stocked as a set: Critical if any item is Critical, NeedsAttention
    if any is Urgent or Low, Good otherwise.
    """
    by_size: dict[str, list[AggregatedItem]] = {}
    for item in items:
        size = item.labels.get("size") or settings.DEFAULT_SIZE_LABEL
        by_size.setdefault(size, []).append(item)

    summaries = []
    for size in sorted(by_size, key=_size_sort_key):
        members = by_size[size]
        statuses = {m.status for m in members}
        if StockStatus.CRITICAL in statuses:
            harmony = SizeHarmony.CRITICAL
        elif statuses & {StockStatus.URGENT, StockStatus.LOW}:
            harmony = SizeHarmony.NEEDS_ATTENTION
        else:
            harmony = SizeHarmony.GOOD
        summaries.append(
            {
                "size": size,
                "harmony": harmony,
                "items": [m.display_name for m in members],
                "total_stock": sum(m.total_stock for m in members),
            }
        )
    return summaries
