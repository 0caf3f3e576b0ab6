import math
from typing import Any, Iterable, Optional, Sequence

from .replenishment import replenishment_suggestion, target_stock
from .risk import severity_rank
from .schemas import AggregatedItem, CoverageResult, SkuAnalysis, StockStatus

# Items without a numeric priority go after priority 3.
_NO_PRIORITY_RANK = 4


def sort_key(item: CoverageResult) -> tuple:
    """
    Most urgent first: priority, then status severity, then faster sellers,
    then lower coverage (no-demand items, whose coverage is inf, last).
    """
    priority = item.priority if item.priority is not None else _NO_PRIORITY_RANK
    coverage = item.days_of_stock
    return (
        priority,
        severity_rank(item.status),
        -item.daily_average_sales,
        math.isinf(coverage),
        coverage if not math.isinf(coverage) else 0.0,
    )


def build_action_list(
    items: Iterable[CoverageResult],
    priorities: Optional[Sequence[Optional[int]]] = None,
    statuses: Optional[Sequence[StockStatus]] = None,
    require_replenishment: bool = False,
) -> list[CoverageResult]:
    """
    Filters and orders analysed items into a to-do list. The full list is
    returned; use `top()` for a display limit.
    """
    selected = []
    for item in items:
        if priorities is not None and item.priority not in priorities:
            continue
        if statuses is not None and item.status not in statuses:
            continue
        if require_replenishment and item.replenishment_suggestion <= 0:
            continue
        selected.append(item)
    return sorted(selected, key=sort_key)


def top(items: Sequence[CoverageResult], limit: Optional[int]) -> list[CoverageResult]:
    if limit is None:
        return list(items)
    return list(items[:max(0, limit)])


def _identity(item: CoverageResult) -> dict[str, Any]:
    if isinstance(item, SkuAnalysis):
        return {
            "id": item.record.sku_id,
            "name": item.record.name,
            "size": item.record.size,
            "stock": item.record.stock_total,
            "ready_to_ship": item.record.stock_ready_to_ship,
            "regulator": item.record.stock_regulator,
        }
    if isinstance(item, AggregatedItem):
        return {
            "id": item.group_key,
            "name": item.display_name,
            "size": item.labels.get("size", ""),
            "stock": item.total_stock,
            "ready_to_ship": item.total_ready_to_ship,
            "regulator": item.total_regulator,
        }
    raise TypeError(f"Cannot export item of type {type(item).__name__}")


def _json_days(days: float) -> Optional[float]:
    # inf is not valid JSON; None renders as an empty cell / null
    return None if math.isinf(days) else round(days, 1)


def export_rows(
    items: Iterable[CoverageResult], target_days: Optional[float] = None
) -> list[dict[str, Any]]:
    """
    Flattens analysed items into rows for CSV/JSON output.

    With `target_days`, an extra column suggests a quantity for that shorter
    window, netting ready-to-ship stock and open orders.
    """
    rows = []
    for item in items:
        row = _identity(item)
        row.update(
            {
                "coverage_stock": item.coverage_stock,
                "open_orders": item.open_orders,
                "sales30d": item.sales30d,
                "daily_average_sales": round(item.daily_average_sales, 2),
                "days_of_stock": _json_days(item.days_of_stock),
                "effective_coverage": _json_days(item.effective_coverage),
                "target_stock": round(item.target_stock, 1),
                "status": item.status.value,
                "priority": item.priority,
                "replenishment_suggestion": item.replenishment_suggestion,
                "justification": item.justification,
            }
        )
        if target_days is not None:
            daily = item.daily_average_sales
            row[f"suggestion_{int(target_days)}d"] = replenishment_suggestion(
                daily, target_stock(daily, target_days), row["ready_to_ship"], item.open_orders
            )
        rows.append(row)
    return rows
