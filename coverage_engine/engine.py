from typing import Any, Iterable

from .metrics import compute_metrics
from .priority import assign_priority
from .replenishment import replenishment_suggestion, target_stock
from .risk import classify_risk
from .schemas import PolicyConfig, SkuAnalysis, SkuRecord


def assess(
    stock: float, sales30d: float, open_orders: float, policy: PolicyConfig
) -> dict[str, Any]:
    """
    Runs the whole chain for one set of quantities:
    metrics -> target stock -> risk status -> replenishment -> priority.

    Used for single SKUs and for aggregates alike, so an aggregate is always
    derived from its summed quantities.
    """
    metrics = compute_metrics(stock, sales30d, open_orders)
    target = target_stock(metrics.daily_average_sales, policy.target_coverage_days)
    status = classify_risk(
        metrics,
        stock=stock,
        sales30d=sales30d,
        open_orders=open_orders,
        target_stock=target,
        policy=policy,
    )
    priority, justification = assign_priority(metrics, stock, open_orders, policy)

    return {
        "coverage_stock": stock,
        "open_orders": open_orders,
        "sales30d": sales30d,
        "daily_average_sales": metrics.daily_average_sales,
        "days_of_stock": metrics.days_of_stock,
        "effective_coverage": metrics.effective_coverage,
        "target_stock": target,
        "replenishment_suggestion": replenishment_suggestion(
            metrics.daily_average_sales, target, stock, open_orders
        ),
        "status": status,
        "priority": priority,
        "justification": justification,
    }


def analyze_skus(records: Iterable[SkuRecord], policy: PolicyConfig) -> list[SkuAnalysis]:
    """SKU-level analysis, measuring the stock pool named by `policy.stock_basis`."""
    return [
        SkuAnalysis(
            record=record,
            **assess(
                record.coverage_stock(policy.stock_basis),
                record.sales30d,
                record.open_orders,
                policy,
            ),
        )
        for record in records
    ]
