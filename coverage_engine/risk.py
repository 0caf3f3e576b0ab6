from .metrics import CoverageMetrics
from .schemas import PolicyConfig, StockStatus

# Lower is more severe. Used to order action lists.
STATUS_SEVERITY = {
    StockStatus.CRITICAL: 0,
    StockStatus.URGENT: 1,
    StockStatus.LOW: 2,
    StockStatus.HEALTHY: 3,
    StockStatus.OVERSTOCKED: 4,
    StockStatus.NO_SALES: 5,
    StockStatus.NOT_APPLICABLE: 6,
}


def severity_rank(status: StockStatus | str) -> int:
    return STATUS_SEVERITY[StockStatus(status)]


def classify_risk(
    metrics: CoverageMetrics,
    stock: float,
    sales30d: float,
    open_orders: float,
    target_stock: float,
    policy: PolicyConfig,
) -> StockStatus:
    """
    Maps coverage metrics to a stock status.

    The rules are evaluated in a fixed order and the first match wins:
      1. no demand, or demand below the significance floor
         -> NoSales (with stock) / NotApplicable
      2. nothing on hand and nothing on order -> Critical
      3. under the critical window and still short of the low window once
         open orders arrive -> Critical
      4. under the urgent window with high 30 day sales -> Urgent
      5. under the low window -> Low
      6. well above target both in units and in days -> Overstocked
      7. otherwise -> Healthy

    When the policy does not count open orders in the critical check, rule 2
    only looks at stock and rule 3 uses the plain coverage.
    """
    daily = metrics.daily_average_sales
    days = metrics.days_of_stock

    if daily == 0 or daily < policy.min_significant_daily_sales:
        return StockStatus.NO_SALES if stock > 0 else StockStatus.NOT_APPLICABLE

    if policy.open_orders_in_critical_check:
        empty = stock == 0 and open_orders == 0
        coverage_after_orders = metrics.effective_coverage
    else:
        empty = stock == 0
        coverage_after_orders = days

    if empty:
        return StockStatus.CRITICAL
    if (
        days < policy.critical_days_threshold
        and coverage_after_orders < policy.low_days_threshold
    ):
        return StockStatus.CRITICAL
    if days < policy.urgent_days_threshold and sales30d > policy.high_sales_threshold:
        return StockStatus.URGENT
    if days < policy.low_days_threshold:
        return StockStatus.LOW
    if (
        target_stock > 0
        and stock / target_stock > policy.overstock_factor
        and days > policy.target_coverage_days * policy.overstock_factor
    ):
        return StockStatus.OVERSTOCKED
    return StockStatus.HEALTHY
