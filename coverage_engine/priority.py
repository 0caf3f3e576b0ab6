from typing import Optional

from .metrics import CoverageMetrics
from .schemas import PolicyConfig
from .utils import format_days, format_units

# One template per branch. Every branch states the same facts in the same
# order: velocity, coverage on hand, open orders, coverage with open orders.
JUSTIFICATION_TEMPLATES = {
    "critical": (
        "Critical stockout! Sells {velocity}/day, coverage {days} days; "
        "open orders {open_orders} un. keep coverage at {effective} days."
    ),
    "improving": (
        "Insufficient but improving. Sells {velocity}/day, coverage {days} days; "
        "open orders {open_orders} un. lift coverage to {effective} days."
    ),
    "high_risk": (
        "High risk! Sells {velocity}/day, coverage {days} days; "
        "open orders {open_orders} un. reach only {effective} days (below {low} days)."
    ),
    "stabilized": (
        "Stabilized by open orders. Sells {velocity}/day, coverage {days} days; "
        "open orders {open_orders} un. extend coverage to {effective} days."
    ),
    "stable": (
        "Stable coverage. Sells {velocity}/day, coverage {days} days; "
        "open orders {open_orders} un., {effective} days with open orders."
    ),
    "parked": "Parked stock: {stock} un. on hand with no recent sales.",
    "empty": "No stock and no recent sales.",
}


def _render(branch: str, metrics: CoverageMetrics, stock: float, open_orders: float,
            policy: PolicyConfig) -> str:
    return JUSTIFICATION_TEMPLATES[branch].format(
        velocity=f"{metrics.daily_average_sales:.1f}",
        days=format_days(metrics.days_of_stock),
        effective=format_days(metrics.effective_coverage),
        open_orders=format_units(open_orders),
        stock=format_units(stock),
        low=format_days(policy.low_days_threshold),
    )


def assign_priority(
    metrics: CoverageMetrics,
    stock: float,
    open_orders: float,
    policy: PolicyConfig,
) -> tuple[Optional[int], str]:
    """
    Returns (priority, justification), priority 1 being the most urgent.

    Items without demand get no numeric priority. An item that is out of
    stock (or under one day of demand) with real demand is priority 1 unless
    its open orders already push coverage past `policy.recovery_days`, in
    which case it drops to 2. Anything else still short of the low window
    after open orders is 2; the rest is 3.
    """
    if metrics.daily_average_sales == 0:
        branch = "parked" if stock > 0 else "empty"
        return None, _render(branch, metrics, stock, open_orders, policy)

    ruptured = metrics.days_of_stock < policy.rupture_days
    if ruptured and metrics.daily_average_sales >= policy.min_priority_daily_sales:
        if metrics.effective_coverage > policy.recovery_days:
            return 2, _render("improving", metrics, stock, open_orders, policy)
        return 1, _render("critical", metrics, stock, open_orders, policy)

    if metrics.effective_coverage < policy.low_days_threshold:
        return 2, _render("high_risk", metrics, stock, open_orders, policy)

    if metrics.days_of_stock < policy.low_days_threshold:
        return 3, _render("stabilized", metrics, stock, open_orders, policy)
    return 3, _render("stable", metrics, stock, open_orders, policy)
