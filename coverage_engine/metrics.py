import math
from typing import NamedTuple

from . import settings


class CoverageMetrics(NamedTuple):
    daily_average_sales: float
    days_of_stock: float
    effective_coverage: float


def daily_average_sales(sales30d: float) -> float:
    """Average units sold per day over the fixed 30 day window."""
    if sales30d > 0:
        return sales30d / settings.SALES_WINDOW_DAYS
    return 0.0


def days_of_stock(stock: float, daily_sales: float) -> float:
    """
    How many days `stock` lasts at `daily_sales`.
    Stock with no measurable demand never runs out (inf); nothing on hand is 0.
    """
    if daily_sales > 0:
        return stock / daily_sales
    if stock > 0:
        return math.inf
    return 0.0


def compute_metrics(stock: float, sales30d: float, open_orders: float = 0) -> CoverageMetrics:
    daily = daily_average_sales(sales30d)
    return CoverageMetrics(
        daily_average_sales=daily,
        days_of_stock=days_of_stock(stock, daily),
        # Incoming supply counted as if already on hand.
        effective_coverage=days_of_stock(stock + open_orders, daily),
    )
