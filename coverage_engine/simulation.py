from typing import NamedTuple, Optional

from . import settings


class ProjectionPoint(NamedTuple):
    day: int
    stock: float
    replenished: bool


class StockProjection(NamedTuple):
    points: list[ProjectionPoint]
    rupture_day: Optional[int]


def project_stock(
    starting_stock: float,
    daily_sales: float,
    horizon_days: int = settings.PROJECTION_HORIZON_DAYS,
    sales_adjustment: float = 0.0,
    replenishment_amount: float = 0.0,
    replenishment_day: int = 0,
) -> StockProjection:
    """
    Day-by-day stock projection from day 0 (today) to `horizon_days`.

    Sales (`daily_sales + sales_adjustment`) are taken from day 1 on. A single
    replenishment of `replenishment_amount` units arrives on
    `replenishment_day` when that day is after today. Stock never goes below
    zero. The rupture day is the first day stock sits at zero while there is
    still demand; None when that never happens within the horizon.
    """
    if horizon_days < 0:
        raise ValueError(f"horizon_days must be >= 0, got {horizon_days}")

    effective_sales = daily_sales + sales_adjustment
    stock = starting_stock
    points = []
    rupture_day = None

    for day in range(horizon_days + 1):
        replenished = False
        if day > 0:
            stock -= effective_sales
        if replenishment_amount > 0 and day > 0 and day == replenishment_day:
            stock += replenishment_amount
            replenished = True

        stock = max(0.0, stock)
        points.append(ProjectionPoint(day, stock, replenished))

        if stock == 0 and rupture_day is None and effective_sales > 0:
            rupture_day = day

    return StockProjection(points, rupture_day)
