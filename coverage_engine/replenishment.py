from .utils import round_half_up


def target_stock(daily_sales: float, target_coverage_days: float) -> float:
    return daily_sales * target_coverage_days


def replenishment_suggestion(
    daily_sales: float, target: float, stock: float, open_orders: float = 0
) -> int:
    """
    Units to order so that stock plus open orders reaches `target`.
    Items without measurable demand are never replenished here, however low
    their stock.
    """
    if daily_sales <= 0:
        return 0
    return max(0, round_half_up(target - stock - open_orders))
