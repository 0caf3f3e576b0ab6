import logging
from typing import Iterable

from . import settings
from .schemas import AbcCurve, AbcEntry, AbcSummary, CurveStats, SkuRecord

logger = logging.getLogger(__name__)


def _curve_for(cumulative_percentage: float, a_threshold: float, b_threshold: float) -> AbcCurve:
    if cumulative_percentage <= a_threshold:
        return AbcCurve.A
    if cumulative_percentage <= b_threshold:
        return AbcCurve.B
    return AbcCurve.C


def classify_abc(
    records: Iterable[SkuRecord],
    a_threshold: float = settings.ABC_A_THRESHOLD,
    b_threshold: float = settings.ABC_B_THRESHOLD,
) -> list[AbcEntry]:
    """
    Pareto classification by 30 day revenue (price x sales).

    SKUs with positive revenue are ranked by revenue, highest first, and take
    their curve from the cumulative share of revenue *including* themselves:
    up to `a_threshold` % is A, up to `b_threshold` % is B, the rest C. Ties
    keep input order. SKUs without revenue (no price or no sales) follow in
    input order as N/A.
    """
    if a_threshold > b_threshold:
        raise ValueError(f"ABC thresholds must ascend (got A={a_threshold}, B={b_threshold})")

    records = list(records)
    earning = [r for r in records if r.revenue30d > 0]
    idle = [r for r in records if r.revenue30d <= 0]

    # sorted() is stable, so equal revenues stay in input order
    earning = sorted(earning, key=lambda r: r.revenue30d, reverse=True)
    total = sum(r.revenue30d for r in earning)

    entries = []
    running = 0.0
    for rank, record in enumerate(earning, start=1):
        running += record.revenue30d
        cumulative = running * 100 / total
        entries.append(
            AbcEntry(
                record=record,
                revenue30d=record.revenue30d,
                cumulative_percentage=cumulative,
                curve=_curve_for(cumulative, a_threshold, b_threshold),
                rank=rank,
            )
        )

    for record in idle:
        entries.append(
            AbcEntry(
                record=record,
                revenue30d=0.0,
                cumulative_percentage=0.0,
                curve=AbcCurve.NOT_APPLICABLE,
            )
        )

    logger.debug(f"ABC: {len(earning)} SKUs ranked, {len(idle)} without revenue.")
    return entries


def summarize_abc(entries: list[AbcEntry]) -> AbcSummary:
    """Per-curve SKU count and revenue, with their shares of the whole."""
    total_revenue = sum(e.revenue30d for e in entries)
    total_skus = len(entries)

    curves = {curve: CurveStats() for curve in AbcCurve}
    for entry in entries:
        stats = curves[entry.curve]
        stats.skus += 1
        stats.revenue += entry.revenue30d

    for stats in curves.values():
        stats.sku_percent = stats.skus / total_skus * 100 if total_skus else 0.0
        stats.revenue_percent = stats.revenue / total_revenue * 100 if total_revenue else 0.0

    return AbcSummary(total_revenue30d=total_revenue, total_skus=total_skus, curves=curves)
