import logging
from typing import Any

from coverage_engine import settings
from coverage_engine.abc_curve import classify_abc, summarize_abc
from coverage_engine.pipeline import AnalysisPipeline
from coverage_engine.policies import get_policy
from coverage_engine.schemas import SkuRecord

logger = logging.getLogger(__name__)


class AbcAnalysisPipeline(AnalysisPipeline):
    """Revenue-based ABC curve over every SKU in the snapshot."""

    def __init__(
        self,
        a_threshold: float = settings.ABC_A_THRESHOLD,
        b_threshold: float = settings.ABC_B_THRESHOLD,
        **kwargs,
    ):
        kwargs.setdefault("policy", get_policy("default"))
        super().__init__("abc", **kwargs)
        self.a_threshold = a_threshold
        self.b_threshold = b_threshold

    def transform(self, records: list[SkuRecord]) -> list[dict[str, Any]] | None:
        entries = classify_abc(records, self.a_threshold, self.b_threshold)
        summary = summarize_abc(entries)

        self.metadata["abcSummary"] = {
            "totalRevenue30d": round(summary.total_revenue30d, 2),
            "totalSkus": summary.total_skus,
            "curves": {
                curve.value: stats.model_dump() for curve, stats in summary.curves.items()
            },
        }
        for curve, stats in summary.curves.items():
            logger.info(
                f"  > Curve {curve.value}: {stats.skus} SKUs ({stats.sku_percent:.1f}%), "
                f"{stats.revenue_percent:.1f}% of revenue"
            )

        return [
            {
                "id": e.record.sku_id,
                "name": e.record.name,
                "price": e.record.price,
                "sales30d": e.record.sales30d,
                "revenue30d": round(e.revenue30d, 2),
                "cumulative_percentage": round(e.cumulative_percentage, 2),
                "curve": e.curve.value,
                "rank": e.rank,
            }
            for e in entries
        ]
