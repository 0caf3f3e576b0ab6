import logging
from datetime import date
from typing import Any, Optional

from coverage_engine import action_list, insights, settings
from coverage_engine.aggregator import normalize
from coverage_engine.engine import analyze_skus
from coverage_engine.pipeline import AnalysisPipeline
from coverage_engine.policies import get_policy
from coverage_engine.schemas import SkuRecord

logger = logging.getLogger(__name__)


class CollectionCoveragePipeline(AnalysisPipeline):
    """
    SKU-level coverage for the current collection, measured against
    ready-to-ship plus regulator stock.
    """

    def __init__(
        self,
        collection_name: Optional[str] = None,
        as_of: Optional[date] = None,
        **kwargs,
    ):
        kwargs.setdefault("policy", get_policy("collection"))
        super().__init__("collection", **kwargs)
        self.collection_name = collection_name
        self.as_of = as_of or date.today()

    def select(self, records: list[SkuRecord]) -> list[SkuRecord]:
        if self.collection_name:
            wanted = normalize(self.collection_name)
            return [r for r in records if normalize(r.collection_name) == wanted]
        return [r for r in records if r.is_current_collection]

    def transform(self, records: list[SkuRecord]) -> list[dict[str, Any]] | None:
        selected = self.select(records)
        logger.info(f"--- Analysing {len(selected)} collection SKUs ---")

        analyses = analyze_skus(selected, self.policy)
        # The replenishment export only carries SKUs that need action (priority 1 and 2);
        # the status breakdown still covers every analysed SKU.
        ordered = action_list.build_action_list(analyses, priorities=[1, 2])
        self.summarize(analyses)

        to_do = action_list.build_action_list(analyses, require_replenishment=True)
        limit = settings.ACTION_LIST_LIMITS["collection"]
        self.metadata["actionList"] = [a.item_id for a in action_list.top(to_do, limit)]

        self.metadata["highDemandLowCoverage"] = [
            a.item_id for a in insights.high_demand_low_coverage(analyses)
        ]
        self.metadata["dailySalesExceedReadyToShip"] = [
            a.item_id for a in insights.daily_sales_exceeds_ready_to_ship(analyses)
        ]
        self.metadata["fastDepletion"] = [
            {
                "id": alert.item.item_id,
                "daysSinceStart": alert.days_since_start,
                "depletionRatePct": round(alert.depletion_rate_pct, 1),
            }
            for alert in insights.recent_collection_fast_depletion(analyses, as_of=self.as_of)
        ]

        if self.metadata["fastDepletion"]:
            logger.warning(
                f"⚠️ {len(self.metadata['fastDepletion'])} SKUs of a recent collection are depleting fast."
            )

        return action_list.export_rows(
            ordered, target_days=settings.COLLECTION_EXPORT_TARGET_DAYS
        )
