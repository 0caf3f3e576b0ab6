import logging
from typing import Any

from coverage_engine import action_list, aggregator, insights, settings
from coverage_engine.pipeline import AnalysisPipeline
from coverage_engine.policies import get_policy
from coverage_engine.schemas import SkuRecord

logger = logging.getLogger(__name__)


class PillowStockPipeline(AnalysisPipeline):
    """Pillow models, all sizes and variants of one model counted together."""

    def __init__(self, **kwargs):
        kwargs.setdefault("policy", get_policy("pillow"))
        super().__init__("pillow", **kwargs)

    def transform(self, records: list[SkuRecord]) -> list[dict[str, Any]] | None:
        pillows = [
            r for r in records if r.product_type.upper() == settings.PILLOW_PRODUCT_TYPE
        ]
        items = aggregator.aggregate(
            pillows, aggregator.by_pillow_name, self.policy, seed=aggregator.pillow_seed
        )
        logger.info(f"--- {len(pillows)} pillow SKUs grouped into {len(items)} models ---")

        self.summarize(items)
        to_do = action_list.build_action_list(items, priorities=[1, 2], require_replenishment=True)
        limit = settings.ACTION_LIST_LIMITS["pillow"]
        self.metadata["actionList"] = [i.display_name for i in action_list.top(to_do, limit)]
        self.metadata["restockOpportunities"] = [
            i.display_name for i in insights.restock_opportunities(items)
        ]
        self.metadata["stagnantStock"] = [i.display_name for i in insights.stagnant_stock(items)]

        return action_list.export_rows(action_list.build_action_list(items))
