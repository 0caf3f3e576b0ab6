import logging
from typing import Any

from coverage_engine import action_list, aggregator, insights, settings
from coverage_engine.pipeline import AnalysisPipeline
from coverage_engine.policies import get_policy
from coverage_engine.schemas import SkuRecord, StockStatus

logger = logging.getLogger(__name__)

# Statuses that call for a purchase in this view
URGENT_STATUSES = [StockStatus.CRITICAL, StockStatus.URGENT, StockStatus.LOW]


class LinhaBrancaPipeline(AnalysisPipeline):
    """
    Bedding basics (mattress and pillow protectors, bed skirts), grouped by
    item type and bed size.
    """

    def __init__(self, **kwargs):
        kwargs.setdefault("policy", get_policy("linha_branca"))
        super().__init__("linha_branca", **kwargs)

    def transform(self, records: list[SkuRecord]) -> list[dict[str, Any]] | None:
        wanted = aggregator.normalize(settings.LINHA_BRANCA_COLLECTION_NAME)
        selected = [r for r in records if aggregator.normalize(r.collection_name) == wanted]

        items = aggregator.aggregate(
            selected,
            aggregator.by_item_type_and_size,
            self.policy,
            seed=aggregator.linha_branca_seed,
        )
        logger.info(f"--- {len(selected)} linha branca SKUs grouped into {len(items)} items ---")

        self.summarize(items)
        urgent = action_list.build_action_list(
            items, statuses=URGENT_STATUSES, require_replenishment=True
        )
        limit = settings.ACTION_LIST_LIMITS["linha_branca"]
        self.metadata["urgentActions"] = [
            {"item": i.display_name, "suggestion": i.replenishment_suggestion}
            for i in action_list.top(urgent, limit)
        ]
        self.metadata["bedSizes"] = [
            {**summary, "harmony": summary["harmony"].value}
            for summary in insights.bed_size_summaries(items)
        ]

        return action_list.export_rows(action_list.build_action_list(items))
