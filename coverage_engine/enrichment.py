import asyncio
import logging
from typing import Awaitable, Callable, Iterable, NamedTuple, Optional

from .schemas import SkuRecord

logger = logging.getLogger(__name__)

# An async callable that returns a category (e.g. a product type) for a SKU.
Categorizer = Callable[[SkuRecord], Awaitable[Optional[str]]]


class CategorizationResult(NamedTuple):
    sku_id: str
    value: Optional[str]
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def _categorize_one(record: SkuRecord, categorizer: Categorizer) -> CategorizationResult:
    try:
        value = await categorizer(record)
        return CategorizationResult(record.sku_id, value)
    except Exception as e:
        # One failing SKU must not take the batch down with it.
        logger.warning(f"  > Categorization failed for SKU {record.sku_id}: {e}")
        return CategorizationResult(record.sku_id, None, str(e))


async def enrich_all(
    records: Iterable[SkuRecord], categorizer: Categorizer
) -> list[CategorizationResult]:
    """Categorizes every SKU concurrently; results keep input order."""
    tasks = [_categorize_one(record, categorizer) for record in records]
    results = await asyncio.gather(*tasks)

    failed = sum(1 for r in results if not r.ok)
    logger.info(f"Categorized {len(results) - failed}/{len(results)} SKUs ({failed} failed).")
    return list(results)


def run_enrichment(
    records: Iterable[SkuRecord], categorizer: Categorizer
) -> list[CategorizationResult]:
    """
    Synchronous entry point for the pipelines. It starts its own event loop,
    so it cannot be called from code already running inside one; async
    callers should `await enrich_all(...)` directly.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(enrich_all(records, categorizer))
    raise RuntimeError(
        "run_enrichment() cannot run inside an active event loop; await enrich_all() instead."
    )


def apply_product_types(
    records: Iterable[SkuRecord], results: Iterable[CategorizationResult]
) -> list[SkuRecord]:
    """
    Returns copies of `records` with a missing product type filled in from
    successful categorization results. Existing product types are kept.
    """
    found = {r.sku_id: r.value for r in results if r.ok and r.value}
    enriched = []
    for record in records:
        if not record.product_type and record.sku_id in found:
            record = record.model_copy(update={"product_type": found[record.sku_id]})
        enriched.append(record)
    return enriched
