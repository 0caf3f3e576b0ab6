import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from . import data_handler, insights, settings, utils
from .enrichment import Categorizer, apply_product_types, run_enrichment
from .schemas import CoverageResult, PolicyConfig, SkuRecord

logger = logging.getLogger(__name__)


class AnalysisPipeline(ABC):
    """
    Abstract base class for the dashboard views (collection, pillows, ...).
    Follows an Extract -> Transform -> Load (ETL) pattern.
    """

    def __init__(
        self,
        report_type: str,
        policy: PolicyConfig,
        test_mode: bool = False,
        categorizer: Optional[Categorizer] = None,
    ):
        self.report_type = report_type
        self.policy = policy
        self.test_mode = test_mode
        self.categorizer = categorizer
        # Travels with the report to the webhook
        self.metadata: dict[str, Any] = {
            "snapshotDate": None,
            "rejectedRows": 0,
            "policy": policy.model_dump(mode="json"),
        }

    def run(self, records: Optional[list[SkuRecord]] = None) -> list[dict[str, Any]] | None:
        """
        Orchestrates the pipeline execution. `records` skips the extract step.
        Returns the report rows, or None when the transform failed.
        """
        logger.info(f"🚀 STEP: {self.report_type.upper()} REPORT")
        logger.info("-" * 30)

        # --- 1. EXTRACT ---
        if records is None:
            records = self.extract()

        if records and self.categorizer is not None:
            results = run_enrichment(records, self.categorizer)
            records = apply_product_types(records, results)

        if not records:
            logger.warning(f"⚠️ No records for {self.report_type}. Sending an empty report.")
            self.load([])
            return []

        # --- 2. TRANSFORM ---
        rows = self.transform(records)
        if rows is None:
            logger.error(f"❌ Transformation failed for {self.report_type}.")
            return None

        # --- 3. LOAD ---
        self.load(rows)

        logger.info(f"✅ {self.report_type.capitalize()} Pipeline Finished.\n")
        logger.info("=" * 60)
        return rows

    def extract(self) -> list[SkuRecord]:
        """Loads and validates the latest SKU snapshot from INPUT_DIR."""
        found = utils.find_latest_report(settings.INPUT_DIR, settings.SNAPSHOT_FILENAME_PREFIX)
        if not found:
            logger.error(
                f"  > ERROR: No '{settings.SNAPSHOT_FILENAME_PREFIX}YYYY-MM-DD.csv' "
                f"snapshot in {settings.INPUT_DIR}."
            )
            return []

        path, report_date = found
        logger.info(f"  > Found snapshot: {path.name} ({report_date})")
        self.metadata["snapshotDate"] = report_date.isoformat()

        df = utils.load_csv(path)
        if df is None or df.empty:
            return []

        records, rejected = utils.validate_records(df.to_dict("records"))
        self.metadata["rejectedRows"] = len(rejected)
        if rejected:
            logger.warning(f"  > {len(rejected)} of {len(df)} rows rejected by validation.")
        logger.info(f"  > {len(records)} SKUs loaded.")
        return records

    @abstractmethod
    def transform(self, records: list[SkuRecord]) -> list[dict[str, Any]] | None:
        """
        Runs the coverage analysis for this view and returns report rows.
        Summaries for the dashboard go into self.metadata.
        """
        pass

    def summarize(self, items: list[CoverageResult]):
        """Adds the status breakdown and coverage overview to the metadata."""
        self.metadata["statusBreakdown"] = {
            status.value: bucket for status, bucket in insights.status_breakdown(items).items()
        }
        self.metadata["coverageOverview"] = insights.coverage_overview(items)

    def load(self, rows: list[dict[str, Any]]):
        """Saves rows to disk and posts them to the webhook."""
        if rows:
            data_handler.save_outputs(rows, f"{self.report_type}_report")
        else:
            logger.warning("No data to save to disk.")

        if not self.test_mode:
            data_handler.post_to_webhook(
                rows=rows,
                metadata=self.metadata,
                report_type=self.report_type,
            )
        else:
            logger.info("🧪 Test Mode: Skipping webhook post.")
