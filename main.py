import argparse
import logging

from coverage_engine.logger import setup_logger
from coverage_engine.pipelines.abc_analysis import AbcAnalysisPipeline
from coverage_engine.pipelines.collection import CollectionCoveragePipeline
from coverage_engine.pipelines.linha_branca import LinhaBrancaPipeline
from coverage_engine.pipelines.pillow import PillowStockPipeline

PIPELINES = {
    "collection": CollectionCoveragePipeline,
    "pillow": PillowStockPipeline,
    "linha_branca": LinhaBrancaPipeline,
    "abc": AbcAnalysisPipeline,
}


def main():
    parser = argparse.ArgumentParser(
        description="Stock coverage and replenishment reports from the latest SKU snapshot"
    )
    parser.add_argument(
        "--view",
        dest="views",
        action="append",
        choices=list(PIPELINES),
        help="View to run; repeat for several (default: all)",
    )
    parser.add_argument(
        "--test", "-t", action="store_true", help="Write outputs but skip the webhook post"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logger = setup_logger(log_level=logging.DEBUG if args.verbose else None)

    views = args.views or list(PIPELINES)
    if args.test:
        logger.info("🧪 Running in test mode.")

    for view in views:
        PIPELINES[view](test_mode=args.test).run()


if __name__ == "__main__":
    main()
