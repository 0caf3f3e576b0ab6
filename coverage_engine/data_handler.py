import json
import logging
from pathlib import Path
from typing import Any, Optional

import pandas as pd
import requests

from . import settings
from . import utils

logger = logging.getLogger(__name__)


def save_outputs(rows: list[dict[str, Any]], filename_base: str) -> Optional[Path]:
    """Saves report rows to CSV and conditionally to JSON, with dated filenames."""
    settings.OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    date_suffix = utils.get_date_suffix_for_filename()

    csv_path = settings.OUTPUT_DIR / f"{filename_base}_{date_suffix}.csv"
    json_path = settings.OUTPUT_DIR / f"{filename_base}_{date_suffix}.json"

    pd.DataFrame(rows).to_csv(csv_path, index=False)
    logger.info(f"✅ Report saved to: {csv_path}")

    if settings.SAVE_JSON_OUTPUT:
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(rows, f, indent=2, default=str, ensure_ascii=False)
        logger.info(f"✅ JSON output saved to: {json_path}")
    else:
        logger.info("INFO: Skipping JSON file save as per configuration.")

    return csv_path


def post_to_webhook(rows: list[dict[str, Any]], metadata: dict[str, Any], report_type: str):
    """
    Posts the report rows together with run metadata (snapshot date, policy,
    summaries) to the webhook. Delivery errors are logged, never raised.
    """
    if not settings.WEBHOOK_URL:
        logger.warning("⚠️ WEBHOOK_URL not set. Skipping webhook post.")
        return

    logger.info(f"🚀 Posting {report_type} report to webhook: {settings.WEBHOOK_URL}")

    payload = {
        "reportType": report_type,
        "reportData": rows,
        "metadata": metadata,
    }

    try:
        # default=str keeps dates, enums and the like serializable
        body = json.loads(json.dumps(payload, default=str))
        response = requests.post(settings.WEBHOOK_URL, json=body, timeout=15)
        response.raise_for_status()
        logger.info("✅ Report successfully posted to webhook.")
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ Error posting to webhook: {e}")
