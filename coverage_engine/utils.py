import logging
import math
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterable, Optional

import pandas as pd
from pydantic import ValidationError

from .schemas import SkuRecord

logger = logging.getLogger(__name__)

_REPORT_DATE_PATTERN = re.compile(r"(\d{4}-\d{2}-\d{2})")


def get_date_suffix_for_filename() -> str:
    """Returns the current date as a YYYY-MM-DD string for filenames."""
    return datetime.now().strftime("%Y-%m-%d")


def round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; replenishment quantities round .5 up.
    return int(math.floor(value + 0.5))


def format_days(days: float) -> str:
    if math.isinf(days):
        return "inf"
    return f"{days:.1f}"


def format_units(quantity: float) -> str:
    if float(quantity).is_integer():
        return str(int(quantity))
    return f"{quantity:.1f}"


def find_latest_report(directory: Path, prefix: str) -> Optional[tuple[Path, date]]:
    """
    Finds the most recent file in `directory` named `<prefix>YYYY-MM-DD.<ext>`.
    Returns (path, report_date), or None when nothing matches.
    """
    if not directory.exists():
        return None

    candidates = []
    for path in directory.glob(f"{prefix}*"):
        match = _REPORT_DATE_PATTERN.search(path.name[len(prefix):])
        if not match:
            continue
        try:
            report_date = datetime.strptime(match.group(1), "%Y-%m-%d").date()
        except ValueError:
            logger.warning(f"  > Ignoring {path.name}: unreadable date in filename.")
            continue
        candidates.append((report_date, path))

    if not candidates:
        return None
    report_date, path = max(candidates)
    return path, report_date


def load_csv(file_path: Path, skiprows: int = 0) -> pd.DataFrame | None:
    """
    CSV loader with an encoding fallback:
    1. UTF-8 with BOM support ('utf-8-sig').
    2. Latin-1, which can read any byte sequence.
    """
    try:
        return pd.read_csv(file_path, encoding="utf-8-sig", skiprows=skiprows)

    except UnicodeDecodeError:
        logger.info(
            f"UTF-8 decoding failed for {file_path.name}. Retrying with 'latin-1'."
        )
        try:
            return pd.read_csv(file_path, encoding="latin-1", skiprows=skiprows)
        except Exception as e_latin1:
            logger.error(
                f"Could not read {file_path.name} even with latin-1. Reason: {e_latin1}"
            )
            return None

    except FileNotFoundError:
        logger.info(f"Snapshot not found at {file_path}, skipping.")
        return None

    except Exception as e_general:
        logger.error(
            f"An unexpected error occurred while reading {file_path.name}. Reason: {e_general}"
        )
        return None


def validate_records(
    rows: Iterable[dict[str, Any]],
) -> tuple[list[SkuRecord], list[dict[str, Any]]]:
    """
    Validates raw rows against SkuRecord one by one.
    A bad row is logged and returned in the rejected list; it never fails the batch.
    """
    valid: list[SkuRecord] = []
    rejected: list[dict[str, Any]] = []

    for index, row in enumerate(rows):
        # pandas hands us non-string keys for unnamed columns
        normalized = {str(k): v for k, v in row.items()}
        try:
            valid.append(SkuRecord(**normalized))
        except ValidationError as e:
            logger.warning(
                f"  > Row {index} (SKU {normalized.get('skuId', '?')}) rejected: "
                f"{e.error_count()} invalid field(s)."
            )
            logger.debug(e)
            rejected.append({"row": index, "data": normalized, "errors": e.errors()})

    return valid, rejected
