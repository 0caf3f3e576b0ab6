import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Path Configuration ---
INPUT_DIR = BASE_DIR / os.getenv("INPUT_DIR", "input")
OUTPUT_DIR = BASE_DIR / os.getenv("OUTPUT_DIR", "output")
LOG_DIR = BASE_DIR / os.getenv("LOG_DIR", "logs")

# --- Filename Configuration ---
# Snapshots are expected as e.g. sku_snapshot_2024-06-30.csv
SNAPSHOT_FILENAME_PREFIX = os.getenv("SNAPSHOT_FILENAME_PREFIX", "sku_snapshot_")

# --- Output / Delivery ---
WEBHOOK_URL = os.getenv("WEBHOOK_URL")
SAVE_JSON_OUTPUT = os.getenv("SAVE_JSON_OUTPUT", "false").lower() in ("1", "true", "yes")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Shared Business Logic ---
# Sales figures arrive as a trailing 30 day total.
SALES_WINDOW_DAYS = 30

# ABC curve boundaries (cumulative % of revenue, inclusive).
ABC_A_THRESHOLD = 80.0
ABC_B_THRESHOLD = 95.0

LINHA_BRANCA_COLLECTION_NAME = "Linha Branca"
PILLOW_PRODUCT_TYPE = "TRAVESSEIRO"
PILLOW_NAME_PREFIX = "Travesseiro"
PILLOW_BRAND_NAME = "Altenburg"
DEFAULT_SIZE_LABEL = "Tamanho Único"

# Display order for bed sizes; unknown sizes sort alphabetically after these.
BED_SIZE_ORDER = [
    "Solteiro",
    "Solteiro King",
    "Casal",
    "Queen",
    "King",
    "Super King",
    "Berço",
]

# --- Insight Thresholds ---
HIGH_DEMAND_DAILY_SALES = 5.0
HIGH_DEMAND_MAX_COVERAGE_DAYS = 3.0
RECENT_COLLECTION_DAYS = 15
FAST_DEPLETION_RATE_PCT = 5.0
RESTOCK_LOW_STOCK_THRESHOLD = 10
PROJECTION_HORIZON_DAYS = 60

# --- Action Lists ---
ACTION_LIST_LIMITS = {
    "collection": 50,
    "pillow": 15,
    "linha_branca": 5,
}
# The collection export also suggests a quantity for a shorter ready-to-ship window.
COLLECTION_EXPORT_TARGET_DAYS = 15

# --- Policy Profiles ---
# Each view measures coverage against its own thresholds. Values can be
# overridden per field with POLICY_<PROFILE>_<FIELD> environment variables.
POLICY_PROFILES = {
    "default": {
        "target_coverage_days": 30,
        "critical_days_threshold": 5,
        "urgent_days_threshold": 7,
        "low_days_threshold": 15,
        "min_significant_daily_sales": 0.1,
        "overstock_factor": 1.75,
        "high_sales_threshold": 60,
    },
    "collection": {
        "target_coverage_days": 21,
        "critical_days_threshold": 5,
        "urgent_days_threshold": 7,
        "low_days_threshold": 10,
        "min_significant_daily_sales": 0.0,
        "overstock_factor": 2.0,
        "high_sales_threshold": 150,
        "stock_basis": "ready_to_ship_regulator",
    },
    "pillow": {
        "target_coverage_days": 30,
        "critical_days_threshold": 3,
        "urgent_days_threshold": 7,
        "low_days_threshold": 15,
        "min_significant_daily_sales": 0.1,
        "overstock_factor": 2.0,
        "high_sales_threshold": 30,
    },
    "linha_branca": {
        "target_coverage_days": 45,
        "critical_days_threshold": 5,
        "urgent_days_threshold": 7,
        "low_days_threshold": 15,
        "min_significant_daily_sales": 0.1,
        "overstock_factor": 1.75,
        "high_sales_threshold": 60,
        "open_orders_in_critical_check": True,
    },
}
