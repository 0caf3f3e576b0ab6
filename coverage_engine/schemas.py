import math
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class StockStatus(str, Enum):
    CRITICAL = "Critical"
    URGENT = "Urgent"
    LOW = "Low"
    HEALTHY = "Healthy"
    OVERSTOCKED = "Overstocked"
    NO_SALES = "NoSales"
    NOT_APPLICABLE = "NotApplicable"


class AbcCurve(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    NOT_APPLICABLE = "N/A"


class StockBasis(str, Enum):
    """Which physical stock pool a view measures coverage against."""

    TOTAL = "total"
    READY_TO_SHIP = "ready_to_ship"
    READY_TO_SHIP_REGULATOR = "ready_to_ship_regulator"


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return isinstance(value, float) and math.isnan(value)


class SkuRecord(BaseModel):
    """
    Defines the data contract for a single, already-parsed inventory line.
    Quantities are validated here so corrupt upstream values never reach the
    coverage math: negatives and non-numbers are rejected, blanks become zero.
    """

    sku_id: str = Field(..., alias="skuId")
    name: str = Field(default="", alias="name")
    variant_key: str = Field(default="", alias="variantKey")
    size: str = Field(default="", alias="size")
    product_type: str = Field(default="", alias="productType")
    collection_name: str = Field(default="", alias="collectionName")

    stock_total: float = Field(default=0, ge=0, allow_inf_nan=False, alias="stockTotal")
    stock_ready_to_ship: float = Field(
        default=0, ge=0, allow_inf_nan=False, alias="stockReadyToShip"
    )
    stock_regulator: float = Field(
        default=0, ge=0, allow_inf_nan=False, alias="stockRegulator"
    )
    open_orders: float = Field(default=0, ge=0, allow_inf_nan=False, alias="openOrders")
    sales30d: float = Field(default=0, ge=0, allow_inf_nan=False, alias="sales30d")
    # None means "no price known", which is not the same as free.
    price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False, alias="price")

    collection_start_date: Optional[date] = Field(default=None, alias="collectionStartDate")
    collection_end_date: Optional[date] = Field(default=None, alias="collectionEndDate")
    is_current_collection: bool = Field(default=False, alias="isCurrentCollection")

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator("sku_id", mode="before")
    @classmethod
    def _sku_id_as_text(cls, value):
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        if isinstance(value, (int, float)):
            return str(value)
        return value.strip() if isinstance(value, str) else value

    @field_validator(
        "name", "variant_key", "size", "product_type", "collection_name", mode="before"
    )
    @classmethod
    def _text_or_blank(cls, value):
        if _is_missing(value):
            return ""
        return str(value).strip()

    @field_validator(
        "stock_total",
        "stock_ready_to_ship",
        "stock_regulator",
        "open_orders",
        "sales30d",
        mode="before",
    )
    @classmethod
    def _missing_quantity_is_zero(cls, value):
        return 0 if _is_missing(value) else value

    @field_validator("price", mode="before")
    @classmethod
    def _missing_price_is_unknown(cls, value):
        return None if _is_missing(value) else value

    @field_validator("collection_start_date", "collection_end_date", mode="before")
    @classmethod
    def _parse_date(cls, value):
        if _is_missing(value):
            return None
        if isinstance(value, datetime):
            return value.date()
        return value

    @field_validator("is_current_collection", mode="before")
    @classmethod
    def _missing_flag_is_false(cls, value):
        return False if _is_missing(value) else value

    @property
    def revenue30d(self) -> float:
        return (self.price or 0) * self.sales30d

    def coverage_stock(self, basis: StockBasis | str = StockBasis.TOTAL) -> float:
        basis = StockBasis(basis)
        if basis is StockBasis.READY_TO_SHIP:
            return self.stock_ready_to_ship
        if basis is StockBasis.READY_TO_SHIP_REGULATOR:
            return self.stock_ready_to_ship + self.stock_regulator
        return self.stock_total


class PolicyConfig(BaseModel):
    """
    Thresholds for one dashboard view. Immutable; every classifier receives
    it as a parameter instead of reading constants.
    """

    target_coverage_days: float = Field(default=30, gt=0, alias="targetCoverageDays")
    critical_days_threshold: float = Field(default=5, ge=0, alias="criticalDaysThreshold")
    urgent_days_threshold: float = Field(default=7, ge=0, alias="urgentDaysThreshold")
    low_days_threshold: float = Field(default=15, ge=0, alias="lowDaysThreshold")
    min_significant_daily_sales: float = Field(
        default=0.1, ge=0, alias="minSignificantDailySales"
    )
    overstock_factor: float = Field(default=1.75, gt=0, alias="overstockFactor")
    high_sales_threshold: float = Field(default=60, ge=0, alias="highSalesThreshold")

    stock_basis: StockBasis = Field(default=StockBasis.TOTAL, alias="stockBasis")
    open_orders_in_critical_check: bool = Field(
        default=True, alias="openOrdersInCriticalCheck"
    )

    # Priority engine
    rupture_days: float = Field(default=1.0, ge=0, alias="ruptureDays")
    min_priority_daily_sales: float = Field(default=1.0, ge=0, alias="minPriorityDailySales")
    recovery_days: float = Field(default=3.0, ge=0, alias="recoveryDays")

    class Config:
        populate_by_name = True
        frozen = True

    @model_validator(mode="after")
    def _thresholds_ascend(self):
        if not (
            self.critical_days_threshold
            <= self.urgent_days_threshold
            <= self.low_days_threshold
        ):
            raise ValueError(
                "day thresholds must ascend: critical <= urgent <= low "
                f"(got {self.critical_days_threshold}, {self.urgent_days_threshold}, "
                f"{self.low_days_threshold})"
            )
        return self


class CoverageResult(BaseModel):
    """Derived metrics for one SKU or one aggregate. Always recomputed."""

    coverage_stock: float
    open_orders: float
    sales30d: float
    daily_average_sales: float
    days_of_stock: float
    effective_coverage: float
    target_stock: float
    replenishment_suggestion: int
    status: StockStatus
    priority: Optional[int] = None
    justification: str = ""

    class Config:
        frozen = True


class SkuAnalysis(CoverageResult):
    record: SkuRecord

    @property
    def item_id(self) -> str:
        return self.record.sku_id

    @property
    def display_name(self) -> str:
        return self.record.name


class AggregatedItem(CoverageResult):
    """Many SKU variants that share a grouping key, analysed as one item."""

    group_key: str
    display_name: str
    labels: dict[str, str] = Field(default_factory=dict)
    total_stock: float
    total_ready_to_ship: float
    total_regulator: float
    total_sales30d: float
    total_open_orders: float
    avg_price: Optional[float] = None
    skus: list[SkuRecord] = Field(default_factory=list)

    @property
    def item_id(self) -> str:
        return self.group_key


class AbcEntry(BaseModel):
    record: SkuRecord
    revenue30d: float
    cumulative_percentage: float
    curve: AbcCurve
    rank: Optional[int] = None

    class Config:
        frozen = True


class CurveStats(BaseModel):
    skus: int = 0
    revenue: float = 0.0
    sku_percent: float = 0.0
    revenue_percent: float = 0.0


class AbcSummary(BaseModel):
    total_revenue30d: float
    total_skus: int
    curves: dict[AbcCurve, CurveStats]
