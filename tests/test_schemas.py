import math
from datetime import date, datetime

import pytest
from pydantic import ValidationError

from coverage_engine.schemas import PolicyConfig, SkuRecord, StockBasis
from coverage_engine.utils import validate_records


def test_accepts_camel_case_columns():
    record = SkuRecord(
        **{
            "skuId": "123",
            "name": "Travesseiro Altenburg Nasa",
            "productType": "TRAVESSEIRO",
            "stockTotal": 12,
            "stockReadyToShip": 4,
            "openOrders": 2,
            "sales30d": 9,
            "price": 99.9,
        }
    )
    assert record.sku_id == "123"
    assert record.product_type == "TRAVESSEIRO"
    assert record.stock_total == 12
    assert record.open_orders == 2


def test_numeric_sku_ids_become_text():
    assert SkuRecord(skuId=123.0).sku_id == "123"
    assert SkuRecord(skuId=77).sku_id == "77"


def test_blank_values_default():
    record = SkuRecord(
        skuId="1", name=float("nan"), stockTotal=None, openOrders="", sales30d=float("nan"), price=""
    )
    assert record.name == ""
    assert record.stock_total == 0
    assert record.open_orders == 0
    assert record.sales30d == 0
    assert record.price is None


@pytest.mark.parametrize("field", ["stockTotal", "openOrders", "sales30d", "stockRegulator"])
def test_negative_quantities_rejected(field):
    with pytest.raises(ValidationError):
        SkuRecord(skuId="1", **{field: -1})


def test_non_numeric_quantity_rejected():
    with pytest.raises(ValidationError):
        SkuRecord(skuId="1", stockTotal="lots")


def test_infinite_quantity_rejected():
    with pytest.raises(ValidationError):
        SkuRecord(skuId="1", sales30d=math.inf)


def test_dates_parsed():
    record = SkuRecord(
        skuId="1",
        collectionStartDate="2024-06-01",
        collectionEndDate=datetime(2024, 8, 31, 12, 0),
    )
    assert record.collection_start_date == date(2024, 6, 1)
    assert record.collection_end_date == date(2024, 8, 31)
    assert SkuRecord(skuId="2", collectionStartDate=float("nan")).collection_start_date is None


def test_records_are_immutable():
    record = SkuRecord(skuId="1")
    with pytest.raises(ValidationError):
        record.stock_total = 5


def test_revenue_treats_unknown_price_as_zero():
    assert SkuRecord(skuId="1", price=None, sales30d=10).revenue30d == 0
    assert SkuRecord(skuId="1", price=2.5, sales30d=10).revenue30d == 25


def test_coverage_stock_per_basis():
    record = SkuRecord(skuId="1", stockTotal=100, stockReadyToShip=30, stockRegulator=20)
    assert record.coverage_stock() == 100
    assert record.coverage_stock(StockBasis.READY_TO_SHIP) == 30
    assert record.coverage_stock("ready_to_ship_regulator") == 50


def test_policy_thresholds_must_ascend():
    with pytest.raises(ValidationError):
        PolicyConfig(critical_days_threshold=10, urgent_days_threshold=7)


def test_policy_rejects_negative_and_zero_target():
    with pytest.raises(ValidationError):
        PolicyConfig(target_coverage_days=0)
    with pytest.raises(ValidationError):
        PolicyConfig(min_significant_daily_sales=-0.1)


def test_validate_records_isolates_bad_rows():
    rows = [
        {"skuId": "1", "stockTotal": 5},
        {"skuId": "2", "stockTotal": -5},
        {"skuId": "3", "sales30d": "abc"},
        {"skuId": "4"},
    ]
    valid, rejected = validate_records(rows)

    assert [r.sku_id for r in valid] == ["1", "4"]
    assert [r["row"] for r in rejected] == [1, 2]
    assert rejected[0]["data"]["skuId"] == "2"
    assert rejected[0]["errors"]
