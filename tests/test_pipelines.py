import json

import pandas as pd
import pytest
import requests

from coverage_engine import data_handler, settings
from coverage_engine.pipelines.abc_analysis import AbcAnalysisPipeline
from coverage_engine.pipelines.collection import CollectionCoveragePipeline
from coverage_engine.pipelines.linha_branca import LinhaBrancaPipeline
from coverage_engine.pipelines.pillow import PillowStockPipeline

SNAPSHOT = """skuId,name,productType,collectionName,stockTotal,stockReadyToShip,openOrders,sales30d,price
101,Travesseiro Altenburg Nasa Plus Alto,TRAVESSEIRO,,4,4,0,60,120
102,Travesseiro Altenburg Nasa Plus Baixo,TRAVESSEIRO,,6,,,30,
103,Lençol Queen,LENÇOL,Linha Branca,10,5,0,30,80
104,Travesseiro Altenburg Pluma,TRAVESSEIRO,,-3,0,0,1,50
"""


class _FakeResponse:
    def raise_for_status(self):
        pass


@pytest.fixture
def output_dir(tmp_path, monkeypatch):
    out = tmp_path / "output"
    monkeypatch.setattr(settings, "OUTPUT_DIR", out)
    monkeypatch.setattr(settings, "SAVE_JSON_OUTPUT", False)
    return out


@pytest.fixture
def input_dir(tmp_path, monkeypatch):
    inp = tmp_path / "input"
    inp.mkdir()
    monkeypatch.setattr(settings, "INPUT_DIR", inp)
    return inp


@pytest.fixture
def no_webhook(monkeypatch):
    def _fail(*args, **kwargs):
        raise AssertionError("webhook must not be called in test mode")

    monkeypatch.setattr(data_handler.requests, "post", _fail)


@pytest.fixture
def collection_records(make_record):
    return [
        make_record(sku_id="A", is_current_collection=True, stock_total=500, sales30d=300),
        make_record(
            sku_id="B",
            is_current_collection=True,
            stock_ready_to_ship=200,
            stock_regulator=100,
            stock_total=300,
            sales30d=300,
        ),
        make_record(sku_id="C", collection_name="Inverno", stock_total=1, sales30d=300),
        # 3 days on hand, short of the 10 day low window: priority 2
        make_record(sku_id="D", is_current_collection=True, stock_ready_to_ship=30, sales30d=300),
        # parked stock, no priority
        make_record(sku_id="E", is_current_collection=True, stock_ready_to_ship=80),
    ]


def test_collection_pipeline_writes_sorted_report(output_dir, no_webhook, collection_records):
    pipeline = CollectionCoveragePipeline(test_mode=True)
    rows = pipeline.run(records=collection_records)

    # only the current collection, measured against ready-to-ship + regulator stock
    assert [r["id"] for r in rows] == ["A", "D"]
    assert rows[0]["status"] == "Critical"
    assert rows[0]["priority"] == 1
    assert rows[1]["priority"] == 2
    assert rows[1]["coverage_stock"] == 30
    assert "suggestion_15d" in rows[0]
    assert pipeline.metadata["actionList"] == ["A", "D"]
    assert pipeline.metadata["statusBreakdown"]["Critical"]["count"] == 2

    (csv_path,) = output_dir.glob("collection_report_*.csv")
    df = pd.read_csv(csv_path)
    assert list(df["id"]) == ["A", "D"]


def test_collection_export_leaves_out_stable_and_parked_skus(
    output_dir, no_webhook, collection_records
):
    pipeline = CollectionCoveragePipeline(test_mode=True)
    rows = pipeline.run(records=collection_records)

    assert {r["priority"] for r in rows} <= {1, 2}
    assert "B" not in [r["id"] for r in rows]
    assert "E" not in [r["id"] for r in rows]
    # the breakdown still counts every analysed SKU
    breakdown = pipeline.metadata["statusBreakdown"]
    assert sum(bucket["count"] for bucket in breakdown.values()) == 4
    assert breakdown["NoSales"]["count"] == 1


def test_collection_pipeline_by_name(output_dir, no_webhook, collection_records):
    rows = CollectionCoveragePipeline(collection_name="inverno", test_mode=True).run(
        records=collection_records
    )
    assert [r["id"] for r in rows] == ["C"]


def test_pillow_pipeline_reads_latest_snapshot(input_dir, output_dir, no_webhook):
    (input_dir / "sku_snapshot_2024-06-01.csv").write_text("skuId,name\n999,Old\n", encoding="utf-8")
    (input_dir / "sku_snapshot_2024-06-30.csv").write_text(SNAPSHOT, encoding="utf-8")

    pipeline = PillowStockPipeline(test_mode=True)
    rows = pipeline.run()

    assert pipeline.metadata["snapshotDate"] == "2024-06-30"
    # the negative-stock row is rejected, the rest still analysed
    assert pipeline.metadata["rejectedRows"] == 1
    assert [(r["name"], r["stock"]) for r in rows] == [("Nasa Plus", 10)]
    assert len(list(output_dir.glob("pillow_report_*.csv"))) == 1


def test_missing_snapshot_gives_empty_report(input_dir, output_dir, no_webhook):
    assert PillowStockPipeline(test_mode=True).run() == []
    assert not output_dir.exists() or not any(output_dir.iterdir())


def test_empty_records(output_dir, no_webhook):
    assert AbcAnalysisPipeline(test_mode=True).run(records=[]) == []


def test_linha_branca_pipeline(output_dir, no_webhook, make_record):
    records = [
        make_record(name="Protetor de Colchão Queen", size="Queen", collection_name="Linha Branca",
                    stock_total=0, sales30d=90),
        make_record(name="Saia Box Queen", size="Queen", collection_name="linha branca",
                    stock_total=300, sales30d=90),
        make_record(name="Travesseiro Altenburg Nasa", collection_name="", stock_total=5),
    ]
    pipeline = LinhaBrancaPipeline(test_mode=True)
    rows = pipeline.run(records=records)

    assert [r["name"] for r in rows] == ["Protetor de Colchão Queen", "Saia Box Queen"]
    assert pipeline.metadata["urgentActions"] == [
        # 3/day for the 45 day target
        {"item": "Protetor de Colchão Queen", "suggestion": 135}
    ]
    assert pipeline.metadata["bedSizes"][0]["size"] == "Queen"
    assert pipeline.metadata["bedSizes"][0]["harmony"] == "Critical"


def test_categorizer_fills_missing_product_types(output_dir, no_webhook, make_record):
    async def categorizer(record):
        return "TRAVESSEIRO" if record.name.startswith("Travesseiro") else None

    records = [
        make_record(name="Travesseiro Altenburg Gellou", stock_total=3, sales30d=30),
        make_record(name="Lençol Casal", stock_total=3, sales30d=30),
    ]
    rows = PillowStockPipeline(test_mode=True, categorizer=categorizer).run(records=records)
    assert [r["name"] for r in rows] == ["Gellou"]


def test_json_output(output_dir, no_webhook, make_record, monkeypatch):
    monkeypatch.setattr(settings, "SAVE_JSON_OUTPUT", True)
    AbcAnalysisPipeline(test_mode=True).run(records=[make_record(sku_id="X", price=2, sales30d=5)])

    (json_path,) = output_dir.glob("abc_report_*.json")
    data = json.loads(json_path.read_text(encoding="utf-8"))
    assert data[0]["id"] == "X"
    assert data[0]["revenue30d"] == 10
    assert data[0]["rank"] == 1


def test_report_posted_to_webhook(output_dir, make_record, monkeypatch):
    calls = []

    def _post(url, json=None, timeout=None):
        calls.append((url, json))
        return _FakeResponse()

    monkeypatch.setattr(settings, "WEBHOOK_URL", "https://hooks.example.test/coverage")
    monkeypatch.setattr(data_handler.requests, "post", _post)

    AbcAnalysisPipeline().run(records=[make_record(sku_id="X", price=2, sales30d=5)])

    (url, payload), = calls
    assert url == "https://hooks.example.test/coverage"
    assert payload["reportType"] == "abc"
    assert payload["reportData"][0]["id"] == "X"
    assert payload["metadata"]["abcSummary"]["totalSkus"] == 1


def test_webhook_errors_do_not_fail_the_run(output_dir, make_record, monkeypatch):
    def _post(*args, **kwargs):
        raise requests.exceptions.ConnectionError("refused")

    monkeypatch.setattr(settings, "WEBHOOK_URL", "https://hooks.example.test/coverage")
    monkeypatch.setattr(data_handler.requests, "post", _post)

    rows = AbcAnalysisPipeline().run(records=[make_record(sku_id="X", price=2, sales30d=5)])
    assert len(rows) == 1


def test_missing_webhook_url_skips_post(output_dir, no_webhook, make_record, monkeypatch):
    monkeypatch.setattr(settings, "WEBHOOK_URL", None)
    rows = AbcAnalysisPipeline().run(records=[make_record(price=2, sales30d=5)])
    assert len(rows) == 1
