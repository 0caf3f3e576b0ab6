import pytest

from coverage_engine.schemas import PolicyConfig, SkuRecord


@pytest.fixture
def make_record():
    """Factory for SkuRecord with sensible defaults; keyword args override."""
    counter = {"n": 0}

    def _make(**fields):
        counter["n"] += 1
        fields.setdefault("sku_id", f"SKU{counter['n']:03d}")
        fields.setdefault("name", f"Produto {counter['n']}")
        return SkuRecord(**fields)

    return _make


@pytest.fixture
def policy():
    # critical 5 / urgent 7 / low 15 days, 30 day target, high sales > 60
    return PolicyConfig()
