import pytest

from coverage_engine.engine import assess
from coverage_engine.policies import available_policies, get_policy
from coverage_engine.risk import severity_rank
from coverage_engine.schemas import PolicyConfig, StockStatus


def _status(policy, stock, sales30d, open_orders=0):
    return assess(stock, sales30d, open_orders, policy)["status"]


def test_no_stock_no_sales_is_not_applicable(policy):
    result = assess(0, 0, 0, policy)
    assert result["status"] == StockStatus.NOT_APPLICABLE
    assert result["replenishment_suggestion"] == 0
    assert result["priority"] is None


def test_stock_without_sales_is_no_sales(policy):
    result = assess(1000, 0, 0, policy)
    assert result["status"] == StockStatus.NO_SALES
    assert result["replenishment_suggestion"] == 0
    assert result["priority"] is None


def test_demand_below_significance_floor_counts_as_no_sales(policy):
    # 2 units / 30 days is under 0.1 per day
    assert _status(policy, stock=50, sales30d=2) == StockStatus.NO_SALES


def test_empty_shelf_with_demand_is_critical(policy):
    result = assess(0, 300, 0, policy)
    assert result["status"] == StockStatus.CRITICAL
    assert result["priority"] == 1
    assert result["replenishment_suggestion"] == 300


def test_short_coverage_not_rescued_by_open_orders_is_critical(policy):
    assert _status(policy, stock=20, sales30d=300) == StockStatus.CRITICAL


def test_open_orders_lift_item_out_of_critical(policy):
    # 2 days on hand, 22 days once the open orders arrive
    assert _status(policy, stock=20, sales30d=300, open_orders=200) == StockStatus.URGENT


def test_exactly_at_critical_threshold_is_not_critical(policy):
    # 5 days of coverage with critical at 5: strict comparison
    assert _status(policy, stock=50, sales30d=300) != StockStatus.CRITICAL


def test_urgent_requires_high_sales(policy):
    assert _status(policy, stock=18, sales30d=90) == StockStatus.URGENT
    assert _status(policy, stock=12, sales30d=60) == StockStatus.LOW


def test_low(policy):
    assert _status(policy, stock=30, sales30d=90) == StockStatus.LOW


def test_healthy(policy):
    assert _status(policy, stock=90, sales30d=90) == StockStatus.HEALTHY


def test_overstocked(policy):
    # 200 days of stock, 6.7x the 30 day target
    assert _status(policy, stock=600, sales30d=90) == StockStatus.OVERSTOCKED


def test_critical_check_without_open_orders():
    counting = PolicyConfig(open_orders_in_critical_check=True)
    ignoring = PolicyConfig(open_orders_in_critical_check=False)

    assert _status(counting, stock=0, sales30d=300, open_orders=200) == StockStatus.URGENT
    assert _status(ignoring, stock=0, sales30d=300, open_orders=200) == StockStatus.CRITICAL


def test_thresholds_come_from_policy():
    strict = PolicyConfig(critical_days_threshold=10, urgent_days_threshold=12, low_days_threshold=20)
    assert _status(strict, stock=80, sales30d=300) == StockStatus.CRITICAL
    assert _status(PolicyConfig(), stock=80, sales30d=300) == StockStatus.LOW


def test_severity_order():
    ordered = sorted(StockStatus, key=severity_rank)
    assert ordered[0] == StockStatus.CRITICAL
    assert ordered[-1] == StockStatus.NOT_APPLICABLE
    assert severity_rank("Urgent") < severity_rank("Low")


def test_unknown_status_rejected():
    with pytest.raises(ValueError):
        severity_rank("Whatever")


@pytest.mark.parametrize("profile", available_policies())
def test_no_demand_outcomes_hold_for_every_profile(profile):
    policy = get_policy(profile)

    empty = assess(0, 0, 0, policy)
    assert empty["status"] == StockStatus.NOT_APPLICABLE
    assert empty["priority"] is None

    parked = assess(1000, 0, 0, policy)
    assert parked["status"] == StockStatus.NO_SALES
    assert parked["replenishment_suggestion"] == 0
    assert parked["priority"] is None


@pytest.mark.parametrize("profile", available_policies())
def test_stockout_with_demand_is_critical_for_every_profile(profile):
    result = assess(0, 300, 0, get_policy(profile))
    assert result["status"] == StockStatus.CRITICAL
    assert result["priority"] == 1


def test_zero_significance_floor_still_detects_no_demand():
    policy = PolicyConfig(min_significant_daily_sales=0)
    assert _status(policy, stock=0, sales30d=0) == StockStatus.NOT_APPLICABLE
    assert _status(policy, stock=40, sales30d=0) == StockStatus.NO_SALES
    # any demand at all counts when the floor is zero
    assert _status(policy, stock=40, sales30d=1) != StockStatus.NO_SALES
