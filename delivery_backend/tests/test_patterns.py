from __future__ import annotations

from datetime import datetime

import pytest

from delivery_backend.recommendations.models import HistoricalOrder
from delivery_backend.recommendations.patterns import (
    analyze_user_patterns,
    classify_budget,
    classify_urgency,
    extract_patterns,
    time_slot,
)

NOW = datetime(2026, 10, 19, 9, 30)


class FakeStore:
    def __init__(self, orders=None, error: Exception | None = None):
        self.orders = orders or []
        self.error = error

    def get_orders_by_customer(self, user_id):
        if self.error:
            raise self.error
        return [o for o in self.orders if o.customer_id == user_id]

    def get_drivers(self):
        return []


def _order(
    order_id: int = 1,
    pickup: str = "ACI 2000",
    delivery: str = "Hippodrome",
    package_type: str = "documents",
    price: float = 2000.0,
    urgency: str = "standard",
    hour: int | None = 14,
    customer_id: str = "1",
) -> HistoricalOrder:
    return HistoricalOrder(
        id=order_id,
        customer_id=customer_id,
        pickup_address=pickup,
        delivery_address=delivery,
        package_type=package_type,
        price=price,
        urgency=urgency,
        created_at=datetime(2026, 8, 1, hour, 0) if hour is not None else None,
    )


# ── Time slots ───────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "hour, slot",
    [
        (0, "night"), (5, "night"), (6, "morning"), (11, "morning"),
        (12, "afternoon"), (16, "afternoon"), (17, "evening"),
        (20, "evening"), (21, "night"), (23, "night"),
    ],
)
def test_time_slot_boundaries(hour, slot):
    assert time_slot(hour) == slot


# ── Default pattern ──────────────────────────────────────────────────────


def test_default_pattern_for_user_without_orders():
    pattern = analyze_user_patterns("42", FakeStore(), now=NOW)
    assert pattern.user_id == "42"
    assert pattern.preferred_times == ["afternoon"]
    assert pattern.frequent_locations.pickup == []
    assert pattern.frequent_locations.delivery == []
    assert pattern.package_type_preferences == []
    assert pattern.average_order_value == 2000
    assert pattern.delivery_frequency == 0
    assert pattern.urgency_pattern == "standard"
    assert pattern.budget_range == "medium"


def test_extract_patterns_with_no_orders_returns_default():
    pattern = extract_patterns("7", [], now=NOW)
    assert pattern.delivery_frequency == 0
    assert pattern.average_order_value == 2000


# ── Extraction ───────────────────────────────────────────────────────────


def test_ten_identical_orders():
    orders = [_order(order_id=i) for i in range(10)]
    pattern = analyze_user_patterns("1", FakeStore(orders), now=NOW)

    assert pattern.preferred_times == ["afternoon"]
    assert [(a.address, a.frequency) for a in pattern.frequent_locations.pickup] == [("ACI 2000", 10)]
    assert [(a.address, a.frequency) for a in pattern.frequent_locations.delivery] == [("Hippodrome", 10)]
    assert [(p.type, p.frequency) for p in pattern.package_type_preferences] == [("documents", 10)]
    assert pattern.average_order_value == 2000
    assert pattern.delivery_frequency == 10
    assert pattern.budget_range == "medium"
    assert pattern.urgency_pattern == "standard"


def test_list_lengths_are_capped():
    hours = [7, 13, 18, 23, 8, 14]
    orders = [
        _order(order_id=i, pickup=f"Pickup {i}", delivery=f"Drop {i}",
               package_type=f"type-{i}", hour=hours[i % len(hours)])
        for i in range(9)
    ]
    pattern = extract_patterns("1", orders, now=NOW)

    assert len(pattern.preferred_times) == 3
    assert len(pattern.frequent_locations.pickup) == 5
    assert len(pattern.frequent_locations.delivery) == 5
    # Package types are never truncated
    assert len(pattern.package_type_preferences) == 9


def test_average_order_value_is_mean_of_prices():
    prices = [1000.0, 2500.5, 3999.99, 120.0]
    orders = [_order(order_id=i, price=p) for i, p in enumerate(prices)]
    pattern = extract_patterns("1", orders, now=NOW)
    assert pattern.average_order_value == pytest.approx(sum(prices) / len(prices))


def test_frequencies_sorted_descending_and_ties_keep_first_seen():
    orders = [
        _order(1, pickup="Badalabougou", hour=8),
        _order(2, pickup="ACI 2000", hour=19),
        _order(3, pickup="ACI 2000", hour=19),
        _order(4, pickup="Hamdallaye", hour=8),
        _order(5, pickup="Faladie", hour=22),
    ]
    pattern = extract_patterns("1", orders, now=NOW)

    assert [a.address for a in pattern.frequent_locations.pickup] == [
        "ACI 2000", "Badalabougou", "Hamdallaye", "Faladie",
    ]
    # morning and evening tie at 2, morning was seen first
    assert pattern.preferred_times == ["morning", "evening", "night"]


def test_addresses_are_matched_exactly():
    orders = [
        _order(1, pickup="ACI 2000"),
        _order(2, pickup="aci 2000"),
        _order(3, pickup="ACI 2000 "),
    ]
    pattern = extract_patterns("1", orders, now=NOW)
    assert [a.frequency for a in pattern.frequent_locations.pickup] == [1, 1, 1]


def test_blank_fields_left_out_of_frequency_tables():
    orders = [
        _order(1, pickup="", package_type="", price=1000.0),
        _order(2, pickup="", delivery="", package_type="", price=1000.0),
        _order(3, price=4000.0),
    ]
    pattern = extract_patterns("1", orders, now=NOW)
    assert [(a.address, a.frequency) for a in pattern.frequent_locations.pickup] == [("ACI 2000", 1)]
    assert [(a.address, a.frequency) for a in pattern.frequent_locations.delivery] == [("Hippodrome", 2)]
    assert [(p.type, p.frequency) for p in pattern.package_type_preferences] == [("documents", 1)]
    assert pattern.delivery_frequency == 3
    assert pattern.average_order_value == pytest.approx(2000.0)


def test_missing_timestamp_uses_now():
    pattern = extract_patterns("1", [_order(hour=None)], now=datetime(2026, 1, 1, 19, 0))
    assert pattern.preferred_times == ["evening"]


def test_urgency_and_budget_classification_from_orders():
    orders = [
        _order(1, urgency="express", price=500),
        _order(2, urgency="express", price=700),
        _order(3, urgency="standard", price=600),
    ]
    pattern = extract_patterns("1", orders, now=NOW)
    assert pattern.urgency_pattern == "express"
    assert pattern.budget_range == "low"


def test_only_express_counts_as_express():
    orders = [_order(i, urgency="urgent") for i in range(4)]
    pattern = extract_patterns("1", orders, now=NOW)
    assert pattern.urgency_pattern == "standard"


# ── Classification thresholds ────────────────────────────────────────────


@pytest.mark.parametrize(
    "ratio, expected",
    [(0.0, "standard"), (0.3, "standard"), (0.31, "mixed"), (0.6, "mixed"), (0.61, "express"), (1.0, "express")],
)
def test_classify_urgency_thresholds(ratio, expected):
    assert classify_urgency(ratio) == expected


@pytest.mark.parametrize(
    "value, expected",
    [(0, "low"), (1500, "low"), (1500.01, "medium"), (3000, "medium"), (3000.01, "high")],
)
def test_classify_budget_thresholds(value, expected):
    assert classify_budget(value) == expected


def test_classifications_are_monotonic():
    budget_rank = {"low": 0, "medium": 1, "high": 2}
    urgency_rank = {"standard": 0, "mixed": 1, "express": 2}

    budgets = [budget_rank[classify_budget(v)] for v in range(0, 6000, 50)]
    assert budgets == sorted(budgets)

    urgencies = [urgency_rank[classify_urgency(r / 100)] for r in range(0, 101)]
    assert urgencies == sorted(urgencies)


# ── Collaborator failures ────────────────────────────────────────────────


def test_order_store_failure_propagates():
    store = FakeStore(error=ConnectionError("database down"))
    with pytest.raises(ConnectionError):
        analyze_user_patterns("1", store, now=NOW)
