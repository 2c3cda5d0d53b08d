from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Iterable

from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .data_store import DeliveryStore
from .models import (
    AddressFrequency,
    FrequentLocations,
    HistoricalOrder,
    PackageTypeFrequency,
    TimeSlot,
    UserDeliveryPattern,
)


def time_slot(hour: int) -> TimeSlot:
    """Map an hour of the day (0-23) to its delivery time slot."""
    if 6 <= hour < 12:
        return "morning"
    if 12 <= hour < 17:
        return "afternoon"
    if 17 <= hour < 21:
        return "evening"
    return "night"


def default_pattern(
    user_id: str, config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> UserDeliveryPattern:
    """Pattern used for users who have not placed any order yet."""
    return UserDeliveryPattern(
        user_id=user_id,
        preferred_times=[config.default_time_slot],
        frequent_locations=FrequentLocations(),
        package_type_preferences=[],
        average_order_value=config.default_average_order_value,
        delivery_frequency=0,
        urgency_pattern="standard",
        budget_range="medium",
    )


def classify_urgency(express_ratio: float, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> str:
    if express_ratio > config.express_ratio_threshold:
        return "express"
    if express_ratio > config.mixed_ratio_threshold:
        return "mixed"
    return "standard"


def classify_budget(average_value: float, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> str:
    if average_value > config.high_budget_threshold:
        return "high"
    if average_value > config.medium_budget_threshold:
        return "medium"
    return "low"


def _top_addresses(counter: Counter[str], limit: int) -> list[AddressFrequency]:
    return [AddressFrequency(address=a, frequency=n) for a, n in counter.most_common(limit)]


def extract_patterns(
    user_id: str,
    orders: Iterable[HistoricalOrder],
    now: datetime | None = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> UserDeliveryPattern:
    """
    Reduce a customer's order history to a ``UserDeliveryPattern``.

    Counters keep first-seen order, and ``Counter.most_common`` sorts
    stably, so ties are ranked by first appearance in ``orders``.
    Orders without a timestamp are bucketed at ``now``. Blank addresses and
    package types still count towards frequency and price but are left out
    of the location and package tables.
    """
    now = now or datetime.now()

    slots: Counter[str] = Counter()
    pickups: Counter[str] = Counter()
    deliveries: Counter[str] = Counter()
    package_types: Counter[str] = Counter()
    total_value = 0.0
    express_count = 0
    count = 0

    for order in orders:
        created_at = order.created_at or now
        slots[time_slot(created_at.hour)] += 1
        # Blank fields are unknown, not a location or package type
        if order.pickup_address:
            pickups[order.pickup_address] += 1
        if order.delivery_address:
            deliveries[order.delivery_address] += 1
        if order.package_type:
            package_types[order.package_type] += 1
        total_value += order.price
        if order.urgency == "express":
            express_count += 1
        count += 1

    if count == 0:
        return default_pattern(user_id, config)

    average_value = total_value / count

    return UserDeliveryPattern(
        user_id=user_id,
        preferred_times=[s for s, _ in slots.most_common(config.preferred_times_limit)],
        frequent_locations=FrequentLocations(
            pickup=_top_addresses(pickups, config.frequent_locations_limit),
            delivery=_top_addresses(deliveries, config.frequent_locations_limit),
        ),
        package_type_preferences=[
            PackageTypeFrequency(type=t, frequency=n) for t, n in package_types.most_common()
        ],
        average_order_value=average_value,
        delivery_frequency=count,
        urgency_pattern=classify_urgency(express_count / count, config),
        budget_range=classify_budget(average_value, config),
    )


def analyze_user_patterns(
    user_id: str,
    store: DeliveryStore,
    now: datetime | None = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> UserDeliveryPattern:
    """Fetch a user's order history and summarise it.

    Store failures propagate to the caller.
    """
    orders = store.get_orders_by_customer(user_id)
    if not orders:
        return default_pattern(user_id, config)
    return extract_patterns(user_id, orders, now=now, config=config)
