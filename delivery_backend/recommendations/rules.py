"""
Rule modules of the recommendation generator.

Each rule is a pure function of the user's pattern, the optional request
context and the current time, and returns zero or more recommendations.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Callable

from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .models import (
    Driver,
    DriverAction,
    DriverMatch,
    LocationAction,
    LocationSuggestion,
    PackageTypeAction,
    PriceOptimization,
    Recommendation,
    RecommendationRequest,
    Route,
    RouteAction,
    RouteOptimization,
    Savings,
    TimeSlotAction,
    TimeSuggestion,
    UrgencyAction,
    UserDeliveryPattern,
)
from .patterns import time_slot

logger = logging.getLogger(__name__)


def new_recommendation_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex}"


# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------


def time_recommendations(
    pattern: UserDeliveryPattern,
    now: datetime,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> list[Recommendation]:
    recommendations: list[Recommendation] = []
    current_slot = time_slot(now.hour)

    if current_slot not in pattern.preferred_times and pattern.preferred_times:
        preferred = pattern.preferred_times[0]
        hour = config.optimal_hours.get(preferred, config.fallback_optimal_hour)
        recommendations.append(TimeSuggestion(
            id=new_recommendation_id("time"),
            title="Best time to ship",
            description=f"Based on your habits, {preferred} works best",
            confidence=config.preferred_time_confidence,
            savings=Savings(
                time_saved=config.preferred_time_saved,
                reason="Your preferred delivery window",
            ),
            suggested_action=TimeSlotAction(time_slot=preferred, hour=hour),
        ))

    # Peak hours are inclusive at both ends
    if config.peak_start_hour <= now.hour <= config.peak_end_hour:
        recommendations.append(TimeSuggestion(
            id=new_recommendation_id("peak"),
            title="Avoid the rush hour",
            description=f"Faster delivery after {config.after_peak_hour}:00",
            confidence=config.peak_confidence,
            savings=Savings(time_saved=config.peak_time_saved, reason="Less traffic"),
            suggested_action=TimeSlotAction(
                time_slot=time_slot(config.after_peak_hour),
                hour=config.after_peak_hour,
            ),
        ))

    return recommendations


# ---------------------------------------------------------------------------
# Location
# ---------------------------------------------------------------------------


def location_recommendations(
    pattern: UserDeliveryPattern,
    request: RecommendationRequest | None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> list[Recommendation]:
    if request is None:
        return []

    def _confidence(frequency: int) -> float:
        return min(config.location_confidence_cap, frequency / config.location_frequency_scale)

    recommendations: list[Recommendation] = []
    pickups = pattern.frequent_locations.pickup
    deliveries = pattern.frequent_locations.delivery

    if pickups and not request.pickup_address:
        top = pickups[0]
        recommendations.append(LocationSuggestion(
            id=new_recommendation_id("pickup"),
            title="Your usual pickup address",
            description=f"You often ship from: {top.address}",
            confidence=_confidence(top.frequency),
            savings=Savings(
                time_saved=config.location_time_saved,
                reason="Address already known to drivers",
            ),
            suggested_action=LocationAction(address=top.address, type="pickup"),
        ))

    if deliveries and not request.delivery_address:
        top = deliveries[0]
        recommendations.append(LocationSuggestion(
            id=new_recommendation_id("delivery"),
            title="Your usual delivery address",
            description=f"You often deliver to: {top.address}",
            confidence=_confidence(top.frequency),
            savings=Savings(
                time_saved=config.location_time_saved,
                reason="Familiar route",
            ),
            suggested_action=LocationAction(address=top.address, type="delivery"),
        ))

    return recommendations


# ---------------------------------------------------------------------------
# Driver match
# ---------------------------------------------------------------------------


def driver_recommendations(
    pattern: UserDeliveryPattern,
    request: RecommendationRequest | None,
    fetch_drivers: Callable[[], list[Driver]],
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> list[Recommendation]:
    """Suggest an approved driver when the request matches the usual package type.

    A failing driver pool only disables this rule.
    """
    try:
        drivers = fetch_drivers()
    except Exception:
        logger.warning("Driver pool unavailable, skipping driver match", exc_info=True)
        return []

    approved = [d for d in drivers if d.status == config.approved_driver_status]
    if not approved or request is None or not request.package_type:
        return []
    if not pattern.package_type_preferences:
        return []

    preferred_type = pattern.package_type_preferences[0].type
    if request.package_type != preferred_type:
        return []

    # No specialisation data yet, the first approved driver is suggested
    driver = approved[0]
    return [DriverMatch(
        id=new_recommendation_id("driver"),
        title="Recommended specialist driver",
        description=f"{driver.full_name} handles {preferred_type} deliveries well",
        confidence=config.driver_confidence,
        savings=Savings(time_saved=config.driver_time_saved, reason="Specialised experience"),
        suggested_action=DriverAction(driver_id=driver.id, driver_name=driver.full_name),
    )]


# ---------------------------------------------------------------------------
# Price
# ---------------------------------------------------------------------------


def price_recommendations(
    pattern: UserDeliveryPattern,
    request: RecommendationRequest | None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> list[Recommendation]:
    if request is None:
        return []

    recommendations: list[Recommendation] = []

    if pattern.budget_range == "low" and request.urgency == "express":
        recommendations.append(PriceOptimization(
            id=new_recommendation_id("price"),
            title="Save on this delivery",
            description="Standard delivery recommended (about 40% cheaper)",
            confidence=config.express_downgrade_confidence,
            savings=Savings(
                money_saved=config.express_downgrade_savings,
                reason="Matches your usual budget",
            ),
            suggested_action=UrgencyAction(
                urgency="standard", savings=config.express_downgrade_savings,
            ),
        ))

    if pattern.package_type_preferences and request.package_type:
        usual = pattern.package_type_preferences[0].type
        if request.package_type != usual:
            recommendations.append(PriceOptimization(
                id=new_recommendation_id("package"),
                title="Use your usual package type",
                description=f"You usually send: {usual}",
                confidence=config.package_type_confidence,
                savings=Savings(
                    time_saved=config.package_type_time_saved,
                    money_saved=config.package_type_savings,
                    reason="Preferential rate",
                ),
                suggested_action=PackageTypeAction(package_type=usual),
            ))

    return recommendations


# ---------------------------------------------------------------------------
# Route
# ---------------------------------------------------------------------------


def common_route(pattern: UserDeliveryPattern) -> Route | None:
    """Pair the most frequent pickup with the most frequent delivery address."""
    pickups = pattern.frequent_locations.pickup
    deliveries = pattern.frequent_locations.delivery
    if not pickups or not deliveries:
        return None
    if not pickups[0].address or not deliveries[0].address:
        return None
    return Route(
        origin=pickups[0].address,
        destination=deliveries[0].address,
        frequency=min(pickups[0].frequency, deliveries[0].frequency),
    )


def route_recommendations(
    pattern: UserDeliveryPattern,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> list[Recommendation]:
    route = common_route(pattern)
    if route is None:
        return []
    return [RouteOptimization(
        id=new_recommendation_id("route"),
        title="Optimised route detected",
        description=f"Familiar route from {route.origin} to {route.destination}",
        confidence=config.route_confidence,
        savings=Savings(time_saved=config.route_time_saved, reason="Frequently used route"),
        suggested_action=RouteAction(route=route),
    )]
