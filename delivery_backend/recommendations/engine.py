from __future__ import annotations

import logging
from datetime import datetime

from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .data_store import DeliveryStore, get_store
from .models import Recommendation, RecommendationRequest
from .patterns import analyze_user_patterns
from .rules import (
    driver_recommendations,
    location_recommendations,
    price_recommendations,
    route_recommendations,
    time_recommendations,
)

logger = logging.getLogger(__name__)


def rank_recommendations(
    recommendations: list[Recommendation], limit: int,
) -> list[Recommendation]:
    """Highest confidence first; ties keep rule order."""
    return sorted(recommendations, key=lambda r: r.confidence, reverse=True)[:limit]


def generate_recommendations(
    user_id: str,
    current_request: RecommendationRequest | None = None,
    *,
    store: DeliveryStore | None = None,
    now: datetime | None = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> list[Recommendation]:
    """
    Build ranked delivery suggestions for a user.

    Steps:
    - Summarise the user's order history into a pattern.
    - Run the time, location, driver, price and route rules.
    - Sort by confidence and keep the top ``config.max_recommendations``.

    Order-history failures propagate; a failing driver pool only silences
    the driver rule.
    """
    store = store or get_store()
    now = now or datetime.now()

    pattern = analyze_user_patterns(user_id, store, now=now, config=config)

    candidates: list[Recommendation] = []
    candidates.extend(time_recommendations(pattern, now, config))
    candidates.extend(location_recommendations(pattern, current_request, config))
    candidates.extend(driver_recommendations(pattern, current_request, store.get_drivers, config))
    candidates.extend(price_recommendations(pattern, current_request, config))
    candidates.extend(route_recommendations(pattern, config))

    ranked = rank_recommendations(candidates, config.max_recommendations)
    logger.info(
        "Generated %d recommendations for user %s (%d candidates)",
        len(ranked), user_id, len(candidates),
    )
    return ranked


def track_recommendation_acceptance(
    user_id: str, recommendation_id: str, accepted: bool,
) -> None:
    """Log a user's decision on a recommendation.

    Decisions do not influence future patterns or rankings.
    """
    logger.info(
        "Recommendation %s for user %s: %s",
        recommendation_id, user_id, "accepted" if accepted else "dismissed",
    )
