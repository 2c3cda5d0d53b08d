from __future__ import annotations

import time
from typing import Any

_feedback: list[dict[str, Any]] = []


def record_feedback(user_id: str, recommendation_id: str, accepted: bool) -> None:
    _feedback.append({
        "user_id": user_id,
        "recommendation_id": recommendation_id,
        "accepted": accepted,
        "timestamp": time.time(),
    })


def get_feedback() -> list[dict[str, Any]]:
    return _feedback


def feedback_summary(feedback: list[dict[str, Any]]) -> dict[str, Any]:
    accepted = sum(1 for f in feedback if f["accepted"])
    return {
        "total": len(feedback),
        "accepted": accepted,
        "dismissed": len(feedback) - accepted,
        "acceptance_rate": round(accepted / len(feedback) * 100, 1) if feedback else 0.0,
    }


def clear_feedback() -> None:
    _feedback.clear()
