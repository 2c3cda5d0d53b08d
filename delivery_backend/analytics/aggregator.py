from __future__ import annotations

from collections import Counter
from typing import Any

from .feedback import feedback_summary, get_feedback


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    generations = [e for e in events if e["type"] == "recommendations"]
    total = len(generations)

    # Average response time
    times = [g["response_time_ms"] for g in generations if "response_time_ms" in g]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Average list size
    counts = [g.get("results_returned", 0) for g in generations]
    avg_results = round(sum(counts) / total, 2) if total else 0.0

    # Recommendation types served
    type_counter: Counter[str] = Counter()
    for g in generations:
        for t in g.get("result_types", []) or []:
            type_counter[t] += 1
    type_counts = [{"type": t, "count": c} for t, c in type_counter.most_common()]

    # Share of calls that carried a request context
    with_context = sum(1 for g in generations if g.get("has_context"))

    unique_users = len({g.get("user_id") for g in generations})

    return {
        "total_generations": total,
        "unique_users": unique_users,
        "avg_response_time_ms": avg_time,
        "avg_results_returned": avg_results,
        "context_usage": round(with_context / total * 100, 1) if total else 0.0,
        "recommendation_types": type_counts,
        "feedback_summary": feedback_summary(get_feedback()),
    }
