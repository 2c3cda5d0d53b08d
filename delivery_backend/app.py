from __future__ import annotations

import os
import time
from datetime import datetime

from fastapi import Depends, FastAPI, HTTPException, Path, Query, Request
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_analytics
from .analytics.feedback import feedback_summary, get_feedback, record_feedback
from .analytics.store import get_events, record_event
from .auth.dependencies import current_user_id, require_admin, require_user
from .auth.users import authenticate
from .recommendations.data_store import DeliveryStore, get_store
from .recommendations.engine import (
    generate_recommendations,
    track_recommendation_acceptance,
)
from .recommendations.models import (
    FeedbackResponse,
    LoginRequest,
    Recommendation,
    RecommendationRequest,
    UserDeliveryPattern,
)
from .recommendations.patterns import analyze_user_patterns

app = FastAPI(title="Delivery Recommendation API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "delivery-recs-secret-change-in-production"),
)


def current_time() -> datetime:
    return datetime.now()


def _serve_recommendations(
    user_id: str,
    context: RecommendationRequest | None,
    store: DeliveryStore,
    now: datetime,
) -> list[Recommendation]:
    start_time = time.time()
    recommendations = generate_recommendations(user_id, context, store=store, now=now)
    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    record_event("recommendations", {
        "user_id": user_id,
        "has_context": context is not None,
        "package_type": context.package_type if context else None,
        "urgency": context.urgency if context else None,
        "results_returned": len(recommendations),
        "result_types": [r.type for r in recommendations],
        "response_time_ms": elapsed_ms,
    })
    return recommendations


def _record_decision(user_id: str, recommendation_id: str, accepted: bool) -> FeedbackResponse:
    track_recommendation_acceptance(user_id, recommendation_id, accepted)
    record_feedback(user_id, recommendation_id, accepted)
    return FeedbackResponse(status="recorded", total_feedback=len(get_feedback()))


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── User endpoints ───────────────────────────────────────────────────────


@app.get("/recommendations", response_model=list[Recommendation])
def recommendations(
    pickup_address: str | None = Query(None, alias="pickupAddress", max_length=500),
    delivery_address: str | None = Query(None, alias="deliveryAddress", max_length=500),
    package_type: str | None = Query(None, alias="packageType", max_length=100),
    urgency: str | None = Query(None, max_length=50),
    user_id: str = Depends(current_user_id),
    store: DeliveryStore = Depends(get_store),
    now: datetime = Depends(current_time),
) -> list[Recommendation]:
    context = RecommendationRequest(
        pickup_address=pickup_address,
        delivery_address=delivery_address,
        package_type=package_type,
        urgency=urgency,
    )
    return _serve_recommendations(user_id, context, store, now)


@app.post("/recommendations/generate", response_model=list[Recommendation])
def generate(
    body: RecommendationRequest | None = None,
    user_id: str = Depends(current_user_id),
    store: DeliveryStore = Depends(get_store),
    now: datetime = Depends(current_time),
) -> list[Recommendation]:
    return _serve_recommendations(user_id, body, store, now)


@app.post("/recommendations/{recommendation_id}/accept", response_model=FeedbackResponse)
def accept(
    recommendation_id: str = Path(..., min_length=1, max_length=100),
    user_id: str = Depends(current_user_id),
) -> FeedbackResponse:
    return _record_decision(user_id, recommendation_id, accepted=True)


@app.post("/recommendations/{recommendation_id}/dismiss", response_model=FeedbackResponse)
def dismiss(
    recommendation_id: str = Path(..., min_length=1, max_length=100),
    user_id: str = Depends(current_user_id),
) -> FeedbackResponse:
    return _record_decision(user_id, recommendation_id, accepted=False)


@app.get("/user/delivery-patterns", response_model=UserDeliveryPattern)
def delivery_patterns(
    user_id: str = Depends(current_user_id),
    store: DeliveryStore = Depends(get_store),
    now: datetime = Depends(current_time),
) -> UserDeliveryPattern:
    return analyze_user_patterns(user_id, store, now=now)


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/analytics")
def analytics(user: dict = Depends(require_admin)) -> dict:
    return compute_analytics(get_events("recommendations"))


@app.get("/feedback/stats")
def feedback_stats(user: dict = Depends(require_admin)) -> dict:
    return feedback_summary(get_feedback())
