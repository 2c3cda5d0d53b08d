from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

TimeSlot = Literal["morning", "afternoon", "evening", "night"]
UrgencyPattern = Literal["standard", "express", "mixed"]
BudgetRange = Literal["low", "medium", "high"]


class CamelModel(BaseModel):
    """Snake_case attributes in Python, camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Collaborator records ────────────────────────────────────────────────


class HistoricalOrder(CamelModel):
    id: int
    customer_id: str
    pickup_address: str
    delivery_address: str
    package_type: str
    price: float
    urgency: str = "standard"
    created_at: datetime | None = None


class Driver(CamelModel):
    id: int
    full_name: str
    status: str = "pending"
    vehicle_type: str | None = None
    city: str | None = None


# ── Derived pattern ─────────────────────────────────────────────────────


class AddressFrequency(CamelModel):
    address: str
    frequency: int


class PackageTypeFrequency(CamelModel):
    type: str
    frequency: int


class FrequentLocations(CamelModel):
    pickup: list[AddressFrequency] = Field(default_factory=list)
    delivery: list[AddressFrequency] = Field(default_factory=list)


class UserDeliveryPattern(CamelModel):
    user_id: str
    preferred_times: list[TimeSlot]
    frequent_locations: FrequentLocations = Field(default_factory=FrequentLocations)
    package_type_preferences: list[PackageTypeFrequency] = Field(default_factory=list)
    average_order_value: float
    delivery_frequency: int
    urgency_pattern: UrgencyPattern
    budget_range: BudgetRange


# ── Request context ─────────────────────────────────────────────────────


class RecommendationRequest(CamelModel):
    pickup_address: str | None = Field(default=None, max_length=500)
    delivery_address: str | None = Field(default=None, max_length=500)
    package_type: str | None = Field(default=None, max_length=100)
    urgency: str | None = Field(default=None, max_length=50)


# ── Suggested actions, one shape per recommendation type ────────────────


class TimeSlotAction(CamelModel):
    time_slot: TimeSlot
    hour: int = Field(..., ge=0, le=23)


class LocationAction(CamelModel):
    address: str
    type: Literal["pickup", "delivery"]


class DriverAction(CamelModel):
    driver_id: int
    driver_name: str


class UrgencyAction(CamelModel):
    urgency: str
    savings: float


class PackageTypeAction(CamelModel):
    package_type: str


class Route(CamelModel):
    origin: str = Field(..., alias="from")
    destination: str = Field(..., alias="to")
    frequency: int


class RouteAction(CamelModel):
    route: Route


# ── Recommendations ─────────────────────────────────────────────────────


class Savings(CamelModel):
    time_saved: int = Field(default=0, ge=0)
    money_saved: float = Field(default=0.0, ge=0.0)
    reason: str


class _RecommendationBase(CamelModel):
    id: str
    title: str
    description: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    savings: Savings


class TimeSuggestion(_RecommendationBase):
    type: Literal["time_suggestion"] = "time_suggestion"
    suggested_action: TimeSlotAction


class LocationSuggestion(_RecommendationBase):
    type: Literal["location_suggestion"] = "location_suggestion"
    suggested_action: LocationAction


class DriverMatch(_RecommendationBase):
    type: Literal["driver_match"] = "driver_match"
    suggested_action: DriverAction


class PriceOptimization(_RecommendationBase):
    type: Literal["price_optimization"] = "price_optimization"
    suggested_action: UrgencyAction | PackageTypeAction


class RouteOptimization(_RecommendationBase):
    type: Literal["route_optimization"] = "route_optimization"
    suggested_action: RouteAction


Recommendation = Annotated[
    Union[
        TimeSuggestion,
        LocationSuggestion,
        DriverMatch,
        PriceOptimization,
        RouteOptimization,
    ],
    Field(discriminator="type"),
]


# ── API payloads ────────────────────────────────────────────────────────


class LoginRequest(BaseModel):
    username: str
    password: str


class FeedbackResponse(CamelModel):
    status: str
    total_feedback: int
