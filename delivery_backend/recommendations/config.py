from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_PACKAGE_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


def _default_optimal_hours() -> dict[str, int]:
    return {"morning": 9, "afternoon": 14, "evening": 18, "night": 10}


@dataclass(frozen=True)
class EngineConfig:
    """
    Tunable constants for pattern extraction and the recommendation rules.

    Money amounts share the unit of the order prices they are compared with.
    """

    max_recommendations: int = 5
    preferred_times_limit: int = 3
    frequent_locations_limit: int = 5

    # Pattern classification (strict "greater than" thresholds)
    express_ratio_threshold: float = 0.6
    mixed_ratio_threshold: float = 0.3
    high_budget_threshold: float = 3000.0
    medium_budget_threshold: float = 1500.0

    # Default pattern for users without history
    default_time_slot: str = "afternoon"
    default_average_order_value: float = 2000.0

    # Time rules
    optimal_hours: dict[str, int] = field(default_factory=_default_optimal_hours)
    fallback_optimal_hour: int = 10
    preferred_time_confidence: float = 0.85
    preferred_time_saved: int = 15
    peak_start_hour: int = 12
    peak_end_hour: int = 14
    after_peak_hour: int = 15
    peak_confidence: float = 0.75
    peak_time_saved: int = 20

    # Location rule
    location_confidence_cap: float = 0.9
    location_frequency_scale: float = 10.0
    location_time_saved: int = 5

    # Driver rule
    approved_driver_status: str = "approved"
    driver_confidence: float = 0.8
    driver_time_saved: int = 10

    # Price rules
    express_downgrade_confidence: float = 0.7
    express_downgrade_savings: float = 800.0
    package_type_confidence: float = 0.6
    package_type_savings: float = 200.0
    package_type_time_saved: int = 5

    # Route rule
    route_confidence: float = 0.75
    route_time_saved: int = 12


@dataclass(frozen=True)
class StoreConfig:
    data_dir: Path = Path(os.getenv("DELIVERY_DATA_DIR", str(_PACKAGE_DATA_DIR)))
    orders_filename: str = "orders.csv"
    drivers_filename: str = "drivers.csv"

    @property
    def orders_path(self) -> Path:
        return self.data_dir / self.orders_filename

    @property
    def drivers_path(self) -> Path:
        return self.data_dir / self.drivers_filename


DEFAULT_ENGINE_CONFIG = EngineConfig()
DEFAULT_STORE_CONFIG = StoreConfig()
