from __future__ import annotations

from pathlib import Path
from typing import Protocol

import pandas as pd

from .config import DEFAULT_STORE_CONFIG, StoreConfig
from .models import Driver, HistoricalOrder


class DeliveryStoreError(RuntimeError):
    """Raised when order or driver data cannot be loaded."""


class DeliveryStore(Protocol):
    def get_orders_by_customer(self, user_id: str) -> list[HistoricalOrder]: ...

    def get_drivers(self) -> list[Driver]: ...


_ORDER_TEXT_COLUMNS = ("pickup_address", "delivery_address", "package_type")


def _read_csv(path: Path, **kwargs) -> pd.DataFrame:
    try:
        return pd.read_csv(path, **kwargs)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise DeliveryStoreError(f"Could not read {path}") from exc


def _optional(value):
    return None if pd.isna(value) else value


class CsvDeliveryStore:
    """Order history and driver pool backed by two CSV files.

    Files are read on first access and kept in memory for the lifetime of
    the store.
    """

    def __init__(self, config: StoreConfig = DEFAULT_STORE_CONFIG) -> None:
        self._config = config
        self._orders: pd.DataFrame | None = None
        self._drivers: pd.DataFrame | None = None

    def _load_orders(self) -> pd.DataFrame:
        df = _read_csv(self._config.orders_path, dtype={"customer_id": str})
        df["customer_id"] = df["customer_id"].fillna("").str.strip()
        # Blank cells become empty strings, never the text "nan"
        for column in _ORDER_TEXT_COLUMNS:
            df[column] = df[column].fillna("").astype(str).str.strip()
        df["created_at"] = pd.to_datetime(df["created_at"], errors="coerce")
        df["urgency"] = df["urgency"].fillna("standard")
        return df

    def _orders_frame(self) -> pd.DataFrame:
        if self._orders is None:
            self._orders = self._load_orders()
        return self._orders

    def _drivers_frame(self) -> pd.DataFrame:
        if self._drivers is None:
            self._drivers = _read_csv(self._config.drivers_path)
        return self._drivers

    def get_orders_by_customer(self, user_id: str) -> list[HistoricalOrder]:
        df = self._orders_frame()
        rows = df.loc[df["customer_id"] == str(user_id)]
        orders: list[HistoricalOrder] = []
        for _, row in rows.iterrows():
            created_at = row["created_at"]
            orders.append(HistoricalOrder(
                id=int(row["id"]),
                customer_id=row["customer_id"],
                pickup_address=row["pickup_address"],
                delivery_address=row["delivery_address"],
                package_type=row["package_type"],
                price=float(row["price"]),
                urgency=str(row["urgency"]),
                created_at=None if pd.isna(created_at) else created_at.to_pydatetime(),
            ))
        return orders

    def get_drivers(self) -> list[Driver]:
        df = self._drivers_frame()
        return [
            Driver(
                id=int(row["id"]),
                full_name=str(row["full_name"]),
                status=str(row["status"]),
                vehicle_type=_optional(row.get("vehicle_type")),
                city=_optional(row.get("city")),
            )
            for _, row in df.iterrows()
        ]


_store: DeliveryStore | None = None


def get_store() -> DeliveryStore:
    """Return the shared CSV-backed store, creating it on first call."""
    global _store
    if _store is None:
        _store = CsvDeliveryStore()
    return _store
