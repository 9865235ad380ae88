import logging
import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional, Union

import numpy as np
import pandas as pd

from ..schemas.common import Device, DeviceMetadata, Location, Subscription

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["query_id", "sensor_type", "energy_consumption", "transmission_efficiency"]
NUMERIC_COLUMNS = ["duration", "energy_consumption", "transmission_efficiency"]

REFERENCE_LOCATIONS = [
    {"lat": 40.7128, "lng": -74.0060, "addr": "123 Main St, New York, NY 10001"},
    {"lat": 40.7589, "lng": -73.9851, "addr": "456 Broadway, New York, NY 10013"},
    {"lat": 40.7505, "lng": -73.9934, "addr": "789 Park Ave, New York, NY 10021"},
    {"lat": 40.7614, "lng": -73.9776, "addr": "321 5th Ave, New York, NY 10016"},
    {"lat": 40.7282, "lng": -73.9942, "addr": "555 Research Blvd, New York, NY 10012"},
]


class DatasetError(Exception):
    """Raised when the device dataset cannot be read or parsed."""


def _round_half_up(value: float) -> float:
    return float(np.floor(value + 0.5))


def _jitter(rng: np.random.Generator, spread: float) -> float:
    return float(rng.uniform(-spread, spread))


def classify_device_type(sensor_type: str) -> str:
    lower = (sensor_type or "").lower()
    if "gateway" in lower or "hub" in lower:
        return "gateway"
    if "actuator" in lower:
        return "actuator"
    if "controller" in lower:
        return "controller"
    return "sensor"


def generate_status(energy_consumption: float, transmission_efficiency: float, rng: np.random.Generator) -> str:
    if energy_consumption > 0.8 or transmission_efficiency < 0.5:
        return "error" if rng.random() > 0.7 else "maintenance"
    if energy_consumption > 0.6 or transmission_efficiency < 0.7:
        return "offline" if rng.random() > 0.8 else "online"
    return "online" if rng.random() > 0.1 else "offline"


def generate_battery_level(energy_consumption: float, rng: np.random.Generator) -> int:
    base = 100 - energy_consumption * 50
    return int(np.clip(_round_half_up(base + _jitter(rng, 10)), 10, 100))


def generate_signal_strength(transmission_efficiency: float, rng: np.random.Generator) -> int:
    base = transmission_efficiency * 100
    return int(np.clip(_round_half_up(base + _jitter(rng, 10)), 30, 100))


def hours_since_seen(status: str, rng: np.random.Generator) -> float:
    if status == "online":
        return float(rng.uniform(0, 2))
    if status == "offline":
        return float(rng.uniform(2, 12))
    return float(rng.uniform(24, 72))


def subscription_plan(transmission_efficiency: float) -> str:
    if transmission_efficiency > 0.8:
        return "Enterprise"
    if transmission_efficiency > 0.6:
        return "Professional"
    return "Basic"


def _days_ago(now: datetime, max_days: int, rng: np.random.Generator):
    return (now - timedelta(days=float(rng.random()) * max_days)).date()


def _days_ahead(now: datetime, max_days: int, rng: np.random.Generator):
    return (now + timedelta(days=float(rng.random()) * max_days)).date()


def row_to_device(row: dict, index: int, rng: np.random.Generator, now: datetime) -> Device:
    """Build a Device from one dataset row.

    ``row`` must carry ``query_id`` and ``sensor_type`` as strings and
    ``energy_consumption`` / ``transmission_efficiency`` as floats. Everything
    the dataset does not provide is synthesized from those values and ``rng``.
    """
    query_id = str(row["query_id"])
    sensor_type = str(row["sensor_type"])
    energy = float(row["energy_consumption"])
    efficiency = float(row["transmission_efficiency"])

    status = generate_status(energy, efficiency, rng)
    battery = generate_battery_level(energy, rng)
    signal = generate_signal_strength(efficiency, rng)
    last_seen = now - timedelta(hours=hours_since_seen(status, rng))

    ref = REFERENCE_LOCATIONS[index % len(REFERENCE_LOCATIONS)]
    firmware = f"v{rng.random() * 3 + 1:.1f}.{int(rng.integers(0, 10))}.{int(rng.integers(0, 10))}"
    compact_type = re.sub(r"\s+", "", sensor_type)
    metadata = DeviceMetadata(
        manufacturer=f"{sensor_type} Solutions Inc.",
        model=f"{compact_type}-{query_id}",
        firmware_version=firmware,
        serial_number=f"{sensor_type[:2].upper()}{query_id.rjust(6, '0')}",
        location=Location(
            latitude=ref["lat"] + _jitter(rng, 0.005),
            longitude=ref["lng"] + _jitter(rng, 0.005),
            address=ref["addr"],
        ),
        installed_date=_days_ago(now, 365, rng),
        last_maintenance=_days_ago(now, 90, rng),
    )

    plan = subscription_plan(efficiency)
    subscription = Subscription(
        id=f"sub-{query_id.rjust(6, '0')}",
        plan=plan,
        status="active" if rng.random() > 0.1 else "expired",
        start_date=_days_ago(now, 365, rng),
        end_date=_days_ahead(now, 365, rng),
    )

    return Device(
        id=query_id,
        name=f"{sensor_type} Device #{query_id}",
        type=classify_device_type(sensor_type),
        status=status,
        metadata=metadata,
        subscription=subscription,
        last_seen=last_seen,
        battery_level=battery,
        signal_strength=signal,
    )


def read_dataset(path: Union[str, Path]) -> pd.DataFrame:
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False, skip_blank_lines=True)
    except (OSError, ValueError) as exc:
        raise DatasetError(f"Cannot read dataset {path}: {exc}") from exc
    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise DatasetError(f"Dataset {path} is missing columns: {', '.join(missing)}")
    blank = (df["query_id"].fillna("").str.strip() == "") | (df["sensor_type"].fillna("").str.strip() == "")
    if blank.any():
        row = int(np.flatnonzero(blank.to_numpy(dtype=bool))[0]) + 1
        raise DatasetError(f"Dataset {path} row {row} has no query_id or sensor_type")
    for col in NUMERIC_COLUMNS:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0.0)
    return df


def load_devices_from_csv(
    path: Union[str, Path],
    rng: Optional[np.random.Generator] = None,
    now: Optional[datetime] = None,
) -> list[Device]:
    rng = rng if rng is not None else np.random.default_rng()
    now = now or datetime.now(timezone.utc)
    df = read_dataset(path)
    devices = [row_to_device(row, index, rng, now) for index, row in enumerate(df.to_dict("records"))]
    logger.info("Loaded %d devices from %s", len(devices), path)
    return devices
