import logging
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional, Union

import numpy as np

from ..schemas.common import (
    DEVICE_STATUSES,
    DEVICE_TYPES,
    Device,
    DeviceCreate,
    DeviceFilters,
    FleetSummary,
    Subscription,
)
from ..services.filters import matches_filters
from .loader import DatasetError, load_devices_from_csv

logger = logging.getLogger(__name__)


class DeviceStore:
    """In-memory device collection, loaded once from the dataset.

    Appended devices live only as long as the store does.
    """

    def __init__(
        self,
        dataset_path: Union[str, Path],
        rng: Optional[np.random.Generator] = None,
        loader: Callable[..., list[Device]] = load_devices_from_csv,
    ):
        self.dataset_path = dataset_path
        self.rng = rng
        self._loader = loader
        self._devices: Optional[list[Device]] = None

    @property
    def loaded(self) -> bool:
        return self._devices is not None

    def load(self) -> list[Device]:
        try:
            self._devices = self._loader(self.dataset_path, rng=self.rng)
        except DatasetError:
            logger.exception("Failed to load dataset %s, serving an empty fleet", self.dataset_path)
            self._devices = []
        return self._devices

    def get_all(self) -> list[Device]:
        if self._devices is None:
            return self.load()
        return self._devices

    def get(self, device_id: str) -> Optional[Device]:
        return next((d for d in self.get_all() if d.id == device_id), None)

    def filter(self, criteria: Optional[DeviceFilters] = None) -> list[Device]:
        devices = self.get_all()
        if criteria is None:
            return list(devices)
        return [d for d in devices if matches_filters(d, criteria)]

    def append(self, payload: Union[DeviceCreate, dict]) -> Device:
        if isinstance(payload, dict):
            payload = DeviceCreate.model_validate(payload)
        devices = self.get_all()
        device_id = str(len(devices) + 1)
        now = datetime.now(timezone.utc)
        fields = payload.model_dump(exclude_unset=True, exclude={"subscription"})

        sub = payload.subscription.model_dump(exclude_none=True) if payload.subscription else {}
        today = now.date()
        subscription = Subscription(
            id=f"sub-{device_id.rjust(6, '0')}",
            plan=sub.get("plan", "Basic"),
            status=sub.get("status", "pending"),
            start_date=sub.get("start_date", today),
            end_date=sub.get("end_date", today),
        )

        device = Device(
            **{
                "name": f"Device #{device_id}",
                "type": "sensor",
                "status": "offline",
                **{k: v for k, v in fields.items() if v is not None},
                "id": device_id,
                "subscription": subscription,
                "last_seen": now,
            }
        )
        devices.append(device)
        logger.info("Appended device %s (%s)", device.id, device.name)
        return device

    def summary(self) -> FleetSummary:
        devices = self.get_all()
        by_status = Counter(d.status for d in devices)
        by_type = Counter(d.type for d in devices)
        return FleetSummary(
            total=len(devices),
            online=by_status["online"],
            offline=by_status["offline"],
            active_subscriptions=sum(1 for d in devices if d.subscription.status == "active"),
            by_status={s: by_status[s] for s in DEVICE_STATUSES},
            by_type={t: by_type[t] for t in DEVICE_TYPES},
        )
