from datetime import date, datetime
from typing import Dict, List, Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

DeviceStatus = Literal["online", "offline", "maintenance", "error"]
DeviceType = Literal["sensor", "actuator", "gateway", "controller"]
SubscriptionPlan = Literal["Basic", "Professional", "Enterprise"]
SubscriptionStatus = Literal["active", "expired", "pending", "cancelled"]

DEVICE_STATUSES: tuple = get_args(DeviceStatus)
DEVICE_TYPES: tuple = get_args(DeviceType)

PLAN_FEATURES: dict[str, list[str]] = {
    "Basic": ["Real-time monitoring"],
    "Professional": ["Real-time monitoring", "Data analytics"],
    "Enterprise": ["Real-time monitoring", "Data analytics", "Priority support", "Custom integrations"],
}


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Location(CamelModel):
    latitude: float
    longitude: float
    address: Optional[str] = None


class DeviceMetadata(CamelModel):
    manufacturer: Optional[str] = None
    model: Optional[str] = None
    firmware_version: Optional[str] = None
    serial_number: Optional[str] = None
    location: Optional[Location] = None
    installed_date: Optional[date] = None
    last_maintenance: Optional[date] = None


class Subscription(CamelModel):
    id: str
    plan: SubscriptionPlan
    status: SubscriptionStatus
    start_date: date
    end_date: date
    features: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _features_follow_plan(self):
        # whatever was supplied, the feature list is the plan's
        self.features = list(PLAN_FEATURES[self.plan])
        return self


class Device(CamelModel):
    id: str
    name: str
    type: DeviceType
    status: DeviceStatus
    metadata: DeviceMetadata = Field(default_factory=DeviceMetadata)
    subscription: Subscription
    last_seen: datetime
    battery_level: Optional[int] = Field(default=None, ge=0, le=100)
    signal_strength: Optional[int] = Field(default=None, ge=0, le=100)


class SubscriptionCreate(CamelModel):
    plan: Optional[SubscriptionPlan] = None
    status: Optional[SubscriptionStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class DeviceCreate(CamelModel):
    """Partial device accepted by the create endpoint; id and lastSeen are assigned."""
    name: Optional[str] = None
    type: Optional[DeviceType] = None
    status: Optional[DeviceStatus] = None
    metadata: Optional[DeviceMetadata] = None
    subscription: Optional[SubscriptionCreate] = None
    battery_level: Optional[int] = Field(default=None, ge=0, le=100)
    signal_strength: Optional[int] = Field(default=None, ge=0, le=100)


class DeviceFilters(BaseModel):
    status: Optional[List[str]] = None
    type: Optional[List[str]] = None
    search: Optional[str] = None


class PageInfo(CamelModel):
    page: int
    page_size: int
    total: int
    total_pages: int


class FleetSummary(CamelModel):
    total: int
    online: int
    offline: int
    active_subscriptions: int
    by_status: Dict[str, int]
    by_type: Dict[str, int]


class DeviceListResponse(BaseModel):
    data: List[Device]
    message: str
    pagination: Optional[PageInfo] = None


class DeviceResponse(BaseModel):
    data: Device
    message: str


class SummaryResponse(BaseModel):
    data: FleetSummary
    message: str
