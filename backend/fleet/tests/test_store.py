from typing import get_args

import numpy as np
import pytest

from fleet.data.loader import DatasetError, load_devices_from_csv
from fleet.data.store import DeviceStore
from fleet.schemas.common import DeviceFilters, DeviceStatus, DeviceType
from fleet.services.filters import matches_filters

HEADER = "query_id,sensor_type,data_size_bytes,quantity,duration,energy_consumption,data_yield,hypervolume_value,transmission_efficiency\n"
ROWS = [
    "1,Temperature Sensor,1,1,1,0.3,0.5,0.5,0.9",
    "2,Smart Gateway,1,1,1,0.9,0.5,0.5,0.4",
    "3,Valve Actuator,1,1,1,0.3,0.5,0.5,0.9",
    "4,HVAC Controller,1,1,1,0.7,0.5,0.5,0.75",
    "5,Humidity Sensor,1,1,1,0.2,0.5,0.5,0.85",
    "6,Edge Hub,1,1,1,0.95,0.5,0.5,0.3",
]


@pytest.fixture
def dataset(tmp_path):
    path = tmp_path / "devices.csv"
    path.write_text(HEADER + "\n".join(ROWS) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def store(dataset):
    s = DeviceStore(dataset, rng=np.random.default_rng(11))
    s.load()
    return s


def test_get_all_is_cached(dataset):
    calls = []

    def counting_loader(path, rng=None):
        calls.append(path)
        return load_devices_from_csv(path, rng=rng)

    s = DeviceStore(dataset, loader=counting_loader)
    first = s.get_all()
    second = s.get_all()
    assert len(calls) == 1
    assert len(first) == len(second) == 6
    assert {d.id for d in first} == {d.id for d in second}


def test_load_failure_degrades_to_empty(tmp_path, caplog):
    s = DeviceStore(tmp_path / "missing.csv")
    assert s.get_all() == []
    assert s.loaded
    assert "Failed to load dataset" in caplog.text


def test_only_dataset_errors_are_swallowed(dataset):
    def broken(path, rng=None):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        DeviceStore(dataset, loader=broken).load()


def test_dataset_error_from_custom_loader(dataset):
    def broken(path, rng=None):
        raise DatasetError("bad rows")

    assert DeviceStore(dataset, loader=broken).load() == []


def test_filter_by_status_is_subset_and_idempotent(store):
    criteria = DeviceFilters(status=["online"])
    once = store.filter(criteria)
    assert all(d.status == "online" for d in once)
    assert {d.id for d in once} <= {d.id for d in store.get_all()}
    twice = [d for d in once if matches_filters(d, criteria)]
    assert [d.id for d in twice] == [d.id for d in once]


def test_filter_by_type_set(store):
    result = store.filter(DeviceFilters(type=["gateway", "actuator"]))
    assert sorted(d.id for d in result) == ["2", "3", "6"]


def test_filter_combines_criteria(store):
    result = store.filter(DeviceFilters(type=["sensor"], search="humidity"))
    assert [d.id for d in result] == ["5"]
    assert store.filter(DeviceFilters(type=["gateway"], search="humidity")) == []


def test_search_matches_serial_number(store):
    # serial numbers are the label prefix plus the zero-padded id
    result = store.filter(DeviceFilters(search="va000003"))
    assert [d.id for d in result] == ["3"]
    assert "va000003" not in result[0].name.lower()


def test_search_matches_address(store):
    result = store.filter(DeviceFilters(search="broadway"))
    assert [d.id for d in result] == ["2"]


def test_empty_criteria_returns_copy(store):
    result = store.filter(DeviceFilters())
    assert len(result) == 6
    result.clear()
    assert len(store.get_all()) == 6


def test_unknown_status_matches_nothing(store):
    assert store.filter(DeviceFilters(status=["sleeping"])) == []


def test_append_assigns_next_id(store):
    n = len(store.get_all())
    device = store.append({"name": "X"})
    assert device.id == str(n + 1)
    assert device.name == "X"
    assert len(store.get_all()) == n + 1
    assert store.get(device.id) is device
    assert store.filter(DeviceFilters(search="x")) == [device]


def test_append_defaults_and_plan_features(store):
    device = store.append({"type": "gateway", "subscription": {"plan": "Professional"}, "batteryLevel": 55})
    assert device.type == "gateway"
    assert device.status == "offline"
    assert device.name == f"Device #{device.id}"
    assert device.battery_level == 55
    assert device.subscription.plan == "Professional"
    assert device.subscription.status == "pending"
    assert device.subscription.features == ["Real-time monitoring", "Data analytics"]


def test_get_missing_returns_none(store):
    assert store.get("does-not-exist") is None


def test_summary_counts(store):
    summary = store.summary()
    assert summary.total == 6
    assert sum(summary.by_status.values()) == 6
    assert summary.by_type == {"sensor": 2, "actuator": 1, "gateway": 2, "controller": 1}
    assert summary.online == summary.by_status["online"]
    assert 0 <= summary.active_subscriptions <= 6


def test_summary_keys_follow_enumerations(store):
    summary = store.summary()
    assert tuple(summary.by_status) == get_args(DeviceStatus)
    assert tuple(summary.by_type) == get_args(DeviceType)
