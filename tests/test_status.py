"""Tests for the display-side snapshot rendering"""

from datetime import timedelta

import pytest

from lhm_osc_bridge.poll import PollSnapshot
from lhm_osc_bridge.readings import Readings
from lhm_osc_bridge.status import (
    CRITICAL,
    NORMAL,
    WARNING,
    snapshot_to_dict,
    temperature_level,
    usage_level,
)
from tests.fakes import FIXED_NOW


@pytest.mark.parametrize(
    "temp,level", [(-1.0, NORMAL), (39.9, NORMAL), (40.0, WARNING), (59.9, WARNING), (60.0, CRITICAL)]
)
def test_temperature_level(temp, level):
    assert temperature_level(temp) == level


@pytest.mark.parametrize(
    "usage,level", [(0.0, NORMAL), (69.9, NORMAL), (70.0, WARNING), (90.0, CRITICAL)]
)
def test_usage_level(usage, level):
    assert usage_level(usage) == level


def test_dead_source_hides_readings():
    snap = PollSnapshot(
        readings=Readings(cpu_usage=50.0),
        is_source_alive=False,
        retry_remaining=3.04,
        retry_progress=0.4,
    )
    result = snapshot_to_dict(snap, now=FIXED_NOW)

    assert result["source_alive"] is False
    assert result["readings"] is None
    assert result["retry"] == {"remaining": 3.0, "progress": 0.4}
    assert result["weekday"] == "Wednesday"
    assert result["time"] == "14:05:09"
    assert result["polled_at"] is None


def test_alive_source_includes_levels():
    snap = PollSnapshot(
        readings=Readings(cpu_temp=65.0, cpu_usage=75.0, wifi_up=0.5),
        is_source_alive=True,
        retry_remaining=0.0,
        retry_progress=1.0,
        time_numeric=140509.0,
        weekday_numeric=2.0,
        polled_at=FIXED_NOW,
    )
    result = snapshot_to_dict(snap, now=FIXED_NOW)

    assert result["readings"]["cpu_temp"] == {"value": 65.0, "unit": "°C", "level": CRITICAL}
    assert result["readings"]["cpu_usage"]["level"] == WARNING
    assert result["readings"]["wifi_up"] == {"value": 0.5, "unit": "MB/s"}
    assert result["weekday"] == "Wednesday"
    assert result["time_numeric"] == 140509.0
    assert result["polled_at"] == "2024-05-15T14:05:09"


def test_weekday_follows_current_day_not_last_poll():
    snap = PollSnapshot(
        readings=Readings(),
        is_source_alive=True,
        retry_remaining=0.0,
        retry_progress=1.0,
        weekday_numeric=2.0,
        polled_at=FIXED_NOW,
    )
    result = snapshot_to_dict(snap, now=FIXED_NOW + timedelta(days=1, hours=2))

    assert result["weekday"] == "Thursday"
    assert result["time"] == "16:05:09"
    assert result["weekday_numeric"] == 2.0
