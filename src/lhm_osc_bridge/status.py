"""Display-side view of a poll snapshot"""

from datetime import datetime
from typing import Any, Optional

from . import clock
from .poll import PollSnapshot

NORMAL = "normal"
WARNING = "warning"
CRITICAL = "critical"

# (warning, critical) thresholds, inclusive
TEMPERATURE_BANDS = (40.0, 60.0)
USAGE_BANDS = (70.0, 90.0)


def _band(value: float, bands: tuple[float, float]) -> str:
    warning, critical = bands
    if value >= critical:
        return CRITICAL
    if value >= warning:
        return WARNING
    return NORMAL


def temperature_level(temp: float) -> str:
    """Severity for a temperature in °C"""
    return _band(temp, TEMPERATURE_BANDS)


def usage_level(percent: float) -> str:
    """Severity for a usage percentage"""
    return _band(percent, USAGE_BANDS)


def snapshot_to_dict(
    snapshot: PollSnapshot, now: Optional[datetime] = None
) -> dict[str, Any]:
    """
    Render a snapshot for the status API.

    Readings are only included while the source is alive; otherwise the
    retry countdown is what the dashboard shows. `weekday` is the current
    day at `now`; `weekday_numeric` is the last code sent over OSC.
    """
    now = now or datetime.now()
    polled_at = snapshot.polled_at
    result: dict[str, Any] = {
        "source_alive": snapshot.is_source_alive,
        "retry": {
            "remaining": round(snapshot.retry_remaining, 1),
            "progress": round(snapshot.retry_progress, 3),
        },
        "time_numeric": snapshot.time_numeric,
        "weekday_numeric": snapshot.weekday_numeric,
        "time": now.strftime("%H:%M:%S"),
        "weekday": clock.weekday_name(now),
        "polled_at": polled_at.isoformat() if polled_at else None,
        "readings": None,
    }

    if not snapshot.is_source_alive:
        return result

    r = snapshot.readings
    result["readings"] = {
        "cpu_temp": _reading(r.cpu_temp, "°C", temperature_level(r.cpu_temp)),
        "cpu_usage": _reading(r.cpu_usage, "%", usage_level(r.cpu_usage)),
        "gpu_temp": _reading(r.gpu_temp, "°C", temperature_level(r.gpu_temp)),
        "gpu_usage": _reading(r.gpu_usage, "%", usage_level(r.gpu_usage)),
        "gpu_mem_used": _reading(r.gpu_mem_used, "MB"),
        "gpu_mem_total": _reading(r.gpu_mem_total, "MB"),
        "gpu_mem_percent": _reading(
            r.gpu_mem_percent, "%", usage_level(r.gpu_mem_percent)
        ),
        "wifi_up": _reading(r.wifi_up, "MB/s"),
        "wifi_down": _reading(r.wifi_down, "MB/s"),
    }
    return result


def _reading(value: float, unit: str, level: Optional[str] = None) -> dict[str, Any]:
    entry: dict[str, Any] = {"value": round(value, 2), "unit": unit}
    if level is not None:
        entry["level"] = level
    return entry
