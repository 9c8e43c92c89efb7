"""Extraction of the configured sensor roles from a sensor tree"""

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from .resolver import find_interface_value, find_numeric, find_temperature

if TYPE_CHECKING:
    from .config import SensorNamesConfig
    from .sensor_tree import SensorNode

logger = logging.getLogger(__name__)

# Stand-in values for roles whose label was not found or did not parse
UNAVAILABLE = -1.0
NO_THROUGHPUT = 0.0


@dataclass(frozen=True)
class Readings:
    """
    One set of resolved readings, normalized to canonical units.

    Temperatures are in °C, usages and memory percent in %, GPU memory in MB
    and network speeds in MB/s.
    """

    cpu_temp: float = UNAVAILABLE
    cpu_usage: float = UNAVAILABLE
    gpu_temp: float = UNAVAILABLE
    gpu_usage: float = UNAVAILABLE
    gpu_mem_used: float = UNAVAILABLE
    gpu_mem_total: float = UNAVAILABLE
    gpu_mem_percent: float = UNAVAILABLE
    wifi_up: float = NO_THROUGHPUT
    wifi_down: float = NO_THROUGHPUT


def extract_readings(
    tree: "SensorNode", names: "SensorNamesConfig", previous: Readings = Readings()
) -> Readings:
    """
    Resolve every configured role against a freshly fetched tree.

    A missing role gets its sentinel and never aborts the others. GPU memory
    percent is only recomputed when both used and total are positive;
    otherwise the previous value is carried over.

    Args:
        tree: Root of the fetched sensor tree
        names: Label for each role
        previous: Readings from the last successful poll

    Returns:
        New Readings snapshot
    """

    def _or(value, sentinel):
        return sentinel if value is None else value

    readings = Readings(
        cpu_temp=_or(find_temperature(tree, names.cpu_temp), UNAVAILABLE),
        cpu_usage=_or(find_numeric(tree, names.cpu_usage), UNAVAILABLE),
        gpu_temp=_or(find_temperature(tree, names.gpu_temp), UNAVAILABLE),
        gpu_usage=_or(find_numeric(tree, names.gpu_usage), UNAVAILABLE),
        gpu_mem_used=_or(find_numeric(tree, names.gpu_mem_used), UNAVAILABLE),
        gpu_mem_total=_or(find_numeric(tree, names.gpu_mem_total), UNAVAILABLE),
        gpu_mem_percent=previous.gpu_mem_percent,
        wifi_up=_or(find_interface_value(tree, names.wifi_up), NO_THROUGHPUT),
        wifi_down=_or(find_interface_value(tree, names.wifi_down), NO_THROUGHPUT),
    )

    if readings.gpu_mem_used > 0 and readings.gpu_mem_total > 0:
        percent = readings.gpu_mem_used / readings.gpu_mem_total * 100.0
        readings = replace(readings, gpu_mem_percent=percent)

    logger.debug(
        f"Readings - CPU: {readings.cpu_temp:.1f}°C {readings.cpu_usage:.1f}%, "
        f"GPU: {readings.gpu_temp:.1f}°C {readings.gpu_usage:.1f}% "
        f"mem {readings.gpu_mem_percent:.1f}%, "
        f"Wi-Fi: up {readings.wifi_up:.2f} down {readings.wifi_down:.2f} MB/s"
    )
    return readings
