"""
OSC avatar parameter sender.

Fire-and-forget UDP: every parameter is its own OSC message with a single
float32 argument, sent in its own datagram. Send errors are dropped.
"""

import socket
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pythonosc.osc_message_builder import BuildError, OscMessageBuilder

from .log_handler import get_structured_logger

if TYPE_CHECKING:
    from .readings import Readings

logger = get_structured_logger(__name__, component="osc")

PARAMETER_PREFIX = "/avatar/parameters/"

CPU_TEMP = PARAMETER_PREFIX + "CPU_Temp"
CPU_USAGE = PARAMETER_PREFIX + "CPU_Usage"
GPU_TEMP = PARAMETER_PREFIX + "GPU_Temp"
GPU_USAGE = PARAMETER_PREFIX + "GPU_Usage"
GPU_MEMORY_USED = PARAMETER_PREFIX + "GPU_Memory_Used"
GPU_MEMORY_PERCENT = PARAMETER_PREFIX + "GPU_Memory_Percent"
WIFI_UP = PARAMETER_PREFIX + "Wifi_Up"
WIFI_DOWN = PARAMETER_PREFIX + "Wifi_Down"
TIME_STRING = PARAMETER_PREFIX + "TimeString"
WEEKDAY = PARAMETER_PREFIX + "Weekday"

# Emission order for one successful poll
SENSOR_PARAMETERS = (
    (CPU_TEMP, "cpu_temp"),
    (CPU_USAGE, "cpu_usage"),
    (GPU_TEMP, "gpu_temp"),
    (GPU_USAGE, "gpu_usage"),
    (GPU_MEMORY_USED, "gpu_mem_used"),
    (GPU_MEMORY_PERCENT, "gpu_mem_percent"),
    (WIFI_UP, "wifi_up"),
    (WIFI_DOWN, "wifi_down"),
)


@dataclass(frozen=True)
class EmissionTarget:
    """Destination of the OSC datagrams"""

    host: str = "127.0.0.1"
    port: int = 9000


def build_float_message(path: str, value: float) -> bytes:
    """Encode a single-argument OSC message carrying one float32"""
    builder = OscMessageBuilder(address=path)
    builder.add_arg(float(value), OscMessageBuilder.ARG_TYPE_FLOAT)
    return builder.build().dgram


class OscEmitter:
    """Sends avatar parameters over one long-lived UDP socket"""

    def __init__(self, target: EmissionTarget):
        """
        Initialize the emitter.

        Args:
            target: Initial destination address and port
        """
        self.target = target
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self._sock.bind(("0.0.0.0", 0))
        logger.info("OSC emitter initialized", host=target.host, port=target.port)

    def set_target(self, target: EmissionTarget) -> None:
        """Change the destination; the socket is kept"""
        if target != self.target:
            logger.info("OSC target changed", host=target.host, port=target.port)
            self.target = target

    def send_float(self, path: str, value: float) -> bool:
        """
        Send one parameter, best-effort.

        Args:
            path: OSC address (e.g., "/avatar/parameters/CPU_Temp")
            value: Parameter value, encoded as float32

        Returns:
            True if the datagram was handed to the socket
        """
        try:
            dgram = build_float_message(path, value)
            self._sock.sendto(dgram, (self.target.host, self.target.port))
            return True
        except (BuildError, OSError, OverflowError) as e:
            logger.debug("OSC send failed", path=path, error=str(e))
            return False

    def send_readings(self, readings: "Readings", time_code: float, weekday_code: float) -> int:
        """
        Send the eight sensor parameters followed by time and weekday.

        Returns:
            Number of datagrams handed to the socket
        """
        sent = 0
        for path, attribute in SENSOR_PARAMETERS:
            sent += self.send_float(path, getattr(readings, attribute))
        sent += self.send_float(TIME_STRING, time_code)
        sent += self.send_float(WEEKDAY, weekday_code)
        return sent

    def close(self) -> None:
        self._sock.close()
