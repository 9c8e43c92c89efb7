"""Configuration loading, validation and persistence"""

import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

# Default config search paths (in order)
CONFIG_PATHS = [
    Path("config.yaml"),
    Path.home() / ".config" / "lhm-osc-bridge" / "config.yaml",
    Path("/etc/lhm-osc-bridge/config.yaml"),
]


class ConfigError(ValueError):
    """Raised when a configuration value is invalid"""


@dataclass
class OscConfig:
    ip: str = "127.0.0.1"
    port: int = 9000


@dataclass
class SourceConfig:
    json_port: int = 8085
    host: str = "localhost"
    timeout: float = 0.3  # Seconds; the fetch blocks the tick for at most this long


@dataclass
class SensorNamesConfig:
    """LibreHardwareMonitor label for each sensor role"""
    cpu_temp: str = "Core (Tctl/Tdie)"
    cpu_usage: str = "CPU Total"
    gpu_temp: str = "GPU Core_Temp-1  ( ! )"
    gpu_usage: str = "GPU Core_Used-1  ( ! )"
    gpu_mem_used: str = "GPU Memory_Used-1  ( ! )"
    gpu_mem_total: str = "GPU Memory_Total-1  ( ! )"
    wifi_up: str = "Upload Speed"
    wifi_down: str = "Download Speed"


@dataclass
class PollConfig:
    retry_interval: float = 5.0
    tick_interval: float = 1.0


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: str = ""


@dataclass
class WebConfig:
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8090


@dataclass
class Config:
    osc: OscConfig = field(default_factory=OscConfig)
    source: SourceConfig = field(default_factory=SourceConfig)
    sensors: SensorNamesConfig = field(default_factory=SensorNamesConfig)
    poll: PollConfig = field(default_factory=PollConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    web: WebConfig = field(default_factory=WebConfig)


def validate_port(value: Any, name: str = "port") -> int:
    """
    Parse a UDP/TCP port number.

    Raises:
        ConfigError: If the value is not an integer in 1-65535
    """
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    try:
        port = int(str(value).strip())
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None
    if not 1 <= port <= 65535:
        raise ConfigError(f"{name} must be between 1 and 65535, got {port}")
    return port


def validate_positive(value: Any, name: str) -> float:
    """
    Parse a strictly positive number of seconds.

    Raises:
        ConfigError: If the value is not a number greater than zero
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{name} must be a number, got {value!r}")
    if not 0 < value < float("inf"):
        raise ConfigError(f"{name} must be greater than zero, got {value!r}")
    return float(value)


def validate_text(value: Any, name: str, allow_empty: bool = False) -> str:
    """
    Check that a value is a string.

    Raises:
        ConfigError: If the value is not a string, or is blank when not allowed
    """
    if not isinstance(value, str):
        raise ConfigError(f"{name} must be a string, got {value!r}")
    if not allow_empty and not value.strip():
        raise ConfigError(f"{name} must not be empty")
    return value


def _section(cls, data: Any):
    """Build a section dataclass, ignoring unknown keys"""
    if not isinstance(data, dict):
        return cls()
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        logger.warning(f"Ignoring unknown {cls.__name__} keys: {sorted(unknown)}")
    return cls(**{k: v for k, v in data.items() if k in known})


def find_config_file() -> Optional[Path]:
    """Find config file in standard locations"""
    for path in CONFIG_PATHS:
        if path.exists():
            return path
    return None


def config_from_dict(data: dict[str, Any]) -> Config:
    """
    Build a validated Config from a nested dict.

    Raises:
        ConfigError: If a port, interval, host or sensor label is invalid
    """
    config = Config(
        osc=_section(OscConfig, data.get("osc")),
        source=_section(SourceConfig, data.get("source")),
        sensors=_section(SensorNamesConfig, data.get("sensors")),
        poll=_section(PollConfig, data.get("poll")),
        logging=_section(LoggingConfig, data.get("logging")),
        web=_section(WebConfig, data.get("web")),
    )
    config.osc.port = validate_port(config.osc.port, "osc.port")
    config.source.json_port = validate_port(config.source.json_port, "source.json_port")
    config.web.port = validate_port(config.web.port, "web.port")
    config.osc.ip = validate_text(config.osc.ip, "osc.ip").strip()
    config.source.host = validate_text(config.source.host, "source.host").strip()
    config.source.timeout = validate_positive(config.source.timeout, "source.timeout")
    config.poll.retry_interval = validate_positive(
        config.poll.retry_interval, "poll.retry_interval"
    )
    config.poll.tick_interval = validate_positive(config.poll.tick_interval, "poll.tick_interval")
    for f in fields(SensorNamesConfig):
        validate_text(getattr(config.sensors, f.name), f"sensors.{f.name}")
    validate_text(config.logging.level, "logging.level")
    validate_text(config.logging.file, "logging.file", allow_empty=True)
    validate_text(config.web.host, "web.host")
    return config


def config_to_dict(config: Config) -> dict[str, Any]:
    return asdict(config)


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from YAML file, falling back to defaults"""
    if config_path:
        path = Path(config_path)
    else:
        path = find_config_file()

    if path is None or not path.exists():
        logger.warning("No config file found, using defaults")
        return Config()

    logger.info(f"Loading config from: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ConfigError("Top level of config file must be a mapping")
        return config_from_dict(data)
    except (OSError, yaml.YAMLError, ConfigError, TypeError) as e:
        logger.warning(f"Invalid config file {path}, using defaults: {e}")
        return Config()


def save_config(config: Config, config_path: Path) -> None:
    """Write configuration to a YAML file"""
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(config_to_dict(config), f, sort_keys=False, allow_unicode=True)
    logger.info(f"Saved config to: {config_path}")
