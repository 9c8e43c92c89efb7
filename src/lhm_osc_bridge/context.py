"""
Application context for dependency injection.

Owns the configuration and the three long-lived components (feed client,
OSC emitter, poll cycle) and applies committed configuration edits to them.

Usage:
    config = load_config()
    context = AppContext.create(config, config_path=find_config_file())
    await context.tick()        # once per tick_interval
    await context.shutdown()
"""

import copy
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from lhm_osc_bridge.config import (
    CONFIG_PATHS,
    Config,
    config_from_dict,
    config_to_dict,
    save_config,
)
from lhm_osc_bridge.emitter import EmissionTarget, OscEmitter
from lhm_osc_bridge.poll import PollCycle
from lhm_osc_bridge.source import LhmJsonSource

logger = logging.getLogger(__name__)


def _merge(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


@dataclass
class AppContext:
    """
    Application context containing all shared dependencies.

    Attributes:
        config: Current committed configuration
        source: LibreHardwareMonitor feed client
        emitter: OSC parameter sender
        cycle: Poll cycle driving fetch, extraction and emission
        config_path: File that configuration edits are saved to
    """

    config: Config
    source: LhmJsonSource
    emitter: OscEmitter
    cycle: PollCycle
    config_path: Optional[Path] = None
    _closed: bool = field(default=False, repr=False)

    @classmethod
    def create(
        cls,
        config: Config,
        config_path: Optional[Path] = None,
        source: Optional[LhmJsonSource] = None,
        emitter: Optional[OscEmitter] = None,
        **cycle_kwargs: Any,
    ) -> "AppContext":
        """
        Factory method wiring components from configuration.

        Args:
            config: Application configuration
            config_path: Where edits are persisted (default: ./config.yaml)
            source: Optional pre-built feed client (used by tests)
            emitter: Optional pre-built emitter (used by tests)
            **cycle_kwargs: Extra PollCycle arguments (e.g., clocks)

        Returns:
            Ready-to-tick AppContext
        """
        if source is None:
            source = LhmJsonSource(
                port=config.source.json_port,
                host=config.source.host,
                timeout=config.source.timeout,
            )
        if emitter is None:
            emitter = OscEmitter(EmissionTarget(config.osc.ip, config.osc.port))
        cycle = PollCycle(
            source,
            emitter,
            config.sensors,
            retry_interval=config.poll.retry_interval,
            **cycle_kwargs,
        )
        logger.debug(
            f"Created AppContext (json_port={config.source.json_port}, "
            f"osc={config.osc.ip}:{config.osc.port})"
        )
        return cls(
            config=config,
            source=source,
            emitter=emitter,
            cycle=cycle,
            config_path=config_path,
        )

    async def tick(self) -> bool:
        """Run one poll cycle tick"""
        return await self.cycle.tick()

    def update_config(self, updates: dict[str, Any]) -> Config:
        """
        Validate, persist and apply a partial configuration update.

        Nothing is changed if validation fails.

        Args:
            updates: Nested dict of sections and fields to change

        Returns:
            The new configuration

        Raises:
            ConfigError: If the resulting configuration is invalid
        """
        new_config = config_from_dict(_merge(config_to_dict(self.config), updates))

        path = self.config_path or CONFIG_PATHS[0]
        save_config(new_config, path)
        self.config_path = path

        self.apply_config(new_config)
        return new_config

    def apply_config(self, config: Config) -> None:
        """Push configuration values into the running components"""
        self.config = config
        self.source.set_port(config.source.json_port)
        self.emitter.set_target(EmissionTarget(config.osc.ip, config.osc.port))
        self.cycle.names = config.sensors
        self.cycle.retry_interval = config.poll.retry_interval
        logger.info("Configuration applied")

    async def shutdown(self) -> None:
        """
        Release the HTTP client and UDP socket.

        Safe to call multiple times.
        """
        if self._closed:
            return
        await self.source.close()
        self.emitter.close()
        self._closed = True
        logger.info("AppContext shutdown complete")
