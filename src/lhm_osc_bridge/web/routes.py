"""API routes for bridge status and configuration"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from lhm_osc_bridge.config import ConfigError, config_to_dict
from lhm_osc_bridge.context import AppContext
from lhm_osc_bridge.log_handler import get_log_handler
from lhm_osc_bridge.status import snapshot_to_dict
from lhm_osc_bridge.web.app import get_app_context

logger = logging.getLogger(__name__)
router = APIRouter()


def _get_context() -> AppContext:
    """
    Get AppContext.

    Raises:
        RuntimeError: If AppContext is not available
    """
    context = get_app_context()
    if not context:
        raise RuntimeError("AppContext not available. Web app must be initialized with context.")
    return context


# Pydantic models for configuration updates
class OscConfigUpdate(BaseModel):
    ip: Optional[str] = None
    port: Optional[int] = None


class SourceConfigUpdate(BaseModel):
    json_port: Optional[int] = None


class SensorNamesUpdate(BaseModel):
    cpu_temp: Optional[str] = None
    cpu_usage: Optional[str] = None
    gpu_temp: Optional[str] = None
    gpu_usage: Optional[str] = None
    gpu_mem_used: Optional[str] = None
    gpu_mem_total: Optional[str] = None
    wifi_up: Optional[str] = None
    wifi_down: Optional[str] = None


class ConfigUpdate(BaseModel):
    osc: Optional[OscConfigUpdate] = None
    source: Optional[SourceConfigUpdate] = None
    sensors: Optional[SensorNamesUpdate] = None


@router.get("/health")
async def health_check():
    """Health check endpoint - succeeds whether or not LibreHardwareMonitor is up"""
    return {"status": "healthy"}


@router.get("/api/status")
async def get_status() -> dict[str, Any]:
    """Latest poll snapshot with readings and retry countdown"""
    cycle = _get_context().cycle
    return snapshot_to_dict(cycle.snapshot(), cycle.wall_now())


@router.get("/api/config")
async def get_config_endpoint() -> dict[str, Any]:
    """Get current configuration"""
    return config_to_dict(_get_context().config)


@router.post("/api/config")
async def update_config_endpoint(update: ConfigUpdate) -> dict[str, Any]:
    """Apply a configuration edit and persist it"""
    context = _get_context()
    updates = update.model_dump(exclude_none=True)

    try:
        config = context.update_config(updates)
    except ConfigError as e:
        logger.warning(f"Rejected config update: {e}")
        raise HTTPException(status_code=422, detail=str(e)) from e
    except OSError as e:
        logger.error(f"Could not save config: {e}")
        raise HTTPException(status_code=500, detail=f"Could not save config: {e}") from e

    return {"status": "success", "config": config_to_dict(config)}


@router.get("/api/logs")
async def get_logs(level: str = "INFO") -> dict[str, Any]:
    """Recent log records at or above the given level"""
    min_level = logging.getLevelName(level.upper())
    if not isinstance(min_level, int):
        raise HTTPException(status_code=422, detail=f"Unknown log level: {level}")
    return {"logs": get_log_handler().get_buffer(min_level)}
