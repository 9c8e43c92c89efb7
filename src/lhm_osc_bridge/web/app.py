"""FastAPI application for the bridge status dashboard."""

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Optional

from fastapi import FastAPI

from lhm_osc_bridge import __version__

if TYPE_CHECKING:
    from lhm_osc_bridge.context import AppContext

logger = logging.getLogger(__name__)

# Module-level reference to context (set by create_app)
# FastAPI's lifespan function cannot receive parameters
_app_context: Optional["AppContext"] = None


def get_app_context() -> Optional["AppContext"]:
    """Get the application context set by create_app()"""
    return _app_context


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan.

    The AppContext is created, ticked and shut down by the CLI, not here.
    """
    logger.info("Web application starting...")
    if _app_context is None:
        logger.warning("No AppContext provided - status endpoints will fail")
    yield
    logger.info("Web application shutting down...")


def create_app(context: Optional["AppContext"] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        context: Application context with the running poll cycle and config

    Returns:
        Configured FastAPI application
    """
    global _app_context
    _app_context = context

    app = FastAPI(
        title="LHM OSC Bridge",
        description="LibreHardwareMonitor to OSC avatar parameter bridge",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.context = context

    from lhm_osc_bridge.web.routes import router

    app.include_router(router)

    logger.info("FastAPI application created")
    return app
