"""Command-line interface for lhm-osc-bridge"""

import argparse
import asyncio
import contextlib
import logging
import signal
import sys
from typing import Optional

from lhm_osc_bridge import __version__


def setup_logging(level: str, log_file: Optional[str]) -> None:
    """Configure logging handlers"""
    from lhm_osc_bridge.log_handler import get_log_handler

    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(), get_log_handler()]

    # Add file handler if log file is specified and writable
    if log_file:
        try:
            handlers.append(logging.FileHandler(log_file))
        except OSError:
            print(
                f"Warning: Cannot write to {log_file}, logging to stdout only",
                file=sys.stderr,
            )

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )
    # Per-request lines from httpx would be logged every tick
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def run_until_shutdown(context, shutdown_event: asyncio.Event, interval: float) -> None:
    """
    Tick the poll cycle until the shutdown event is set.

    Args:
        context: AppContext to tick
        shutdown_event: Event that signals shutdown when set
        interval: Seconds between ticks
    """
    logger = logging.getLogger(__name__)
    logger.info(f"Starting poll loop with {interval}s tick interval...")

    while not shutdown_event.is_set():
        try:
            await context.tick()
        except Exception as e:
            logger.error(f"Unexpected error during tick: {e}", exc_info=True)
        # Wait for either the interval or shutdown signal
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(shutdown_event.wait(), timeout=interval)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lhm-osc-bridge",
        description="Send LibreHardwareMonitor sensor values to VRChat avatar parameters over OSC",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=str,
        help="Path to config file (default: auto-detect)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single poll and exit",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--no-web",
        action="store_true",
        help="Disable the status web server",
    )
    parser.add_argument(
        "--web-port",
        type=int,
        default=None,
        help="Port for web server (default: from config)",
    )
    parser.add_argument(
        "--web-host",
        type=str,
        default=None,
        help="Host for web server (default: from config)",
    )
    return parser


async def async_main(argv: Optional[list[str]] = None) -> int:
    """Async main entry point"""
    args = build_parser().parse_args(argv)

    from pathlib import Path

    from lhm_osc_bridge.config import find_config_file, load_config
    from lhm_osc_bridge.context import AppContext

    config_path = Path(args.config) if args.config else find_config_file()
    config = load_config(str(config_path) if config_path else None)

    log_level = "DEBUG" if args.verbose else config.logging.level
    setup_logging(log_level, config.logging.file)

    logger = logging.getLogger(__name__)
    logger.info(f"Starting lhm-osc-bridge {__version__}")

    context = AppContext.create(config=config, config_path=config_path)

    if args.once:
        try:
            fetched = await context.tick()
            if not fetched:
                logger.warning("LibreHardwareMonitor is not running")
            return 0 if fetched else 1
        finally:
            await context.shutdown()

    shutdown_event = asyncio.Event()

    def signal_handler(sig: signal.Signals) -> None:
        logger.info(f"Received signal {sig.name}, initiating graceful shutdown...")
        shutdown_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        # Not available on Windows event loops
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, signal_handler, sig)

    web_server_task = None
    try:
        web_enabled = config.web.enabled and not args.no_web
        if web_enabled:
            import uvicorn

            from lhm_osc_bridge.web.app import create_app

            host = args.web_host or config.web.host
            port = args.web_port or config.web.port
            logger.info(f"Starting web server on {host}:{port}")
            app = create_app(context=context)

            server = uvicorn.Server(
                uvicorn.Config(
                    app,
                    host=host,
                    port=port,
                    log_level=log_level.lower(),
                    log_config=None,  # Prevent uvicorn from reconfiguring logging
                )
            )
            web_server_task = asyncio.create_task(server.serve())

        await run_until_shutdown(context, shutdown_event, config.poll.tick_interval)
        return 0

    except asyncio.CancelledError:
        logger.info("Main task cancelled")
        return 0
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        return 1
    finally:
        if web_server_task:
            web_server_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await web_server_task
        logger.info("Shutting down...")
        await context.shutdown()
        logger.info("Cleanup complete")


def main() -> int:
    """Main entry point - wraps async_main()"""
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())
