"""Tests for the command-line entry point"""

import asyncio

import pytest
import yaml

from lhm_osc_bridge import __version__
from lhm_osc_bridge.cli import async_main, build_parser, run_until_shutdown


class CountingContext:
    """Ticks until `limit`, then asks the loop to stop"""

    def __init__(self, event: asyncio.Event, limit: int = 3, fail_on: int = 0):
        self.event = event
        self.limit = limit
        self.fail_on = fail_on
        self.ticks = 0

    async def tick(self) -> bool:
        self.ticks += 1
        if self.ticks >= self.limit:
            self.event.set()
        if self.ticks == self.fail_on:
            raise RuntimeError("boom")
        return True


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.config is None
        assert args.once is False
        assert args.no_web is False
        assert args.web_port is None

    def test_flags(self):
        args = build_parser().parse_args(["-c", "my.yaml", "--once", "-v", "--web-port", "9999"])
        assert args.config == "my.yaml"
        assert args.once is True
        assert args.verbose is True
        assert args.web_port == 9999

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--version"])
        assert __version__ in capsys.readouterr().out


class TestRunUntilShutdown:
    @pytest.mark.asyncio
    async def test_ticks_until_shutdown(self):
        event = asyncio.Event()
        context = CountingContext(event, limit=3)

        await asyncio.wait_for(run_until_shutdown(context, event, interval=0.01), timeout=5)

        assert context.ticks == 3

    @pytest.mark.asyncio
    async def test_tick_errors_do_not_stop_loop(self):
        event = asyncio.Event()
        context = CountingContext(event, limit=3, fail_on=1)

        await asyncio.wait_for(run_until_shutdown(context, event, interval=0.01), timeout=5)

        assert context.ticks == 3


class TestOnce:
    @pytest.mark.asyncio
    async def test_once_without_feed_returns_error(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        # Port 9 (discard) on localhost is not expected to serve HTTP
        config_path.write_text(yaml.safe_dump({"source": {"json_port": 9}}))

        result = await async_main(["--once", "--no-web", "-c", str(config_path)])

        assert result == 1
