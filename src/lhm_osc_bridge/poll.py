"""
Poll cycle: decides when the feed is queried and drives extraction/emission.

The cycle is ticked by the caller (once per second by default). After a
failed fetch no new fetch is attempted until the retry interval has passed.
A successful fetch leaves the failure timestamp alone.
"""

import time
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Optional

from . import clock
from .log_handler import get_structured_logger
from .readings import Readings, extract_readings

if TYPE_CHECKING:
    from .config import SensorNamesConfig
    from .emitter import OscEmitter
    from .source import LhmJsonSource

logger = get_structured_logger(__name__, component="poll")

DEFAULT_RETRY_INTERVAL = 5.0


@dataclass
class PollState:
    """Mutable poll state, owned by PollCycle"""

    last_failure: float
    is_source_alive: bool = False


@dataclass(frozen=True)
class PollSnapshot:
    """
    Consistent view of the cycle, rebuilt once per tick.

    Attributes:
        readings: Latest readings (sentinels until the first successful poll)
        is_source_alive: Whether the last fetch attempt succeeded
        retry_remaining: Seconds until the next fetch attempt is allowed
        retry_progress: Fraction (0..1) of the retry interval already elapsed
        time_numeric: Last emitted HHMMSS code
        weekday_numeric: Last emitted weekday code
        polled_at: Wall-clock time of the last successful poll
    """

    readings: Readings
    is_source_alive: bool
    retry_remaining: float
    retry_progress: float
    time_numeric: float = 0.0
    weekday_numeric: float = 0.0
    polled_at: Optional[datetime] = None


class PollCycle:
    """Retry-aware poller that turns feed snapshots into OSC parameters"""

    def __init__(
        self,
        source: "LhmJsonSource",
        emitter: "OscEmitter",
        names: "SensorNamesConfig",
        retry_interval: float = DEFAULT_RETRY_INTERVAL,
        monotonic: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the poll cycle.

        Args:
            source: Feed client
            emitter: OSC sender
            names: Label for each sensor role (read on every poll)
            retry_interval: Cooldown after a failed fetch, in seconds
            monotonic: Clock used for the retry interval
            wall_clock: Clock used for the time/weekday parameters
        """
        self.source = source
        self.emitter = emitter
        self.names = names
        self.retry_interval = retry_interval
        self._monotonic = monotonic
        self._wall_clock = wall_clock

        # Seed in the past so the first tick may fetch immediately
        self.state = PollState(last_failure=monotonic() - retry_interval - 1.0)
        self._readings = Readings()
        self._time_numeric = 0.0
        self._weekday_numeric = 0.0
        self._polled_at: Optional[datetime] = None
        self._attempted = False
        self._snapshot = self._build_snapshot(monotonic())

    def is_due(self, now: Optional[float] = None) -> bool:
        """Check whether a fetch may be attempted at `now`"""
        if now is None:
            now = self._monotonic()
        return now - self.state.last_failure >= self.retry_interval

    async def tick(self) -> bool:
        """
        Run one tick of the cycle.

        Returns:
            True if fresh data was fetched and emitted this tick
        """
        now = self._monotonic()
        if not self.is_due(now):
            self._snapshot = self._build_snapshot(now)
            return False

        tree = await self.source.fetch()
        first_attempt, self._attempted = not self._attempted, True
        if tree is None:
            if self.state.is_source_alive or first_attempt:
                logger.warning("LibreHardwareMonitor is not responding", url=self.source.url)
            else:
                logger.debug("LibreHardwareMonitor still unavailable", url=self.source.url)
            self.state.is_source_alive = False
            self.state.last_failure = self._monotonic()
            self._snapshot = self._build_snapshot(self.state.last_failure)
            return False

        if not self.state.is_source_alive:
            logger.info("LibreHardwareMonitor is responding", url=self.source.url)
        self.state.is_source_alive = True

        self._readings = extract_readings(tree, self.names, self._readings)

        wall_now = self._wall_clock()
        self._time_numeric = clock.time_numeric(wall_now)
        self._weekday_numeric = clock.weekday_numeric(wall_now)
        self._polled_at = wall_now

        sent = self.emitter.send_readings(
            self._readings, self._time_numeric, self._weekday_numeric
        )
        logger.debug("Poll complete", parameters_sent=sent)

        self._snapshot = self._build_snapshot(self._monotonic())
        return True

    def wall_now(self) -> datetime:
        """Current wall-clock time from the injected clock"""
        return self._wall_clock()

    def snapshot(self) -> PollSnapshot:
        """Latest consistent snapshot for display"""
        return self._snapshot

    def _build_snapshot(self, now: float) -> PollSnapshot:
        elapsed = max(now - self.state.last_failure, 0.0)
        if self.retry_interval > 0:
            progress = min(elapsed / self.retry_interval, 1.0)
        else:
            progress = 1.0
        return PollSnapshot(
            readings=self._readings,
            is_source_alive=self.state.is_source_alive,
            retry_remaining=max(self.retry_interval - elapsed, 0.0),
            retry_progress=progress,
            time_numeric=self._time_numeric,
            weekday_numeric=self._weekday_numeric,
            polled_at=self._polled_at,
        )
