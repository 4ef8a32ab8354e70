import asyncio
import enum
import logging
from typing import Optional

from pulsecheck.abstractions.metrics_sink import MetricsSink
from pulsecheck.contracts.probe_result import RetryOutcome
from pulsecheck.contracts.retry_policy import RetryPolicy
from pulsecheck.contracts.target import Target
from pulsecheck.core.cancellation import CancellationToken
from pulsecheck.core.checker import Checker
from pulsecheck.core.retry import execute_with_retry

logger = logging.getLogger(__name__)

DEFAULT_CYCLE_POLICY = RetryPolicy(max_attempts=3)


class SchedulerState(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


class Ticker:
    """
    Repeating timer firing every ``interval`` seconds on a fixed grid.

    Ticks missed while the owner was busy are dropped rather than queued.
    """

    def __init__(self, interval: float, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.interval = interval
        self._loop = loop or asyncio.get_running_loop()
        self._next = self._loop.time() + interval

    def time_until_next(self) -> float:
        now = self._loop.time()
        if self._next <= now:
            missed = int((now - self._next) // self.interval) + 1
            if missed > 1:
                logger.debug(f"Ticker skipped {missed - 1} missed ticks")
            # the overdue tick fires now; later missed ticks are dropped
            self._next += (missed - 1) * self.interval
            return 0.0
        return self._next - now

    def advance(self):
        self._next += self.interval


class TargetScheduler:
    """
    Owns the repeating probe loop of one target.

    Every tick runs a full retry cycle against the target, hands the outcome to
    the metrics sink and logs one line. The shared cancellation token is only
    observed between cycles, so a cycle in progress always runs to completion.
    """

    def __init__(
        self,
        target: Target,
        checker: Checker,
        metrics: MetricsSink,
        token: CancellationToken,
        retry_policy: RetryPolicy = DEFAULT_CYCLE_POLICY,
    ):
        """
        Initialize the TargetScheduler.

        Args:
            target (Target): The endpoint this scheduler probes.
            checker (Checker): Probe executor used for every attempt.
            metrics (MetricsSink): Receives the outcome of every cycle.
            token (CancellationToken): Shared shutdown signal.
            retry_policy (RetryPolicy): Attempts and backoff for one cycle.
        """
        self.target = target
        self.checker = checker
        self.metrics = metrics
        self.token = token
        self.retry_policy = retry_policy
        self._state = SchedulerState.IDLE
        self.cycles = 0
        self.last_outcome: Optional[RetryOutcome] = None
        self._ticker: Optional[Ticker] = None

    @property
    def state(self) -> SchedulerState:
        # a cycle in flight when cancellation arrives is already draining
        if self._state is SchedulerState.RUNNING and self.token.is_cancelled():
            return SchedulerState.STOPPING
        return self._state

    async def run(self):
        """
        Tick until the cancellation token fires, then return once stopped.
        """
        if self._state is not SchedulerState.IDLE:
            raise RuntimeError(f"Scheduler for {self.target.name} already started")
        self._state = SchedulerState.RUNNING
        self._ticker = Ticker(self.target.interval)
        logger.info(
            f"Starting monitoring of {self.target.name} "
            f"(URL: {self.target.url}, interval: {self.target.interval}s)"
        )
        try:
            while await self._wait_for_tick():
                await self._run_cycle()
        finally:
            self._ticker = None
            self._state = SchedulerState.STOPPED
            logger.info(f"Stopped monitoring of {self.target.name}")

    async def _wait_for_tick(self) -> bool:
        """
        Sleep until the next tick.

        Returns:
            bool: True if a cycle should start, False once cancellation was observed.
        """
        if self.token.is_cancelled():
            self._state = SchedulerState.STOPPING
            return False
        try:
            await asyncio.wait_for(
                self.token.wait(), timeout=self._ticker.time_until_next()
            )
        except asyncio.TimeoutError:
            pass
        if self.token.is_cancelled():
            self._state = SchedulerState.STOPPING
            return False
        self._ticker.advance()
        return True

    async def _run_cycle(self):
        try:
            outcome = await execute_with_retry(
                lambda: self.checker.check_target(self.target), self.retry_policy
            )
            self.last_outcome = outcome
            self.metrics.record(
                self.target.name, outcome.succeeded, outcome.last_result.latency
            )
            self._log_outcome(outcome)
        except Exception:
            logger.exception(f"Probe cycle for {self.target.name} raised unexpectedly")
        finally:
            self.cycles += 1

    def _log_outcome(self, outcome: RetryOutcome):
        result = outcome.last_result
        line = (
            f"[{result.observed_at.astimezone():%H:%M:%S}] {self.target.name} - "
            f"{'UP' if outcome.succeeded else 'DOWN'} - "
            f"latency: {result.latency * 1000:.1f}ms - status: {result.status_code}"
        )
        if outcome.succeeded:
            logger.info(line)
        else:
            if result.error_message:
                line += f" - error: {result.error_message}"
            logger.warning(f"{line} (after {outcome.attempts} attempts)")
