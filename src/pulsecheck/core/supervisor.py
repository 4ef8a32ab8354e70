import asyncio
import logging
import signal
from typing import List, Optional

from pulsecheck.abstractions.metrics_sink import MetricsSink
from pulsecheck.contracts.retry_policy import RetryPolicy
from pulsecheck.contracts.target import Target
from pulsecheck.core.cancellation import CancellationToken
from pulsecheck.core.checker import Checker
from pulsecheck.core.target_scheduler import DEFAULT_CYCLE_POLICY, TargetScheduler

logger = logging.getLogger(__name__)


class Supervisor:
    """
    Runs one TargetScheduler task per target and waits for all of them to stop.
    """

    def __init__(
        self,
        targets: List[Target],
        checker: Checker,
        metrics: MetricsSink,
        retry_policy: RetryPolicy = DEFAULT_CYCLE_POLICY,
        token: Optional[CancellationToken] = None,
    ):
        self.targets = list(targets)
        self.checker = checker
        self.metrics = metrics
        self.retry_policy = retry_policy
        self.token = token or CancellationToken()
        self.schedulers = [
            TargetScheduler(target, checker, metrics, self.token, retry_policy)
            for target in self.targets
        ]

    async def run(self):
        """
        Start every scheduler and block until all of them reached STOPPED.
        """
        if not self.schedulers:
            logger.warning("No targets configured; nothing to monitor.")
            return
        tasks = [
            asyncio.create_task(s.run(), name=f"scheduler:{s.target.name}")
            for s in self.schedulers
        ]
        logger.info(f"All {len(tasks)} schedulers started.")
        results = await asyncio.gather(*tasks, return_exceptions=True)
        for scheduler, result in zip(self.schedulers, results):
            if isinstance(result, BaseException):
                logger.error(
                    f"Scheduler for {scheduler.target.name} exited with {result!r}"
                )
        logger.info("All schedulers stopped.")

    def shutdown(self):
        """
        Trigger the shared cancellation token; safe to call repeatedly.
        """
        if self.token.cancel():
            logger.info("Shutdown requested; waiting for in-flight cycles to finish.")
        else:
            logger.debug("Shutdown already in progress.")

    def install_signal_handlers(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        """
        Route SIGINT and SIGTERM on the running loop to shutdown().
        """
        loop = loop or asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.shutdown)
            except NotImplementedError:
                # Windows event loops have no add_signal_handler
                signal.signal(sig, lambda *_: loop.call_soon_threadsafe(self.shutdown))
