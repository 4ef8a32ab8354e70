import asyncio
import signal
import unittest
from datetime import datetime, timezone
from unittest.mock import MagicMock

from prometheus_client import CollectorRegistry

from pulsecheck.contracts.probe_result import ProbeResult
from pulsecheck.contracts.retry_policy import RetryPolicy
from pulsecheck.contracts.target import Target
from pulsecheck.core.metrics_manager import MetricsManager
from pulsecheck.core.supervisor import Supervisor
from pulsecheck.core.target_scheduler import SchedulerState


class PerTargetChecker:
    """Healthy for every target except those listed as slow, which hang."""

    def __init__(self, slow=()):
        self.slow = set(slow)
        self.calls = {}

    async def check_target(self, target):
        self.calls[target.name] = self.calls.get(target.name, 0) + 1
        if target.name in self.slow:
            await asyncio.sleep(0.5)
        return ProbeResult(
            success=True,
            latency=0.001,
            status_code=200,
            observed_at=datetime.now(timezone.utc),
        )


def _target(name, interval):
    return Target(name=name, url=f"http://{name}.local/", interval=interval, timeout=1)


class TestSupervisor(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.metrics = MetricsManager(registry=CollectorRegistry())
        self.policy = RetryPolicy(max_attempts=3, initial_delay=0.01, max_delay=0.01)

    async def test_targets_progress_independently(self):
        checker = PerTargetChecker()
        targets = [_target("fast", 0.05), _target("slow", 5.0)]
        supervisor = Supervisor(targets, checker, self.metrics, self.policy)
        task = asyncio.create_task(supervisor.run())
        await asyncio.sleep(0.27)
        supervisor.shutdown()
        await asyncio.wait_for(task, timeout=1.0)

        fast, slow = supervisor.schedulers
        self.assertGreaterEqual(fast.cycles, 3)
        self.assertLessEqual(fast.cycles, 6)
        self.assertEqual(slow.cycles, 0)
        self.assertEqual(self.metrics.get_total("fast", True), fast.cycles)
        self.assertIsNone(self.metrics.get_status("slow"))
        self.assertTrue(all(s.state is SchedulerState.STOPPED for s in supervisor.schedulers))

    async def test_stuck_target_does_not_block_others(self):
        checker = PerTargetChecker(slow={"stuck"})
        targets = [_target("stuck", 0.02), _target("healthy", 0.05)]
        supervisor = Supervisor(targets, checker, self.metrics, self.policy)
        task = asyncio.create_task(supervisor.run())
        await asyncio.sleep(0.3)
        supervisor.shutdown()
        await asyncio.wait_for(task, timeout=2.0)

        stuck, healthy = supervisor.schedulers
        self.assertLessEqual(stuck.cycles, 1)
        self.assertGreaterEqual(healthy.cycles, 3)

    async def test_shutdown_is_idempotent(self):
        supervisor = Supervisor([_target("a", 0.05)], PerTargetChecker(), self.metrics, self.policy)
        task = asyncio.create_task(supervisor.run())
        await asyncio.sleep(0.01)
        supervisor.shutdown()
        supervisor.shutdown()
        await asyncio.wait_for(task, timeout=1.0)
        self.assertTrue(supervisor.token.is_cancelled())
        self.assertFalse(supervisor.token.cancel())

    async def test_schedulers_share_one_token(self):
        supervisor = Supervisor(
            [_target("a", 1), _target("b", 1)], PerTargetChecker(), self.metrics, self.policy
        )
        self.assertTrue(all(s.token is supervisor.token for s in supervisor.schedulers))

    async def test_empty_target_list_returns(self):
        supervisor = Supervisor([], PerTargetChecker(), self.metrics, self.policy)
        await asyncio.wait_for(supervisor.run(), timeout=0.5)

    async def test_install_signal_handlers(self):
        supervisor = Supervisor([], PerTargetChecker(), self.metrics, self.policy)
        loop = MagicMock()
        supervisor.install_signal_handlers(loop)
        loop.add_signal_handler.assert_any_call(signal.SIGINT, supervisor.shutdown)
        loop.add_signal_handler.assert_any_call(signal.SIGTERM, supervisor.shutdown)


if __name__ == "__main__":
    unittest.main()
