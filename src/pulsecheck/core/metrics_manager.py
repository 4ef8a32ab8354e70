import logging
import threading
import time

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Histogram

from pulsecheck.abstractions.metrics_sink import MetricsSink

logger = logging.getLogger(__name__)

LATENCY_BUCKETS = (0.1, 0.5, 1.0, 2.0, 5.0, 10.0)


def status_label(success: bool) -> str:
    return "up" if success else "down"


class MetricsManager(MetricsSink):
    """
    Prometheus-backed metrics collaborator for health check cycles.

    Keeps three aggregates per target: a latency histogram and a check counter
    keyed by (api_name, status), and a gauge holding the latest up/down state.
    A lock-guarded snapshot of the latest observation per target is kept for
    the JSON status endpoint.
    """

    def __init__(self, registry: CollectorRegistry = REGISTRY):
        """
        Initialize the MetricsManager and register the Prometheus metrics.

        Args:
            registry (CollectorRegistry): Registry to register metrics with.
                Tests pass a fresh registry to avoid duplicate registration.
        """
        self.registry = registry
        self.CHECK_DURATION = Histogram(
            "health_check_duration_seconds",
            "Health check response time in seconds",
            ["api_name", "status"],
            buckets=LATENCY_BUCKETS,
            registry=registry,
        )
        self.CHECK_STATUS = Gauge(
            "health_check_status",
            "Health check status (1 = UP, 0 = DOWN)",
            ["api_name"],
            registry=registry,
        )
        self.CHECK_TOTAL = Counter(
            "health_check_total",
            "Total health checks executed",
            ["api_name", "status"],
            registry=registry,
        )
        self._lock = threading.Lock()
        # target name -> latest observation and cumulative counts
        self._latest = {}
        logger.info("MetricsManager initialized.")

    def record(self, target_name: str, success: bool, latency_seconds: float):
        status = status_label(success)
        self.CHECK_DURATION.labels(target_name, status).observe(latency_seconds)
        self.CHECK_STATUS.labels(target_name).set(1.0 if success else 0.0)
        self.CHECK_TOTAL.labels(target_name, status).inc()

        with self._lock:
            entry = self._latest.setdefault(
                target_name, {"up_total": 0, "down_total": 0}
            )
            entry["status"] = status
            entry["latency_seconds"] = latency_seconds
            entry["updated_at"] = time.time()
            entry[f"{status}_total"] += 1
        logger.debug(
            f"Recorded {status} for {target_name} ({latency_seconds:.4f}s)"
        )

    def get_status(self, target_name: str):
        """
        Get the latest gauge value for a target.

        Returns:
            float: 1.0 if the last cycle was up, 0.0 if down, None if never recorded.
        """
        return self.registry.get_sample_value(
            "health_check_status", {"api_name": target_name}
        )

    def get_total(self, target_name: str, success: bool) -> float:
        """
        Get the cumulative number of cycles recorded for a target and status.
        """
        value = self.registry.get_sample_value(
            "health_check_total",
            {"api_name": target_name, "status": status_label(success)},
        )
        return value or 0.0

    def snapshot(self) -> dict:
        """
        Return a copy of the latest observation and counters for every target.
        """
        with self._lock:
            return {name: dict(entry) for name, entry in self._latest.items()}
