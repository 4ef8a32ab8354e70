from abc import ABC, abstractmethod


class MetricsSink(ABC):
    """
    Abstract base class for the collaborator that receives probe cycle outcomes.

    Implementations are called concurrently by every target loop and must not
    lose updates.
    """

    @abstractmethod
    def record(self, target_name: str, success: bool, latency_seconds: float):
        """
        Record the outcome of one probe cycle.

        Args:
            target_name (str): Name of the probed target.
            success (bool): Whether the cycle ended up.
            latency_seconds (float): Latency of the last attempt in seconds.
        """
