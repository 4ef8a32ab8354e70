import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Optional

import httpx

from pulsecheck.contracts.probe_result import ProbeResult
from pulsecheck.contracts.target import Target

logger = logging.getLogger(__name__)

# unbounded pool: no probe ever waits for a connection held by another target
PROBE_LIMITS = httpx.Limits(max_connections=None, max_keepalive_connections=20)


def _describe_error(exc: Exception) -> str:
    # httpx timeouts frequently carry an empty message
    message = str(exc).strip()
    name = type(exc).__name__
    return f"{name}: {message}" if message else name


class Checker:
    """
    Probe executor issuing exactly one HTTP request per check.

    Success is a 2xx status. Transport failures are converted into a failed
    ProbeResult with status 0 and never raised to the caller.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None, transport=None):
        """
        Initialize the Checker.

        Args:
            client (Optional[httpx.AsyncClient]): Client to issue requests with.
                When omitted the checker creates and owns one.
            transport: Optional httpx transport for the owned client.
        """
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            transport=transport, follow_redirects=False, limits=PROBE_LIMITS
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self):
        if self._owns_client:
            await self.client.aclose()

    async def check(self, url: str, timeout: float, method: str = "GET") -> ProbeResult:
        """
        Probe ``url`` once with a per-attempt timeout.

        Args:
            url (str): Address to probe.
            timeout (float): Deadline in seconds for the whole attempt, from
                dispatch until the body has been read.
            method (str): HTTP method to use.

        Returns:
            ProbeResult: Latency, status code and success classification.
        """
        start = time.perf_counter()
        try:
            # non-streaming request: the body is read and the connection released here
            resp = await asyncio.wait_for(
                self.client.request(method, url, timeout=timeout), timeout
            )
        except asyncio.TimeoutError:
            latency = time.perf_counter() - start
            logger.debug(f"Probe {method} {url} exceeded {timeout}s deadline")
            return self._failure(latency, f"Timeout: no complete response within {timeout}s")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            latency = time.perf_counter() - start
            logger.debug(f"Probe {method} {url} failed after {latency:.4f}s: {e!r}")
            return self._failure(latency, _describe_error(e))
        latency = time.perf_counter() - start

        return ProbeResult(
            success=200 <= resp.status_code < 300,
            latency=latency,
            status_code=resp.status_code,
            error_message="",
            observed_at=datetime.now(timezone.utc),
        )

    @staticmethod
    def _failure(latency: float, error_message: str) -> ProbeResult:
        return ProbeResult(
            success=False,
            latency=latency,
            status_code=0,
            error_message=error_message,
            observed_at=datetime.now(timezone.utc),
        )

    async def check_target(self, target: Target) -> ProbeResult:
        return await self.check(target.url, target.timeout, target.method)
