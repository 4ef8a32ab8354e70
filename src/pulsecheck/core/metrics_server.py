import logging
import threading
import time
from typing import Optional

import uvicorn
from fastapi import FastAPI, Response
from fastapi.responses import ORJSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from pulsecheck.core.exceptions import MetricsServerError
from pulsecheck.core.metrics_manager import MetricsManager

logger = logging.getLogger(__name__)


def create_app(metrics_manager: MetricsManager) -> FastAPI:
    """
    Build the HTTP app exposing metrics and the latest status of every target.
    """
    app = FastAPI(default_response_class=ORJSONResponse)

    @app.get("/metrics")
    def metrics():
        return Response(
            generate_latest(metrics_manager.registry), media_type=CONTENT_TYPE_LATEST
        )

    @app.get("/status")
    def status():
        return {"targets": metrics_manager.snapshot()}

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    return app


class MetricsServer:
    """
    Serves the metrics app with uvicorn on a background thread.

    Running off the main thread keeps uvicorn from installing its own signal
    handlers, so SIGINT/SIGTERM stay with the supervisor.
    """

    def __init__(self, metrics_manager: MetricsManager, host: str, port: int):
        self.host = host
        self.port = port
        self.app = create_app(metrics_manager)
        self._server: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None

    def start(self, startup_timeout: float = 5.0):
        """
        Start serving and block until uvicorn is listening.

        Raises:
            MetricsServerError: If the server thread exits or does not start
                within ``startup_timeout`` seconds (e.g. the port is taken).
        """
        config = uvicorn.Config(
            self.app, host=self.host, port=self.port, log_config=None
        )
        self._server = uvicorn.Server(config)
        self._thread = threading.Thread(
            target=self._server.run, name="metrics-server", daemon=True
        )
        self._thread.start()
        deadline = time.monotonic() + startup_timeout
        while not self._server.started:
            if not self._thread.is_alive():
                self._server = None
                self._thread = None
                raise MetricsServerError(
                    f"Metrics server failed to start on {self.host}:{self.port}"
                )
            if time.monotonic() > deadline:
                self.stop()
                raise MetricsServerError(
                    f"Metrics server did not start within {startup_timeout}s"
                )
            time.sleep(0.05)
        logger.info(f"Metrics server started at http://{self.host}:{self.port}/metrics")

    def stop(self, timeout: float = 5.0):
        if self._server is None:
            return
        self._server.should_exit = True
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning("Metrics server did not stop within timeout.")
        else:
            logger.info("Metrics server stopped.")
        self._server = None
        self._thread = None
