import argparse
import asyncio
import logging
import sys

from pulsecheck.config.config import Config
from pulsecheck.config.logging_config import setup_logging
from pulsecheck.config.targets import load_targets
from pulsecheck.core.checker import Checker
from pulsecheck.core.exceptions import ConfigError, MetricsServerError
from pulsecheck.core.metrics_manager import MetricsManager
from pulsecheck.core.metrics_server import MetricsServer
from pulsecheck.core.supervisor import Supervisor

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="pulsecheck",
        description="Periodically probe HTTP endpoints and export health metrics.",
    )
    parser.add_argument(
        "--config",
        default=Config.CONFIG_PATH,
        help="Path to the JSON target list (default: %(default)s)",
    )
    parser.add_argument(
        "--metrics-host",
        default=Config.METRICS_HOST,
        help="Bind address of the metrics server (default: %(default)s)",
    )
    parser.add_argument(
        "--metrics-port",
        type=int,
        default=Config.METRICS_PORT,
        help="Port of the metrics server (default: %(default)s)",
    )
    parser.add_argument(
        "--no-metrics-server",
        action="store_true",
        default=not Config.METRICS_ENABLED,
        help="Do not start the HTTP metrics server",
    )
    return parser.parse_args(argv)


async def monitor(targets, metrics_manager, retry_policy):
    async with Checker() as checker:
        supervisor = Supervisor(targets, checker, metrics_manager, retry_policy)
        supervisor.install_signal_handlers()
        await supervisor.run()


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging()

    try:
        targets = load_targets(args.config)
        retry_policy = Config.retry_policy()
    except ConfigError as e:
        logger.critical(f"Failed to load configuration: {e}")
        return 1
    logger.info(f"Configuration loaded: {len(targets)} targets to monitor")

    metrics_manager = MetricsManager()
    server = None
    if not args.no_metrics_server:
        server = MetricsServer(metrics_manager, args.metrics_host, args.metrics_port)
        try:
            server.start()
        except MetricsServerError as e:
            logger.critical(str(e))
            return 1

    try:
        asyncio.run(monitor(targets, metrics_manager, retry_policy))
    finally:
        if server is not None:
            server.stop()
    logger.info("Shutdown complete.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
