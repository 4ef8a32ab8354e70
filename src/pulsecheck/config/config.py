import os

from pydantic import ValidationError

from pulsecheck.contracts.retry_policy import RetryPolicy
from pulsecheck.core.exceptions import ConfigError


def _env_flag(name, default):
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """
    Configuration class for environment variables and default settings.
    """

    CONFIG_PATH = os.environ.get("PULSECHECK_CONFIG", "config.json")

    METRICS_ENABLED = _env_flag("METRICS_ENABLED", "true")
    METRICS_HOST = os.environ.get("METRICS_HOST", "0.0.0.0")
    METRICS_PORT = int(os.environ.get("METRICS_PORT", "8080"))

    # Sub-retries for each probe cycle; the remaining knobs match RetryPolicy defaults
    CHECK_MAX_ATTEMPTS = int(os.environ.get("CHECK_MAX_ATTEMPTS", "3"))
    RETRY_INITIAL_DELAY = float(os.environ.get("RETRY_INITIAL_DELAY", "1.0"))
    RETRY_MAX_DELAY = float(os.environ.get("RETRY_MAX_DELAY", "30.0"))
    RETRY_BACKOFF_MULTIPLIER = float(os.environ.get("RETRY_BACKOFF_MULTIPLIER", "2.0"))

    @classmethod
    def retry_policy(cls) -> RetryPolicy:
        """
        Build the retry policy each target scheduler applies per cycle.

        Raises:
            ConfigError: If the retry environment variables are out of range.
        """
        try:
            return RetryPolicy(
                max_attempts=cls.CHECK_MAX_ATTEMPTS,
                initial_delay=cls.RETRY_INITIAL_DELAY,
                max_delay=cls.RETRY_MAX_DELAY,
                backoff_multiplier=cls.RETRY_BACKOFF_MULTIPLIER,
            )
        except ValidationError as e:
            raise ConfigError(f"invalid retry settings: {e}") from e
