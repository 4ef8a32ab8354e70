class PulsecheckError(Exception):
    """Base class for errors raised by pulsecheck."""


class ConfigError(PulsecheckError):
    """
    Raised when the target list cannot be read or is malformed.

    Always fatal: the process aborts before any scheduler starts.
    """

    def __init__(self, message: str, path=None):
        self.path = path
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)


class MetricsServerError(PulsecheckError):
    """Raised when the metrics HTTP server fails to come up."""
