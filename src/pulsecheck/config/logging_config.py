import logging.config
import os

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
# an empty LOG_FILE keeps logging on the console only
LOG_FILE = os.getenv("LOG_FILE", "logs/pulsecheck.log")

# third-party loggers that would otherwise log every probe or scrape
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def build_logging_config(level=None, log_file=None):
    """
    Build the dictConfig mapping for the monitor process.

    Args:
        level: Root log level, defaults to LOG_LEVEL.
        log_file: Path of the file handler, defaults to LOG_FILE; "" disables it.

    Returns:
        dict: Configuration accepted by logging.config.dictConfig.
    """
    level = (level or LOG_LEVEL).upper()
    log_file = LOG_FILE if log_file is None else log_file

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "level": level,
        },
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.FileHandler",
            "filename": log_file,
            "formatter": "default",
            "level": level,
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": LOG_FORMAT}},
        "handlers": handlers,
        "root": {"handlers": list(handlers), "level": level},
        "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
    }


def setup_logging(level=None, log_file=None):
    config = build_logging_config(level, log_file)
    file_handler = config["handlers"].get("file")
    if file_handler:
        log_dir = os.path.dirname(file_handler["filename"])
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
    logging.config.dictConfig(config)
