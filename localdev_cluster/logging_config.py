"""Logging setup for the localdev command line.

Provisioning output meant for people goes through the ``report`` callback
(rich console); this module only routes diagnostic records, which land on
stderr at the chosen level and, optionally, in full in a log file.
"""

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Client libraries talked to on every readiness poll
_CLIENT_LOGGERS = ("urllib3", "docker", "kubernetes")


def parse_level(level: str) -> int:
    """Translate a level name into its ``logging`` constant.

    Raises:
        ValueError: If the name is not one of ``LOG_LEVELS``
    """
    name = level.strip().upper()
    if name not in LOG_LEVELS:
        raise ValueError(f"Unknown log level '{level}', expected one of {', '.join(LOG_LEVELS)}")
    return getattr(logging, name)


def setup_logging(level: str = "WARNING", log_file: Path | None = None, verbose: bool = False) -> None:
    """Configure logging for the application.

    Args:
        level: Lowest level printed on stderr
        log_file: Optional path to a log file that receives every record
        verbose: Shortcut for ``level="DEBUG"``
    """
    console_level = logging.DEBUG if verbose else parse_level(level)

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(logging.DEBUG if log_file else console_level)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            logging.warning(f"Failed to create log file handler: {e}")

    # The convergence wait polls the API server every few hundred
    # milliseconds and at DEBUG the kubernetes client logs every response
    # body. Client records stay at WARNING unless DEBUG was asked for.
    client_level = logging.DEBUG if console_level == logging.DEBUG else logging.WARNING
    for name in _CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(client_level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
