"""Process-wide logging setup."""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(log_level: str = "INFO") -> None:
    """Route all loggers to stdout with a single formatter.

    Called once while the FastAPI application is assembled. Existing root
    handlers are replaced so reloads do not duplicate output.
    """

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level.upper())

    # Driver chatter is noisy at INFO.
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
