import logging
import sys

from tradejournal.core.config import settings

_FORMAT = "%(asctime)s | %(name)s | %(levelname)-8s | %(message)s"

def get_logger(name: str = "tradejournal") -> logging.Logger:
    """Module logger with a single stdout handler; safe to call repeatedly."""
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    return logger
