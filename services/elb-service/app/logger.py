# app/logger.py
import logging
import sys

from step_common.correlation import CorrelationIdFilter

from app.settings import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] op=%(operation_id)s batch=%(batch_id)s %(message)s"


def setup_logging(level: str = settings.LOG_LEVEL) -> None:
    root = logging.getLogger()
    if any(isinstance(f, CorrelationIdFilter) for h in root.handlers for f in h.filters):
        return
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    h = logging.StreamHandler(sys.stdout)
    h.setFormatter(logging.Formatter(LOG_FORMAT))
    h.addFilter(CorrelationIdFilter())
    root.addHandler(h)


def get_logger(name: str = "elb-service") -> logging.Logger:
    return logging.getLogger(name)


# Export a module-level logger so `from app.logger import logger` works
logger = get_logger(settings.SERVICE_NAME)

__all__ = ["LOG_FORMAT", "get_logger", "logger", "setup_logging"]
