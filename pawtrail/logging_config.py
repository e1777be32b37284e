import logging
from typing import Optional

from pawtrail.config import settings

_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach a stream handler to the package logger once."""
    logger = logging.getLogger("pawtrail")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
    _level = (level or settings.log_level).upper()
    logger.setLevel(getattr(logging, _level, logging.INFO))
    logger.propagate = False
    return logger
