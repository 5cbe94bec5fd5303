"""JSON log output for services that embed the identity stores."""

import logging
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

from . import config


def setup_logger(level: Optional[str] = None) -> logging.Handler:
    """Attach a JSON handler to the root logger and return it."""
    log_handler = logging.StreamHandler()
    formatter = JsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s',
                              rename_fields={'levelname': 'level',
                                             'asctime': 'timestamp'})
    log_handler.setFormatter(formatter)
    logger = logging.getLogger()
    logger.addHandler(log_handler)
    logger.setLevel(level or config.LOGLEVEL)
    return log_handler
