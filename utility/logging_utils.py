# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-12
# Description: logging_utils.py
# -----------------------------------------------------------------------------
import logging
import os

import colorlog

BASE_LOGGER_NAME = "vmindex"

_FORMAT = "%(log_color)s%(asctime)s [%(levelname)s] %(name)s:%(lineno)d:%(reset)s %(message)s"
_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}


def get_class_logger(cls: type) -> logging.Logger:
    """
    Colored console logger named after module + class, e.g.:

      vmindex.embedding.VMEmbedder.VMEmbedder
      vmindex.services.VMIngestService.VMIngestService

    The handler is attached once per name; level comes from VMI_LOG_LEVEL.
    """
    module = getattr(cls, "__module__", "unknown_module")
    classname = getattr(cls, "__name__", "UnknownClass")
    logger = logging.getLogger(f"{BASE_LOGGER_NAME}.{module}.{classname}")

    if not logger.handlers:
        handler = colorlog.StreamHandler()
        handler.setFormatter(colorlog.ColoredFormatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S", log_colors=_COLORS))
        logger.addHandler(handler)
        level_name = os.getenv("VMI_LOG_LEVEL", "INFO").upper()
        logger.setLevel(getattr(logging, level_name, logging.INFO))
        logger.propagate = False

    return logger
