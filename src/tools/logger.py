import logging
from logging.handlers import RotatingFileHandler

from config import LOG_FILE

LOGGER_NAME = "dealer_panel"

file_handler = RotatingFileHandler(LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=3)
file_handler.setFormatter(logging.Formatter(
    "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
))

stream_handler = logging.StreamHandler()
stream_handler.setFormatter(logging.Formatter('%(levelname)s:     %(name)s - %(message)s'))

logger = logging.getLogger(LOGGER_NAME)
logger.setLevel(logging.INFO)
if not logger.handlers:
    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)

for name in ["uvicorn", "uvicorn.error", "uvicorn.access"]:
    uv_logger = logging.getLogger(name)
    if file_handler not in uv_logger.handlers:
        uv_logger.addHandler(file_handler)


def get_logger(component: str) -> logging.Logger:
    """Child logger of the panel logger, e.g. ``dealer_panel.permission_cache``."""
    return logger.getChild(component)
