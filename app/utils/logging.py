# =============================================
# File: app/utils/logging.py
# Purpose: Logging configuration (loguru file sink)
# =============================================
import os

from loguru import logger

_configured = False


def setup_logging() -> None:
    """Add the rotating file sink once per process."""
    global _configured
    if _configured:
        return
    path = os.getenv("LOG_FILE", "logs/app.log")
    if path:
        logger.add(path, rotation="10 MB", level=os.getenv("LOG_LEVEL", "INFO").upper())
    _configured = True
