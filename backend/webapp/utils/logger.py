"""Logging configuration for the application."""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from webapp.config import settings

level = logging.DEBUG if settings.environment == "development" else getattr(
    logging, settings.log_level.upper(), logging.INFO
)

# Configure root logger
logger = logging.getLogger("webapp")
logger.setLevel(level)

# Create formatter
formatter = logging.Formatter(
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# Add handlers to logger if not already added
if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    if settings.log_file:
        os.makedirs(os.path.dirname(settings.log_file) or ".", exist_ok=True)
        file_handler = RotatingFileHandler(
            settings.log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

# Prevent duplicate logs
logger.propagate = False

__all__ = ["logger"]
