#!/usr/bin/env python3
"""
Service logger setup

Configures the stdlib logging hierarchy for a service from LoggingConfig.
Modules keep using ``logging.getLogger(__name__)``; this is called once
at service start.
"""
import logging
import sys
from typing import Optional

from core.config.logging_config import LoggingConfig


def setup_service_logger(
    service_name: str,
    level: Optional[str] = None,
    config: Optional[LoggingConfig] = None,
) -> logging.Logger:
    """
    Configure and return the named service logger.

    Args:
        service_name: Logger name (usually the service package name)
        level: Optional level override (DEBUG, INFO, ...)
        config: Logging config, loaded from environment if omitted

    Returns:
        Configured logger
    """
    config = config or LoggingConfig.from_env()
    log_level = getattr(logging, (level or config.log_level).upper(), logging.INFO)
    formatter = logging.Formatter(config.log_format)

    logger = logging.getLogger(service_name)
    logger.setLevel(log_level)

    # Re-running setup must not duplicate handlers
    if not logger.handlers:
        if config.enable_console:
            console = logging.StreamHandler(sys.stdout)
            console.setFormatter(formatter)
            logger.addHandler(console)
        if config.log_file:
            file_handler = logging.FileHandler(config.log_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    logger.propagate = False
    return logger


__all__ = ["setup_service_logger"]
