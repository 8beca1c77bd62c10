#!/usr/bin/env python3
"""
Core Module

Shared infrastructure for the crowdfunding service.

COMPONENTS:
    - config/: Dataclass configuration loaded from environment
    - logger.py: Service logger setup
    - event_bus.py: Event envelope and in-process event bus

USAGE:
    from core.config import CrowdfundingConfig
    from core.logger import setup_service_logger

    config = CrowdfundingConfig.from_env()
    logger = setup_service_logger("microservices.crowdfunding_service", config=config.logging)
"""

__version__ = "2.0.0"
