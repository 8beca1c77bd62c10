#!/usr/bin/env python3
"""Crowdfunding service configuration

Settings for the campaign ledger and its external collaborators
(payment service used for value transfers, event publishing).
"""
import os
from dataclasses import dataclass, field

from .logging_config import LoggingConfig


def _bool(val: str) -> bool:
    return val.lower() == "true"

def _float(val: str, default: float) -> float:
    try:
        return float(val) if val else default
    except ValueError:
        return default


@dataclass
class CrowdfundingConfig:
    """Crowdfunding service settings"""
    # Payment service performing the actual value movement
    payment_service_url: str = "http://localhost:8207"
    transfer_timeout_seconds: float = 10.0

    # Identity allowed to pause/unpause the campaign factory
    factory_owner: str = "system"

    # Best-effort event publishing
    events_enabled: bool = True

    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> 'CrowdfundingConfig':
        """Load crowdfunding config from environment variables"""
        return cls(
            payment_service_url=os.getenv("PAYMENT_SERVICE_URL", "http://localhost:8207"),
            transfer_timeout_seconds=_float(os.getenv("TRANSFER_TIMEOUT_SECONDS", "10"), 10.0),
            factory_owner=os.getenv("FACTORY_OWNER", "system"),
            events_enabled=_bool(os.getenv("EVENTS_ENABLED", "true")),
            logging=LoggingConfig.from_env(),
        )
