"""
Crowdfunding Service Factory

Factory functions for creating service instances with real dependencies.
This is the ONLY place that imports I/O-dependent modules.

Usage:
    from .factory import create_campaign_factory
    factory = create_campaign_factory(config, event_bus)
"""
from typing import Optional

from core.config import CrowdfundingConfig
from core.logger import setup_service_logger

from .campaign_factory import CampaignFactory
from .campaign_repository import InMemoryCampaignRepository


def create_campaign_factory(
    config: Optional[CrowdfundingConfig] = None,
    event_bus=None,
    transfer_client=None,
    clock=None,
) -> CampaignFactory:
    """
    Create CampaignFactory with real dependencies.

    Use this in production, NOT in tests.

    Args:
        config: Crowdfunding configuration (loaded from env if omitted)
        event_bus: Event bus for publishing events
        transfer_client: Value transfer primitive (payment service client if omitted)
        clock: Time source (system clock if omitted)

    Returns:
        Configured CampaignFactory instance
    """
    config = config or CrowdfundingConfig.from_env()
    setup_service_logger(__package__, config=config.logging)

    if transfer_client is None:
        from .clients.payment_client import PaymentTransferClient
        transfer_client = PaymentTransferClient(
            base_url=config.payment_service_url,
            timeout=config.transfer_timeout_seconds,
        )

    if clock is None:
        from .clients.clock import SystemClock
        clock = SystemClock()

    if event_bus is None and config.events_enabled:
        from core.event_bus import InMemoryEventBus
        event_bus = InMemoryEventBus()

    return CampaignFactory(
        repository=InMemoryCampaignRepository(),
        clock=clock,
        transfer_client=transfer_client,
        event_bus=event_bus,
        owner=config.factory_owner,
    )


__all__ = [
    "create_campaign_factory",
]
