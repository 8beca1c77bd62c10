"""
Crowdfunding Event Publishers

Centralized event publishing functions for crowdfunding service.
Publishing is best-effort: failures are logged and reported as False,
never raised into the ledger.
"""

import logging
from typing import Optional

from pydantic import BaseModel

from core.event_bus import Event, EventType, ServiceSource

from .models import (
    CampaignCreatedEventData,
    CampaignFundedEventData,
    CampaignStateEventData,
    FactoryStateEventData,
    FundsMovedEventData,
    PayoutPendingEventData,
    TierChangedEventData,
)

logger = logging.getLogger(__name__)


async def _publish(event_bus, event_type: EventType, data: BaseModel) -> bool:
    if event_bus is None:
        return False
    try:
        event = Event(
            event_type=event_type,
            source=ServiceSource.CROWDFUNDING_SERVICE,
            data=data.model_dump(),
        )
        result = await event_bus.publish_event(event)
        if result is False:
            logger.error(f"Failed to publish {event_type.value} event")
            return False
        logger.debug(f"Published {event_type.value} event")
        return True
    except Exception as e:
        logger.error(f"Error publishing {event_type.value} event: {e}", exc_info=True)
        return False


# =============================================================================
# Event Publishers
# =============================================================================


async def publish_campaign_created(
    event_bus, campaign_id: str, owner: str, name: str, goal: int, deadline: int
) -> bool:
    """
    Publish crowdfunding.campaign.created event

    Subscribers:
        - notification_service: Announce the campaign to the creator
    """
    return await _publish(
        event_bus,
        EventType.CAMPAIGN_CREATED,
        CampaignCreatedEventData(
            campaign_id=campaign_id, owner=owner, name=name, goal=goal, deadline=deadline
        ),
    )


async def publish_tier_changed(
    event_bus,
    campaign_id: str,
    tier_id: str,
    name: str,
    amount: int,
    tier_count: int,
    removed: bool = False,
    sequence: int = 0,
) -> bool:
    """Publish crowdfunding.tier.added / crowdfunding.tier.removed event"""
    return await _publish(
        event_bus,
        EventType.TIER_REMOVED if removed else EventType.TIER_ADDED,
        TierChangedEventData(
            campaign_id=campaign_id,
            tier_id=tier_id,
            name=name,
            amount=amount,
            tier_count=tier_count,
            sequence=sequence,
        ),
    )


async def publish_campaign_funded(
    event_bus,
    campaign_id: str,
    backer: str,
    tier_id: str,
    amount: int,
    backer_total: int,
    total_raised: int,
    status: str,
    sequence: int = 0,
) -> bool:
    """
    Publish crowdfunding.funded event

    Subscribers:
        - notification_service: Pledge receipt to the backer
        - billing_service: Revenue tracking
    """
    return await _publish(
        event_bus,
        EventType.CAMPAIGN_FUNDED,
        CampaignFundedEventData(
            campaign_id=campaign_id,
            backer=backer,
            tier_id=tier_id,
            amount=amount,
            backer_total=backer_total,
            total_raised=total_raised,
            status=status,
            sequence=sequence,
        ),
    )


async def publish_funds_moved(
    event_bus,
    campaign_id: str,
    recipient: str,
    amount: int,
    remaining_balance: int,
    refund: bool = False,
    sequence: int = 0,
) -> bool:
    """Publish crowdfunding.withdrawn / crowdfunding.refunded event"""
    return await _publish(
        event_bus,
        EventType.CONTRIBUTION_REFUNDED if refund else EventType.FUNDS_WITHDRAWN,
        FundsMovedEventData(
            campaign_id=campaign_id,
            recipient=recipient,
            amount=amount,
            remaining_balance=remaining_balance,
            sequence=sequence,
        ),
    )


async def publish_campaign_state_changed(
    event_bus,
    event_type: EventType,
    campaign_id: str,
    paused: bool,
    deadline: int,
    previous_deadline: Optional[int] = None,
    sequence: int = 0,
) -> bool:
    """Publish crowdfunding.paused / resumed / deadline.extended event"""
    return await _publish(
        event_bus,
        event_type,
        CampaignStateEventData(
            campaign_id=campaign_id,
            paused=paused,
            deadline=deadline,
            previous_deadline=previous_deadline,
            sequence=sequence,
        ),
    )


async def publish_payout_pending(
    event_bus,
    campaign_id: str,
    reference: str,
    kind: str,
    recipient: str,
    amount: int,
    sequence: int = 0,
) -> bool:
    """
    Publish crowdfunding.payout.pending event

    Subscribers:
        - payment_service: Reconcile the payout by its idempotency key
    """
    return await _publish(
        event_bus,
        EventType.PAYOUT_PENDING,
        PayoutPendingEventData(
            campaign_id=campaign_id,
            reference=reference,
            kind=kind,
            recipient=recipient,
            amount=amount,
            sequence=sequence,
        ),
    )


async def publish_factory_state_changed(event_bus, owner: str, paused: bool) -> bool:
    """Publish crowdfunding.factory.paused / crowdfunding.factory.resumed event"""
    return await _publish(
        event_bus,
        EventType.FACTORY_PAUSED if paused else EventType.FACTORY_RESUMED,
        FactoryStateEventData(owner=owner, paused=paused),
    )
