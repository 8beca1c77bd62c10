"""
Crowdfunding Service Event Handling

Standard Structure:
- models.py: Event data models (Pydantic)
- publishers.py: Event publishers (publish events to other services)
"""

# Event Models
from .models import (
    CampaignCreatedEventData,
    CampaignFundedEventData,
    CampaignStateEventData,
    FactoryStateEventData,
    FundsMovedEventData,
    PayoutPendingEventData,
    TierChangedEventData,
)

# Event Publishers
from .publishers import (
    publish_campaign_created,
    publish_campaign_funded,
    publish_campaign_state_changed,
    publish_factory_state_changed,
    publish_funds_moved,
    publish_payout_pending,
    publish_tier_changed,
)

__all__ = [
    # Event Publishers
    "publish_campaign_created",
    "publish_campaign_funded",
    "publish_campaign_state_changed",
    "publish_factory_state_changed",
    "publish_funds_moved",
    "publish_payout_pending",
    "publish_tier_changed",
    # Event Models
    "CampaignCreatedEventData",
    "CampaignFundedEventData",
    "CampaignStateEventData",
    "FactoryStateEventData",
    "FundsMovedEventData",
    "PayoutPendingEventData",
    "TierChangedEventData",
]
