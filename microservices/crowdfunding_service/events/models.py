"""
Crowdfunding Event Data Models

Payloads published by crowdfunding_service after each committed mutation.
Ledger payloads carry ``sequence``, the per-campaign mutation number, so
subscribers can order events that were delivered out of order.
"""

from typing import Optional

from pydantic import BaseModel, Field


class CampaignCreatedEventData(BaseModel):
    """
    Campaign created

    Subject: crowdfunding.campaign.created
    """

    campaign_id: str = Field(..., description="Campaign ID")
    owner: str = Field(..., description="Creator and owner")
    name: str = Field(..., description="Campaign name")
    goal: int = Field(..., description="Funding goal")
    deadline: int = Field(..., description="Deadline (unix seconds)")


class TierChangedEventData(BaseModel):
    """
    Tier added or removed

    Subjects: crowdfunding.tier.added, crowdfunding.tier.removed
    """

    campaign_id: str
    tier_id: str
    name: str
    amount: int
    tier_count: int = Field(..., description="Number of tiers after the change")
    sequence: int = 0


class CampaignFundedEventData(BaseModel):
    """
    Pledge accepted

    Subject: crowdfunding.funded
    """

    campaign_id: str
    backer: str
    tier_id: str
    amount: int
    backer_total: int = Field(..., description="Backer's contribution after the pledge")
    total_raised: int
    status: str
    sequence: int = 0


class FundsMovedEventData(BaseModel):
    """
    Funds left the ledger

    Subjects: crowdfunding.withdrawn, crowdfunding.refunded
    """

    campaign_id: str
    recipient: str
    amount: int
    remaining_balance: int
    sequence: int = 0


class CampaignStateEventData(BaseModel):
    """
    Owner-controlled state change

    Subjects: crowdfunding.paused, crowdfunding.resumed, crowdfunding.deadline.extended
    """

    campaign_id: str
    paused: bool
    deadline: int
    previous_deadline: Optional[int] = None
    sequence: int = 0


class PayoutPendingEventData(BaseModel):
    """
    Payout with unknown outcome, held for reconciliation

    Subject: crowdfunding.payout.pending
    """

    campaign_id: str
    reference: str = Field(..., description="Idempotency key of the payout")
    kind: str = Field(..., description="withdraw or refund")
    recipient: str
    amount: int
    sequence: int = 0


class FactoryStateEventData(BaseModel):
    """
    Factory paused or resumed

    Subjects: crowdfunding.factory.paused, crowdfunding.factory.resumed
    """

    owner: str
    paused: bool
