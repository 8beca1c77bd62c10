"""
Crowdfunding Service Models

Data models for campaigns, pledge tiers and factory summaries.
Amounts are integers in the smallest currency unit.
"""

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


SECONDS_PER_DAY = 86400


class CampaignStatus(str, Enum):
    """Derived campaign status"""
    ACTIVE = "active"
    SUCCESSFUL = "successful"
    FAILED = "failed"


class Tier(BaseModel):
    """Fixed-price pledge option"""
    model_config = ConfigDict(frozen=True)

    tier_id: str
    name: str
    amount: int = Field(..., gt=0, description="Exact pledge price in smallest unit")
    backer_count: int = Field(0, ge=0, description="Pledges made at this tier")


class CampaignSummary(BaseModel):
    """Factory-level view of a campaign"""
    model_config = ConfigDict(frozen=True)

    campaign_id: str
    owner: str
    name: str
    creation_time: int


class PayoutKind(str, Enum):
    """Reason funds leave the ledger"""
    WITHDRAW = "withdraw"
    REFUND = "refund"


class PendingPayout(BaseModel):
    """
    Debited payout whose transfer outcome is unknown.

    Resent with the same reference until the payment service gives a
    definite answer.
    """
    model_config = ConfigDict(frozen=True)

    reference: str = Field(..., description="Idempotency key sent with every attempt")
    kind: PayoutKind
    recipient: str
    amount: int = Field(..., gt=0)


class CampaignSnapshot(BaseModel):
    """Read-only view of a campaign's full state"""
    campaign_id: str
    owner: str
    name: str
    description: str
    goal: int
    deadline: int
    paused: bool
    status: CampaignStatus
    total_raised: int
    held_balance: int
    tiers: List[Tier] = Field(default_factory=list)
    pending_payouts: List[PendingPayout] = Field(default_factory=list)


class TransferReceipt(BaseModel):
    """Outcome of a completed withdraw or refund"""
    campaign_id: str
    recipient: str
    amount: int
    remaining_balance: int
