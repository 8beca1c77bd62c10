"""
Campaign Repository

In-memory registry of campaign ledgers. Ledgers are addressed by
campaign id; the creator index stores ids only, never ledger state.
"""

import logging
from typing import Dict, List, Optional

from .campaign_ledger import CampaignLedger

logger = logging.getLogger(__name__)


class InMemoryCampaignRepository:
    """Campaign registry backed by process memory"""

    def __init__(self):
        self._campaigns: Dict[str, CampaignLedger] = {}
        self._by_creator: Dict[str, List[str]] = {}
        self._order: List[str] = []

    def add(self, campaign: CampaignLedger) -> None:
        """Store a newly created ledger and index it under its owner"""
        if campaign.campaign_id in self._campaigns:
            raise ValueError(f"campaign {campaign.campaign_id} already registered")
        self._campaigns[campaign.campaign_id] = campaign
        self._by_creator.setdefault(campaign.owner, []).append(campaign.campaign_id)
        self._order.append(campaign.campaign_id)
        logger.debug(f"Registered campaign {campaign.campaign_id} for {campaign.owner}")

    def get(self, campaign_id: str) -> Optional[CampaignLedger]:
        return self._campaigns.get(campaign_id)

    def ids_for_creator(self, creator: str) -> List[str]:
        return list(self._by_creator.get(creator, []))

    def all_ids(self) -> List[str]:
        return list(self._order)

    def __len__(self) -> int:
        return len(self._campaigns)


__all__ = ["InMemoryCampaignRepository"]
