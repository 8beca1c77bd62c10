"""
Campaign Factory - Business Logic Layer

Creates campaign ledgers and indexes them per creator. Once created, a
campaign is self-governing: the factory is only consulted to create or
look up campaigns.
"""

import logging
from typing import List, Optional

from .campaign_ledger import CampaignLedger
from .events.publishers import publish_campaign_created, publish_factory_state_changed
from .models import CampaignSummary
from .protocols import (
    CampaignNotFoundError,
    CampaignPausedError,
    CampaignRepositoryProtocol,
    ClockProtocol,
    EventBusProtocol,
    TransferClientProtocol,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)


class CampaignFactory:
    """
    Campaign Factory - registry of campaigns per creator

    The factory owner may pause the factory, which blocks new campaigns
    without affecting existing ones.
    """

    def __init__(
        self,
        repository: CampaignRepositoryProtocol,
        clock: ClockProtocol,
        transfer_client: TransferClientProtocol,
        event_bus: Optional[EventBusProtocol] = None,
        owner: str = "system",
    ):
        """
        Initialize campaign factory with dependencies.

        Args:
            repository: Campaign registry
            clock: Current time source shared by every campaign
            transfer_client: Value transfer primitive shared by every campaign
            event_bus: Event bus for publishing events (optional)
            owner: Identity allowed to pause/unpause the factory
        """
        self.repository = repository
        self.clock = clock
        self.transfer_client = transfer_client
        self.event_bus = event_bus
        self.owner = owner
        self.paused = False

    async def create_campaign(
        self,
        caller: str,
        name: str,
        duration_days: int,
        goal: int,
        description: str = "",
    ) -> CampaignLedger:
        """
        Create a campaign owned by ``caller``.

        Args:
            caller: Creator, becomes the campaign owner
            name: Campaign name
            duration_days: Days until the deadline (> 0)
            goal: Funding goal in smallest currency unit (> 0)
            description: Campaign description

        Returns:
            The new campaign ledger

        Raises:
            CampaignPausedError: If the factory is paused
            InvalidArgumentError: If goal or duration_days is not positive
        """
        if self.paused:
            raise CampaignPausedError("factory is paused")

        # the ledger validates goal and duration before anything is registered
        campaign = CampaignLedger(
            owner=caller,
            name=name,
            description=description,
            goal=goal,
            duration_days=duration_days,
            clock=self.clock,
            transfer_client=self.transfer_client,
            event_bus=self.event_bus,
        )
        self.repository.add(campaign)

        logger.info(
            f"Created campaign {campaign.campaign_id} '{name}' for {caller}, "
            f"goal {goal}, deadline {campaign.deadline}"
        )
        await publish_campaign_created(
            self.event_bus,
            campaign.campaign_id,
            caller,
            name,
            goal,
            campaign.deadline,
        )
        return campaign

    def get_campaign(self, campaign_id: str) -> CampaignLedger:
        """
        Resolve a campaign id to its ledger.

        Raises:
            CampaignNotFoundError: If the id is unknown
        """
        campaign = self.repository.get(campaign_id)
        if campaign is None:
            raise CampaignNotFoundError(f"campaign {campaign_id} not found")
        return campaign

    def get_campaigns_of_user(self, creator: str) -> List[CampaignSummary]:
        """Summaries of the campaigns ``creator`` launched, in creation order"""
        return [
            self.repository.get(campaign_id).summary()
            for campaign_id in self.repository.ids_for_creator(creator)
        ]

    def get_all_campaigns(self) -> List[CampaignSummary]:
        """Summaries of every campaign, in creation order"""
        return [
            self.repository.get(campaign_id).summary()
            for campaign_id in self.repository.all_ids()
        ]

    def _require_owner(self, caller: str) -> None:
        if caller != self.owner:
            raise UnauthorizedError("only factory owner can call this function")

    async def pause(self, caller: str) -> None:
        """Block new campaigns"""
        await self._set_paused(caller, True)

    async def unpause(self, caller: str) -> None:
        """Allow new campaigns again"""
        await self._set_paused(caller, False)

    async def _set_paused(self, caller: str, paused: bool) -> None:
        self._require_owner(caller)
        self.paused = paused

        logger.info(f"Campaign factory {'paused' if paused else 'resumed'}")
        await publish_factory_state_changed(self.event_bus, self.owner, paused)


__all__ = ["CampaignFactory"]
