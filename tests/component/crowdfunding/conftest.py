"""
Crowdfunding Service Component Test Fixtures

Provides:
- FakeClock: manually advanced time source
- MockTransferClient: in-memory value transfer primitive
- MockEventBus: event publishing recorder
- campaign: a 7-day, 1.0-goal campaign with Basic (0.1) and Super (1.0) tiers
"""

import pytest
import pytest_asyncio

from tests.component.mocks import FakeClock, MockEventBus, MockTransferClient
from tests.contracts.crowdfunding.data_contract import CrowdfundingTestDataFactory


@pytest.fixture
def data_factory():
    """Provide data factory for test data generation"""
    return CrowdfundingTestDataFactory


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def transfer_client():
    return MockTransferClient()


@pytest.fixture
def mock_event_bus():
    return MockEventBus()


@pytest.fixture
def owner(data_factory):
    return data_factory.make_address("owner")


@pytest.fixture
def backer(data_factory):
    return data_factory.make_address("backer")


@pytest.fixture
def other_backer(data_factory):
    return data_factory.make_address("backer")


@pytest.fixture
def campaign_repository():
    from microservices.crowdfunding_service.campaign_repository import InMemoryCampaignRepository

    return InMemoryCampaignRepository()


@pytest.fixture
def campaign_factory(campaign_repository, clock, transfer_client, mock_event_bus):
    """Create campaign factory with mocked dependencies"""
    from microservices.crowdfunding_service.campaign_factory import CampaignFactory

    return CampaignFactory(
        repository=campaign_repository,
        clock=clock,
        transfer_client=transfer_client,
        event_bus=mock_event_bus,
        owner="factory_admin",
    )


@pytest.fixture
def bare_campaign(owner, clock, transfer_client, mock_event_bus, data_factory):
    """Campaign without tiers"""
    from microservices.crowdfunding_service.campaign_ledger import CampaignLedger

    return CampaignLedger(
        owner=owner,
        name="Test Campaign",
        description=data_factory.make_description(),
        goal=data_factory.GOAL,
        duration_days=data_factory.DURATION_DAYS,
        clock=clock,
        transfer_client=transfer_client,
        event_bus=mock_event_bus,
    )


@pytest_asyncio.fixture
async def campaign(bare_campaign, owner, data_factory):
    """Campaign with the Basic and Super tiers"""
    for name, amount in data_factory.default_tiers():
        await bare_campaign.add_tier(owner, name, amount)
    return bare_campaign
