"""
Crowdfunding Service Infrastructure Golden Tests

Config loading, logger setup, event bus, publishers, payment client,
repository and production wiring.

Usage:
    pytest tests/unit/golden/crowdfunding_service/test_crowdfunding_infra_golden.py -v
"""
import json
import logging

import httpx
import pytest

from core.config import CrowdfundingConfig, LoggingConfig
from core.event_bus import Event, EventType, InMemoryEventBus, ServiceSource
from core.logger import setup_service_logger

pytestmark = [pytest.mark.unit, pytest.mark.golden]


class TestConfig:
    """Golden: dataclass configs loaded from environment"""

    def test_defaults(self, monkeypatch):
        for key in ("PAYMENT_SERVICE_URL", "TRANSFER_TIMEOUT_SECONDS", "FACTORY_OWNER", "EVENTS_ENABLED"):
            monkeypatch.delenv(key, raising=False)

        config = CrowdfundingConfig.from_env()

        assert config.payment_service_url == "http://localhost:8207"
        assert config.transfer_timeout_seconds == 10.0
        assert config.factory_owner == "system"
        assert config.events_enabled is True
        assert isinstance(config.logging, LoggingConfig)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("PAYMENT_SERVICE_URL", "http://payments:9000")
        monkeypatch.setenv("TRANSFER_TIMEOUT_SECONDS", "2.5")
        monkeypatch.setenv("FACTORY_OWNER", "admin")
        monkeypatch.setenv("EVENTS_ENABLED", "false")

        config = CrowdfundingConfig.from_env()

        assert config.payment_service_url == "http://payments:9000"
        assert config.transfer_timeout_seconds == 2.5
        assert config.factory_owner == "admin"
        assert config.events_enabled is False

    def test_bad_timeout_falls_back(self, monkeypatch):
        monkeypatch.setenv("TRANSFER_TIMEOUT_SECONDS", "soon")
        assert CrowdfundingConfig.from_env().transfer_timeout_seconds == 10.0

    def test_logging_level_from_env(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        assert LoggingConfig.from_env().log_level == "WARNING"

    def test_env_file_loaded_without_overriding(self, tmp_path, monkeypatch):
        import core.config
        from core.config import load_environment, reload_settings

        env_file = tmp_path / ".env"
        env_file.write_text("FACTORY_OWNER=ops\nPAYMENT_SERVICE_URL=http://from-file:1\n")
        # registered with monkeypatch so values loaded from the file are undone
        monkeypatch.setenv("FACTORY_OWNER", "unset")
        monkeypatch.delenv("FACTORY_OWNER")
        monkeypatch.setenv("PAYMENT_SERVICE_URL", "http://from-env:2")
        monkeypatch.setattr(core.config, "settings", core.config.settings)

        assert load_environment(str(env_file)) is True
        settings = reload_settings()

        assert settings.factory_owner == "ops"
        assert settings.payment_service_url == "http://from-env:2"

    def test_missing_env_file_is_optional(self, tmp_path, monkeypatch):
        from core.config import load_environment

        monkeypatch.setenv("ENV_FILE", str(tmp_path / "absent.env"))
        assert load_environment() is False


class TestServiceLogger:
    """Golden: setup_service_logger"""

    def test_configures_level_once(self):
        logger = setup_service_logger("crowdfunding_test_logger", level="warning", config=LoggingConfig())
        handlers = list(logger.handlers)

        again = setup_service_logger("crowdfunding_test_logger", config=LoggingConfig())

        assert logger is again
        assert again.handlers == handlers
        assert len(handlers) == 1
        assert again.level == logging.INFO

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "service.log"
        config = LoggingConfig(log_file=str(log_file), enable_console=False)

        logger = setup_service_logger("crowdfunding_file_logger", config=config)
        logger.info("campaign created")
        for handler in logger.handlers:
            handler.flush()

        assert "campaign created" in log_file.read_text()


class TestEventBus:
    """Golden: Event envelope and InMemoryEventBus"""

    def test_event_envelope(self):
        event = Event(EventType.CAMPAIGN_FUNDED, ServiceSource.CROWDFUNDING_SERVICE, {"amount": 5})

        payload = json.loads(event.to_json())
        assert payload["type"] == "crowdfunding.funded"
        assert payload["source"] == "crowdfunding_service"
        assert payload["data"] == {"amount": 5}

    @pytest.mark.asyncio
    async def test_dispatch_by_pattern(self):
        bus = InMemoryEventBus()
        received = []

        async def handler(event):
            received.append(event.type)

        async def broken(event):
            raise RuntimeError("handler bug")

        await bus.subscribe_to_events("crowdfunding.*", handler)
        await bus.subscribe_to_events("crowdfunding.refunded", broken)

        assert await bus.publish_event(
            Event(EventType.CONTRIBUTION_REFUNDED, ServiceSource.CROWDFUNDING_SERVICE, {})
        ) is True
        await bus.publish_event(Event(EventType.TIER_ADDED, ServiceSource.CROWDFUNDING_SERVICE, {}))

        assert received == ["crowdfunding.refunded", "crowdfunding.tier.added"]
        assert len(bus.history) == 2


class TestPublishers:
    """Golden: best-effort publishing"""

    @pytest.mark.asyncio
    async def test_no_bus(self):
        from microservices.crowdfunding_service.events import publish_funds_moved

        assert await publish_funds_moved(None, "camp_1", "alice", 5, 0) is False

    @pytest.mark.asyncio
    async def test_refund_subject(self):
        from microservices.crowdfunding_service.events import publish_funds_moved

        bus = InMemoryEventBus()
        assert await publish_funds_moved(bus, "camp_1", "alice", 5, 0, refund=True) is True
        assert bus.history[0].type == "crowdfunding.refunded"
        assert bus.history[0].data["recipient"] == "alice"


class TestPaymentTransferClient:
    """Golden: HTTP transfer primitive"""

    def _client(self, handler):
        from microservices.crowdfunding_service.clients import PaymentTransferClient

        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return PaymentTransferClient(base_url="http://payments/", client=http)

    @pytest.mark.asyncio
    async def test_successful_transfer(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True})

        async with self._client(handler) as client:
            assert await client.transfer_value("alice", 500, "camp_1:refund:1") is True

        assert seen["url"] == "http://payments/api/v1/payments/transfers"
        assert seen["body"] == {
            "recipient": "alice",
            "amount": 500,
            "idempotency_key": "camp_1:refund:1",
        }

    @pytest.mark.asyncio
    async def test_same_reference_sends_same_key(self):
        keys = []

        def handler(request):
            keys.append(json.loads(request.content)["idempotency_key"])
            return httpx.Response(200, json={"success": True})

        async with self._client(handler) as client:
            await client.transfer_value("alice", 500, "camp_1:withdraw:3")
            await client.transfer_value("alice", 500, "camp_1:withdraw:3")

        assert keys == ["camp_1:withdraw:3", "camp_1:withdraw:3"]

    @pytest.mark.asyncio
    async def test_client_error_is_failure(self):
        async with self._client(lambda request: httpx.Response(422)) as client:
            assert await client.transfer_value("alice", 500, "ref") is False

    @pytest.mark.asyncio
    async def test_server_error_outcome_unknown(self):
        from microservices.crowdfunding_service.protocols import TransferOutcomeUnknownError

        async with self._client(lambda request: httpx.Response(502)) as client:
            with pytest.raises(TransferOutcomeUnknownError) as exc_info:
                await client.transfer_value("alice", 500, "ref")

        assert exc_info.value.reference == "ref"
        assert exc_info.value.amount == 500

    @pytest.mark.asyncio
    async def test_unsuccessful_body_is_failure(self):
        async with self._client(lambda request: httpx.Response(200, json={"success": False})) as client:
            assert await client.transfer_value("alice", 500, "ref") is False

    @pytest.mark.asyncio
    async def test_connect_error_is_failure(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        async with self._client(handler) as client:
            assert await client.transfer_value("alice", 500, "ref") is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [httpx.ReadTimeout, httpx.RemoteProtocolError])
    async def test_lost_reply_outcome_unknown(self, error):
        from microservices.crowdfunding_service.protocols import TransferOutcomeUnknownError

        delivered = []

        def handler(request):
            delivered.append(json.loads(request.content)["idempotency_key"])
            raise error("reply lost", request=request)

        async with self._client(handler) as client:
            with pytest.raises(TransferOutcomeUnknownError) as exc_info:
                await client.transfer_value("alice", 500, "camp_1:refund:1")

        assert delivered == ["camp_1:refund:1"]
        assert exc_info.value.recipient == "alice"
        assert isinstance(exc_info.value.__cause__, error)


class TestClockAndRepository:
    """Golden: SystemClock and InMemoryCampaignRepository"""

    def test_system_clock(self):
        import time
        from microservices.crowdfunding_service.clients import SystemClock

        now = SystemClock().now()
        assert isinstance(now, int)
        assert abs(now - time.time()) < 5

    def test_repository_rejects_duplicate_id(self):
        from microservices.crowdfunding_service.campaign_ledger import CampaignLedger
        from microservices.crowdfunding_service.campaign_repository import InMemoryCampaignRepository
        from microservices.crowdfunding_service.clients import SystemClock

        repository = InMemoryCampaignRepository()
        kwargs = dict(
            owner="alice",
            name="Solar",
            description="",
            goal=100,
            duration_days=1,
            clock=SystemClock(),
            transfer_client=None,
            campaign_id="camp_fixed",
        )
        repository.add(CampaignLedger(**kwargs))

        with pytest.raises(ValueError):
            repository.add(CampaignLedger(**kwargs))
        assert len(repository) == 1
        assert repository.ids_for_creator("alice") == ["camp_fixed"]
        assert repository.get("camp_other") is None


class TestProductionWiring:
    """Golden: create_campaign_factory"""

    def test_create_campaign_factory(self):
        from microservices.crowdfunding_service.campaign_factory import CampaignFactory
        from microservices.crowdfunding_service.clients import PaymentTransferClient, SystemClock
        from microservices.crowdfunding_service.factory import create_campaign_factory

        config = CrowdfundingConfig(payment_service_url="http://payments:9000", factory_owner="admin")

        factory = create_campaign_factory(config=config)

        assert isinstance(factory, CampaignFactory)
        assert factory.owner == "admin"
        assert isinstance(factory.clock, SystemClock)
        assert isinstance(factory.transfer_client, PaymentTransferClient)
        assert factory.transfer_client.base_url == "http://payments:9000"
        assert isinstance(factory.event_bus, InMemoryEventBus)

    def test_events_disabled(self):
        from microservices.crowdfunding_service.factory import create_campaign_factory

        factory = create_campaign_factory(
            config=CrowdfundingConfig(events_enabled=False), transfer_client=object()
        )
        assert factory.event_bus is None
