"""
Event Bus for the Crowdfunding Service

Event envelope, event type registry and an in-process event bus.
Publishers only depend on ``publish_event(event) -> bool``, so a broker
backed bus can be injected instead of InMemoryEventBus.
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Event types published by the crowdfunding service"""

    # Campaign lifecycle
    CAMPAIGN_CREATED = "crowdfunding.campaign.created"
    CAMPAIGN_PAUSED = "crowdfunding.paused"
    CAMPAIGN_RESUMED = "crowdfunding.resumed"
    DEADLINE_EXTENDED = "crowdfunding.deadline.extended"

    # Factory controls
    FACTORY_PAUSED = "crowdfunding.factory.paused"
    FACTORY_RESUMED = "crowdfunding.factory.resumed"

    # Tier management
    TIER_ADDED = "crowdfunding.tier.added"
    TIER_REMOVED = "crowdfunding.tier.removed"

    # Money movement
    CAMPAIGN_FUNDED = "crowdfunding.funded"
    FUNDS_WITHDRAWN = "crowdfunding.withdrawn"
    CONTRIBUTION_REFUNDED = "crowdfunding.refunded"
    PAYOUT_PENDING = "crowdfunding.payout.pending"


class ServiceSource(Enum):
    """Event sources"""

    CROWDFUNDING_SERVICE = "crowdfunding_service"
    PAYMENT_SERVICE = "payment_service"


class Event:
    """Event model"""

    def __init__(
        self,
        event_type: EventType,
        source: ServiceSource,
        data: Dict[str, Any],
        subject: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ):
        self.id = str(uuid.uuid4())
        self.type = event_type.value
        self.source = source.value
        self.data = data
        self.subject = subject
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.metadata = metadata or {}
        self.version = "1.0.0"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "source": self.source,
            "subject": self.subject,
            "timestamp": self.timestamp,
            "data": self.data,
            "metadata": self.metadata,
            "version": self.version,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


class InMemoryEventBus:
    """
    In-process event bus.

    Keeps a history of published events and dispatches them to handlers
    subscribed by exact type or ``prefix.*`` pattern. Handler errors are
    logged and do not fail the publish.
    """

    def __init__(self):
        self.history: List[Event] = []
        self._handlers: Dict[str, List[Callable]] = {}

    async def subscribe_to_events(self, pattern: str, handler: Callable):
        """Register an async handler for an event type or ``prefix.*`` pattern"""
        self._handlers.setdefault(pattern, []).append(handler)

    def _matching_handlers(self, event_type: str) -> List[Callable]:
        handlers = []
        for pattern, registered in self._handlers.items():
            if pattern == event_type or (
                pattern.endswith(".*") and event_type.startswith(pattern[:-1])
            ):
                handlers.extend(registered)
        return handlers

    async def publish_event(self, event: Event) -> bool:
        """Record the event and dispatch it to subscribers"""
        self.history.append(event)
        for handler in self._matching_handlers(event.type):
            try:
                await handler(event)
            except Exception as e:
                logger.error(f"Event handler failed for {event.type}: {e}", exc_info=True)
        return True

    async def close(self):
        self._handlers.clear()


__all__ = ["Event", "EventType", "ServiceSource", "InMemoryEventBus"]
