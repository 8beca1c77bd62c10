"""
Crowdfunding Service Protocols (Interfaces)

These interfaces define contracts for dependency injection.
NO import-time I/O dependencies - safe to import anywhere.
"""
from typing import Any, List, Optional, Protocol, runtime_checkable


# ============================================================================
# Custom Exceptions - defined here to avoid importing the ledger
# ============================================================================

class CrowdfundingError(Exception):
    """Base error for rejected crowdfunding operations"""
    pass


class UnauthorizedError(CrowdfundingError):
    """Caller lacks the role required by the operation"""

    def __init__(self, message: str = "only owner can call this function"):
        super().__init__(message)


class InvalidArgumentError(CrowdfundingError):
    """Out-of-range tier index, non-positive amount or wrong pledge amount"""
    pass


class InvalidStateError(CrowdfundingError):
    """Operation not permitted in the campaign's current state"""
    pass


class CampaignPausedError(InvalidStateError):
    """Campaign (or factory) is paused"""

    def __init__(self, message: str = "campaign is paused"):
        super().__init__(message)


class CampaignEndedError(InvalidStateError):
    """Deadline has passed"""

    def __init__(self, message: str = "campaign has ended"):
        super().__init__(message)


class ReentrancyError(InvalidStateError):
    """Call made from within an in-flight operation on the same campaign"""

    def __init__(self, message: str = "reentrant call rejected"):
        super().__init__(message)


class TransferFailedError(CrowdfundingError):
    """External value transfer reported failure"""

    def __init__(self, message: str = "transfer failed", recipient: str = None, amount: int = None):
        super().__init__(message)
        self.recipient = recipient
        self.amount = amount


class TransferOutcomeUnknownError(CrowdfundingError):
    """
    Transfer may or may not have moved value (timeout, dropped connection,
    cancellation). The debit stays in place as a pending payout.
    """

    def __init__(
        self,
        message: str = "transfer outcome unknown",
        recipient: str = None,
        amount: int = None,
        reference: str = None,
    ):
        super().__init__(message)
        self.recipient = recipient
        self.amount = amount
        self.reference = reference


class CampaignNotFoundError(CrowdfundingError):
    """Campaign id not known to the registry"""
    pass


# ============================================================================
# External Collaborator Protocols
# ============================================================================

@runtime_checkable
class TransferClientProtocol(Protocol):
    """
    Value movement primitive.

    Synchronous from the ledger's point of view: the awaited call either
    moves the full amount, reports failure without moving anything, or
    raises TransferOutcomeUnknownError when it cannot tell which happened.
    """

    async def transfer_value(self, to: str, amount: int, reference: str) -> bool:
        """
        Move ``amount`` to ``to``; True on success.

        ``reference`` is the idempotency key. Re-sending the same reference
        must never move value twice.
        """
        ...


@runtime_checkable
class ClockProtocol(Protocol):
    """Current time source used for deadline comparisons"""

    def now(self) -> int:
        """Current unix time in seconds"""
        ...


@runtime_checkable
class EventBusProtocol(Protocol):
    """Interface for event publishing"""

    async def publish_event(self, event: Any) -> Any:
        """Publish an event"""
        ...


# ============================================================================
# Registry Protocol
# ============================================================================

@runtime_checkable
class CampaignRepositoryProtocol(Protocol):
    """
    Interface for the campaign registry.

    Holds ledger instances by id and the creator -> campaign id index.
    """

    def add(self, campaign: Any) -> None:
        """Store a newly created ledger and index it under its owner"""
        ...

    def get(self, campaign_id: str) -> Optional[Any]:
        """Get ledger by id"""
        ...

    def ids_for_creator(self, creator: str) -> List[str]:
        """Campaign ids created by ``creator`` in creation order"""
        ...

    def all_ids(self) -> List[str]:
        """Every campaign id in creation order"""
        ...


__all__ = [
    # Exceptions
    "CrowdfundingError",
    "UnauthorizedError",
    "InvalidArgumentError",
    "InvalidStateError",
    "CampaignPausedError",
    "CampaignEndedError",
    "ReentrancyError",
    "TransferFailedError",
    "TransferOutcomeUnknownError",
    "CampaignNotFoundError",
    # Protocols
    "TransferClientProtocol",
    "ClockProtocol",
    "EventBusProtocol",
    "CampaignRepositoryProtocol",
]
