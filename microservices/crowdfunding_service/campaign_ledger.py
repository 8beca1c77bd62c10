"""
Campaign Ledger - Business Logic Layer

One instance per campaign. Owns tiers, per-backer contributions, the held
balance and the pause gate. Status is never stored: it is recomputed from
(now, deadline, total_raised, goal) on every read.

Money rules:
- Pledges must match a tier price exactly and are only accepted while the
  campaign is not paused and the deadline has not passed.
- The owner may withdraw the held balance once the goal is met.
- Backers may refund their whole contribution once the campaign failed.
- Balances are debited before the external transfer is attempted and
  restored if the transfer fails. A transfer with an unknown outcome keeps
  the debit and is held as a pending payout, resent under the same
  reference until the payment service answers.
- Every committed mutation takes the next per-campaign sequence number,
  carried in its event payload.
"""

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from typing import Dict, List, Optional, Set

from core.event_bus import EventType

from .events.publishers import (
    publish_campaign_funded,
    publish_campaign_state_changed,
    publish_funds_moved,
    publish_payout_pending,
    publish_tier_changed,
)
from .models import (
    SECONDS_PER_DAY,
    CampaignSnapshot,
    CampaignStatus,
    CampaignSummary,
    PayoutKind,
    PendingPayout,
    Tier,
    TransferReceipt,
)
from .protocols import (
    CampaignEndedError,
    CampaignPausedError,
    ClockProtocol,
    EventBusProtocol,
    InvalidArgumentError,
    InvalidStateError,
    ReentrancyError,
    TransferClientProtocol,
    TransferFailedError,
    TransferOutcomeUnknownError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class CampaignLedger:
    """
    Campaign Ledger - escrow state machine for a single campaign

    Conservation: total_raised == sum of backer contributions, and
    held_balance == total_raised - total_withdrawn.
    """

    def __init__(
        self,
        owner: str,
        name: str,
        description: str,
        goal: int,
        duration_days: int,
        clock: ClockProtocol,
        transfer_client: TransferClientProtocol,
        event_bus: Optional[EventBusProtocol] = None,
        campaign_id: Optional[str] = None,
    ):
        """
        Initialize campaign ledger.

        Args:
            owner: Identity allowed to withdraw, manage tiers and pause
            name: Campaign name
            description: Campaign description
            goal: Funding goal in smallest currency unit (> 0)
            duration_days: Days until the deadline (> 0)
            clock: Current time source
            transfer_client: Value transfer primitive
            event_bus: Event bus for publishing events (optional)
            campaign_id: Explicit id, generated if omitted

        Raises:
            InvalidArgumentError: If goal or duration_days is not positive
        """
        if not owner:
            raise InvalidArgumentError("owner is required")
        if not _is_int(goal) or goal <= 0:
            raise InvalidArgumentError("goal must be greater than 0")
        if not _is_int(duration_days) or duration_days <= 0:
            raise InvalidArgumentError("duration must be greater than 0")

        self._campaign_id = campaign_id or f"camp_{uuid.uuid4().hex[:24]}"
        self._owner = owner
        self._name = name
        self._description = description
        self._goal = goal

        self._clock = clock
        self._transfer_client = transfer_client
        self.event_bus = event_bus

        self._created_at = clock.now()
        self._deadline = self._created_at + duration_days * SECONDS_PER_DAY

        self._tiers: List[Tier] = []
        self._paused = False
        self._contributions: Dict[str, int] = {}
        self._funded_tiers: Dict[str, Set[str]] = {}
        self._total_raised = 0
        self._total_withdrawn = 0
        self._pending: Dict[str, PendingPayout] = {}
        self._payout_count = 0
        self._sequence = 0

        self._lock = asyncio.Lock()
        self._active_task: Optional[asyncio.Task] = None

    # ====================
    # Metadata
    # ====================

    @property
    def campaign_id(self) -> str:
        return self._campaign_id

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def goal(self) -> int:
        return self._goal

    @property
    def deadline(self) -> int:
        return self._deadline

    @property
    def created_at(self) -> int:
        return self._created_at

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def total_raised(self) -> int:
        return self._total_raised

    @property
    def held_balance(self) -> int:
        return self._total_raised - self._total_withdrawn

    # ====================
    # Serialization
    # ====================

    @asynccontextmanager
    async def _serialized(self):
        """
        Run one mutating operation at a time on this campaign.

        A call issued by the task already inside an operation (for example
        from within the transfer primitive) is rejected instead of waiting
        on the lock it holds.
        """
        current = asyncio.current_task()
        if current is not None and self._active_task is current:
            raise ReentrancyError()
        async with self._lock:
            self._active_task = current
            try:
                yield
            finally:
                self._active_task = None

    def _require_owner(self, caller: str) -> None:
        if caller != self._owner:
            raise UnauthorizedError()

    def _next_sequence(self) -> int:
        self._sequence += 1
        return self._sequence

    # ====================
    # Status
    # ====================

    def status_at(self, now: int) -> CampaignStatus:
        """Status at ``now``; a met goal wins over an expired deadline"""
        if self._total_raised >= self._goal:
            return CampaignStatus.SUCCESSFUL
        if now > self._deadline:
            return CampaignStatus.FAILED
        return CampaignStatus.ACTIVE

    def get_campaign_status(self) -> CampaignStatus:
        """Current campaign status"""
        return self.status_at(self._clock.now())

    # ====================
    # Tier Management (owner only)
    # ====================

    async def add_tier(self, caller: str, name: str, amount: int) -> Tier:
        """
        Append a pledge tier.

        Raises:
            UnauthorizedError: If caller is not the owner
            InvalidArgumentError: If amount is not positive
        """
        async with self._serialized():
            self._require_owner(caller)
            if not _is_int(amount) or amount <= 0:
                raise InvalidArgumentError("tier amount must be greater than 0")

            tier = Tier(tier_id=f"tier_{uuid.uuid4().hex[:12]}", name=name, amount=amount)
            self._tiers.append(tier)
            tier_count = len(self._tiers)
            sequence = self._next_sequence()

        logger.info(f"Campaign {self._campaign_id}: added tier '{name}' at {amount}")
        await publish_tier_changed(
            self.event_bus,
            self._campaign_id,
            tier.tier_id,
            tier.name,
            tier.amount,
            tier_count,
            sequence=sequence,
        )
        return tier

    async def remove_tier(self, caller: str, index: int) -> Tier:
        """
        Remove the tier at ``index``.

        The last tier is moved into the freed slot, so indices obtained
        before a removal are invalid afterwards; re-read get_tiers().

        Raises:
            UnauthorizedError: If caller is not the owner
            InvalidArgumentError: If index is out of range
            InvalidStateError: If the tier has backers
        """
        async with self._serialized():
            self._require_owner(caller)
            if not _is_int(index) or not 0 <= index < len(self._tiers):
                raise InvalidArgumentError("invalid tier index")
            tier = self._tiers[index]
            if tier.backer_count > 0:
                raise InvalidStateError("cannot remove tier with active backers")

            self._tiers[index] = self._tiers[-1]
            self._tiers.pop()
            tier_count = len(self._tiers)
            sequence = self._next_sequence()

        logger.info(f"Campaign {self._campaign_id}: removed tier '{tier.name}'")
        await publish_tier_changed(
            self.event_bus,
            self._campaign_id,
            tier.tier_id,
            tier.name,
            tier.amount,
            tier_count,
            removed=True,
            sequence=sequence,
        )
        return tier

    def get_tiers(self) -> List[Tier]:
        """Snapshot of the tier sequence"""
        return list(self._tiers)

    # ====================
    # Funding
    # ====================

    async def fund(self, caller: str, tier_index: int, amount: int) -> int:
        """
        Pledge ``amount`` at tier ``tier_index``.

        Checks run in order: paused, deadline, tier index, exact amount.

        Returns:
            Caller's total contribution after the pledge

        Raises:
            CampaignPausedError: If the campaign is paused
            CampaignEndedError: If the deadline has passed
            InvalidArgumentError: If the tier index or amount is wrong
        """
        async with self._serialized():
            if self._paused:
                raise CampaignPausedError()
            now = self._clock.now()
            if now > self._deadline:
                raise CampaignEndedError()
            if not _is_int(tier_index) or not 0 <= tier_index < len(self._tiers):
                raise InvalidArgumentError("invalid tier index")
            tier = self._tiers[tier_index]
            if not _is_int(amount) or amount != tier.amount:
                raise InvalidArgumentError("invalid amount")

            self._tiers[tier_index] = tier.model_copy(
                update={"backer_count": tier.backer_count + 1}
            )
            backer_total = self._contributions.get(caller, 0) + amount
            self._contributions[caller] = backer_total
            self._funded_tiers.setdefault(caller, set()).add(tier.tier_id)
            self._total_raised += amount
            total_raised = self._total_raised
            status = self.status_at(now)
            sequence = self._next_sequence()

        logger.info(
            f"Campaign {self._campaign_id}: {caller} pledged {amount} at tier '{tier.name}', "
            f"raised {total_raised}/{self._goal}"
        )
        await publish_campaign_funded(
            self.event_bus,
            self._campaign_id,
            caller,
            tier.tier_id,
            amount,
            backer_total,
            total_raised,
            status.value,
            sequence=sequence,
        )
        return backer_total

    def get_backers_total_contribution(self, backer: str) -> int:
        """Amount currently contributed by ``backer`` (0 if none)"""
        return self._contributions.get(backer, 0)

    def has_funded_tier(self, backer: str, tier_index: int) -> bool:
        """Whether ``backer`` pledged at the tier currently at ``tier_index``"""
        if not _is_int(tier_index) or not 0 <= tier_index < len(self._tiers):
            raise InvalidArgumentError("invalid tier index")
        return self._tiers[tier_index].tier_id in self._funded_tiers.get(backer, set())

    def get_contract_balance(self) -> int:
        """Funds currently held by the ledger"""
        return self.held_balance

    # ====================
    # Payouts
    # ====================

    def _next_reference(self, kind: PayoutKind) -> str:
        self._payout_count += 1
        return f"{self._campaign_id}:{kind.value}:{self._payout_count}"

    def _debit(self, payout: PendingPayout) -> None:
        if payout.kind == PayoutKind.WITHDRAW:
            self._total_withdrawn += payout.amount
        else:
            self._contributions[payout.recipient] = (
                self._contributions.get(payout.recipient, 0) - payout.amount
            )
            self._total_raised -= payout.amount

    def _restore(self, payout: PendingPayout) -> None:
        if payout.kind == PayoutKind.WITHDRAW:
            self._total_withdrawn -= payout.amount
        else:
            self._contributions[payout.recipient] = (
                self._contributions.get(payout.recipient, 0) + payout.amount
            )
            self._total_raised += payout.amount

    async def _transfer(self, payout: PendingPayout) -> None:
        to, amount = payout.recipient, payout.amount
        try:
            transferred = await self._transfer_client.transfer_value(
                to, amount, payout.reference
            )
        except (TransferFailedError, TransferOutcomeUnknownError):
            raise
        except Exception as e:
            raise TransferFailedError(
                f"transfer failed: {e}", recipient=to, amount=amount
            ) from e
        if not transferred:
            raise TransferFailedError(recipient=to, amount=amount)

    async def _pay_out(self, payout: PendingPayout) -> int:
        """
        Debit the ledger, then transfer. Caller holds the campaign lock.

        A definite failure restores the debit. An unknown outcome, or a
        cancellation while the transfer is in flight, keeps the debit and
        records the payout as pending under its reference.

        Returns:
            Event sequence number of the completed payout
        """
        self._debit(payout)
        try:
            await self._transfer(payout)
        except TransferFailedError:
            self._restore(payout)
            logger.warning(
                f"Campaign {self._campaign_id}: {payout.kind.value} of {payout.amount} "
                f"to {payout.recipient} failed"
            )
            raise
        except TransferOutcomeUnknownError:
            self._pending[payout.reference] = payout
            logger.error(
                f"Campaign {self._campaign_id}: {payout.kind.value} {payout.reference} of "
                f"{payout.amount} to {payout.recipient} has unknown outcome, held as pending"
            )
            # published under the lock so no retry can settle before it
            await publish_payout_pending(
                self.event_bus,
                self._campaign_id,
                payout.reference,
                payout.kind.value,
                payout.recipient,
                payout.amount,
                sequence=self._next_sequence(),
            )
            raise
        except asyncio.CancelledError:
            self._pending[payout.reference] = payout
            logger.error(
                f"Campaign {self._campaign_id}: {payout.kind.value} {payout.reference} "
                f"cancelled during transfer, held as pending"
            )
            raise
        return self._next_sequence()

    async def _settled(
        self, payout: PendingPayout, remaining: int, sequence: int
    ) -> TransferReceipt:
        logger.info(
            f"Campaign {self._campaign_id}: {payout.kind.value} of {payout.amount} "
            f"to {payout.recipient} completed"
        )
        await publish_funds_moved(
            self.event_bus,
            self._campaign_id,
            payout.recipient,
            payout.amount,
            remaining,
            refund=payout.kind == PayoutKind.REFUND,
            sequence=sequence,
        )
        return TransferReceipt(
            campaign_id=self._campaign_id,
            recipient=payout.recipient,
            amount=payout.amount,
            remaining_balance=remaining,
        )

    async def withdraw(self, caller: str) -> TransferReceipt:
        """
        Transfer the whole held balance to the owner.

        Raises:
            UnauthorizedError: If caller is not the owner
            InvalidStateError: If the campaign is not successful or nothing is held
            TransferFailedError: If the transfer fails (state unchanged)
            TransferOutcomeUnknownError: If the outcome is unknown (payout pending)
        """
        async with self._serialized():
            self._require_owner(caller)
            if self.get_campaign_status() != CampaignStatus.SUCCESSFUL:
                raise InvalidStateError("campaign is not successful")
            amount = self.held_balance
            if amount <= 0:
                raise InvalidStateError("no funds to withdraw")

            payout = PendingPayout(
                reference=self._next_reference(PayoutKind.WITHDRAW),
                kind=PayoutKind.WITHDRAW,
                recipient=self._owner,
                amount=amount,
            )
            sequence = await self._pay_out(payout)
            remaining = self.held_balance

        return await self._settled(payout, remaining, sequence)

    async def refund(self, caller: str) -> TransferReceipt:
        """
        Return the caller's whole contribution after the campaign failed.

        Tier backer counts are left untouched.

        Raises:
            InvalidStateError: If the campaign has not failed or caller has nothing to refund
            TransferFailedError: If the transfer fails (contribution restored)
            TransferOutcomeUnknownError: If the outcome is unknown (payout pending)
        """
        async with self._serialized():
            if self.get_campaign_status() != CampaignStatus.FAILED:
                raise InvalidStateError("refund is not available")
            amount = self._contributions.get(caller, 0)
            if amount <= 0:
                raise InvalidStateError("no contribution to refund")

            payout = PendingPayout(
                reference=self._next_reference(PayoutKind.REFUND),
                kind=PayoutKind.REFUND,
                recipient=caller,
                amount=amount,
            )
            sequence = await self._pay_out(payout)
            remaining = self.held_balance

        return await self._settled(payout, remaining, sequence)

    async def retry_pending_payout(self, reference: str) -> TransferReceipt:
        """
        Resend a pending payout under its original reference.

        Any caller may retry: the recipient and amount are fixed, and the
        payment service applies a reference at most once.

        Raises:
            InvalidArgumentError: If no payout is pending under ``reference``
            TransferFailedError: If the payment service rejects it (debit restored)
            TransferOutcomeUnknownError: If the outcome is still unknown
        """
        async with self._serialized():
            payout = self._pending.get(reference)
            if payout is None:
                raise InvalidArgumentError("unknown payout reference")
            try:
                await self._transfer(payout)
            except TransferFailedError:
                del self._pending[reference]
                self._restore(payout)
                logger.warning(
                    f"Campaign {self._campaign_id}: pending {payout.kind.value} {reference} "
                    f"rejected, debit restored"
                )
                raise
            del self._pending[reference]
            sequence = self._next_sequence()
            remaining = self.held_balance

        return await self._settled(payout, remaining, sequence)

    def get_pending_payouts(self) -> List[PendingPayout]:
        """Payouts debited from the ledger whose transfer outcome is unknown"""
        return list(self._pending.values())

    # ====================
    # Owner Controls
    # ====================

    async def pause_campaign(self, caller: str) -> None:
        """Block new pledges"""
        await self._set_paused(caller, True)

    async def resume_campaign(self, caller: str) -> None:
        """Accept pledges again"""
        await self._set_paused(caller, False)

    async def _set_paused(self, caller: str, paused: bool) -> None:
        async with self._serialized():
            self._require_owner(caller)
            self._paused = paused
            deadline = self._deadline
            sequence = self._next_sequence()

        logger.info(f"Campaign {self._campaign_id}: {'paused' if paused else 'resumed'}")
        await publish_campaign_state_changed(
            self.event_bus,
            EventType.CAMPAIGN_PAUSED if paused else EventType.CAMPAIGN_RESUMED,
            self._campaign_id,
            paused,
            deadline,
            sequence=sequence,
        )

    async def extend_deadline(self, caller: str, days: int) -> int:
        """
        Push the deadline back by ``days`` while the campaign is active.

        Returns:
            New deadline

        Raises:
            UnauthorizedError: If caller is not the owner
            InvalidArgumentError: If days is not positive
            InvalidStateError: If the campaign is not active
        """
        async with self._serialized():
            self._require_owner(caller)
            if not _is_int(days) or days <= 0:
                raise InvalidArgumentError("days must be greater than 0")
            if self.get_campaign_status() != CampaignStatus.ACTIVE:
                raise InvalidStateError("campaign is not active")
            previous = self._deadline
            self._deadline = previous + days * SECONDS_PER_DAY
            deadline = self._deadline
            paused = self._paused
            sequence = self._next_sequence()

        logger.info(f"Campaign {self._campaign_id}: deadline extended by {days} days")
        await publish_campaign_state_changed(
            self.event_bus,
            EventType.DEADLINE_EXTENDED,
            self._campaign_id,
            paused,
            deadline,
            previous_deadline=previous,
            sequence=sequence,
        )
        return deadline

    # ====================
    # Views
    # ====================

    def summary(self) -> CampaignSummary:
        return CampaignSummary(
            campaign_id=self._campaign_id,
            owner=self._owner,
            name=self._name,
            creation_time=self._created_at,
        )

    def snapshot(self) -> CampaignSnapshot:
        """Full read-only view of the campaign"""
        return CampaignSnapshot(
            campaign_id=self._campaign_id,
            owner=self._owner,
            name=self._name,
            description=self._description,
            goal=self._goal,
            deadline=self._deadline,
            paused=self._paused,
            status=self.get_campaign_status(),
            total_raised=self._total_raised,
            held_balance=self.held_balance,
            tiers=self.get_tiers(),
            pending_payouts=self.get_pending_payouts(),
        )


__all__ = ["CampaignLedger"]
