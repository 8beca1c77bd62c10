"""
Component Test Mocks

Shared mock implementations for component testing.
These mocks replace real I/O dependencies (event bus, payment service, clock).
"""

from .nats_mock import MockEventBus
from .ledger_mocks import FakeClock, MockTransferClient

__all__ = [
    'MockEventBus',
    'FakeClock',
    'MockTransferClient',
]
