"""
Crowdfunding Service Clients

External collaborators used by the ledger in production.
"""

from .clock import SystemClock
from .payment_client import PaymentTransferClient

__all__ = ["SystemClock", "PaymentTransferClient"]
