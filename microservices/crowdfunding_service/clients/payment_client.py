"""
Payment Service Client

Value transfer primitive for the crowdfunding ledger, backed by the
payment service's transfer endpoint.
"""

import logging
from typing import Optional

import httpx

from ..protocols import TransferOutcomeUnknownError

logger = logging.getLogger(__name__)

# Failures raised before the request reached the payment service
_NOT_SENT_ERRORS = (httpx.ConnectError, httpx.ConnectTimeout, httpx.PoolTimeout)


class PaymentTransferClient:
    """Payment Service HTTP client performing ledger payouts"""

    def __init__(
        self,
        base_url: str = "http://localhost:8207",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize Payment Service client

        Args:
            base_url: Payment service base URL
            timeout: Request timeout in seconds
            client: Pre-built httpx client (tests inject a MockTransport client)
        """
        self.base_url = base_url.rstrip('/')
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self):
        """Close HTTP client"""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def transfer_value(self, to: str, amount: int, reference: str) -> bool:
        """
        Move ``amount`` to ``to``.

        ``reference`` is sent as the idempotency key, so re-sending a
        payout after an unknown outcome cannot pay twice.

        Returns False when the payment service rejected the transfer (4xx,
        ``success: false``) or the request never left this process.

        Raises:
            TransferOutcomeUnknownError: Timeout after sending, dropped
                connection, 5xx or an unreadable response

        Example:
            >>> async with PaymentTransferClient() as client:
            ...     ok = await client.transfer_value("user_123", 100000, "camp_1:refund:1")
        """
        payload = {
            "recipient": to,
            "amount": amount,
            "idempotency_key": reference,
        }
        try:
            response = await self.client.post(
                f"{self.base_url}/api/v1/payments/transfers",
                json=payload
            )
            response.raise_for_status()
            return bool(response.json().get("success", False))

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status < 500:
                logger.error(f"Transfer {reference} to {to} rejected: {status}")
                return False
            logger.error(f"Transfer {reference} to {to} outcome unknown: {status}")
            raise TransferOutcomeUnknownError(
                f"payment service returned {status}",
                recipient=to, amount=amount, reference=reference,
            ) from e
        except _NOT_SENT_ERRORS as e:
            logger.error(f"Transfer {reference} to {to} not sent: {e}")
            return False
        except Exception as e:
            logger.error(f"Transfer {reference} of {amount} to {to} outcome unknown: {e}")
            raise TransferOutcomeUnknownError(
                f"transfer outcome unknown: {e}",
                recipient=to, amount=amount, reference=reference,
            ) from e


__all__ = ["PaymentTransferClient"]
