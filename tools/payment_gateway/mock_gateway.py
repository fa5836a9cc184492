"""
Sandbox payment gateway.

Simulates a processor without network access. Nonces follow the
Braintree test-nonce convention so the same fixtures work against a
real sandbox account:

- ``fake-valid-nonce`` (or any other nonce) is approved
- nonces starting with ``fake-processor-declined`` are declined
- nonces starting with ``fake-gateway-rejected`` are rejected
"""

import asyncio
import uuid
from decimal import Decimal
from typing import Optional

from core.logging import get_logger
from tools.payment_gateway.base import PaymentGateway, PaymentGatewayError, PaymentResult


logger = get_logger(__name__)

DECLINED_PREFIX = "fake-processor-declined"
REJECTED_PREFIX = "fake-gateway-rejected"


class MockPaymentGateway(PaymentGateway):
    """
    In-memory implementation of PaymentGateway for tests and local runs.

    Keeps every processed sale so tests can assert on what was charged.
    """

    name = "mock"

    def __init__(self, latency_seconds: float = 0.0):
        """
        Args:
            latency_seconds: Artificial delay added to every call
        """
        self._latency = latency_seconds
        self._transactions: dict[str, PaymentResult] = {}
        self._issued_tokens: list[str] = []
        self._unavailable: Optional[str] = None
        self._lock = asyncio.Lock()

    async def _simulate_network(self) -> None:
        if self._latency:
            await asyncio.sleep(self._latency)
        if self._unavailable:
            raise PaymentGatewayError(self._unavailable)

    async def generate_client_token(self) -> str:
        await self._simulate_network()
        token = f"mock-client-token-{uuid.uuid4().hex}"
        self._issued_tokens.append(token)
        return token

    async def sale(self, amount: Decimal, nonce: str) -> PaymentResult:
        await self._simulate_network()

        if amount <= 0:
            return PaymentResult(
                success=False,
                amount=amount,
                status="gateway_rejected",
                message="Amount must be greater than zero.",
                processor=self.name,
            )

        transaction_id = f"mock-txn-{uuid.uuid4().hex[:10]}"

        if nonce.startswith(DECLINED_PREFIX):
            result = PaymentResult(
                success=False,
                amount=amount,
                transaction_id=transaction_id,
                status="processor_declined",
                message="Do Not Honor",
                processor=self.name,
                details={"processor_response_code": "2000"},
            )
        elif nonce.startswith(REJECTED_PREFIX):
            result = PaymentResult(
                success=False,
                amount=amount,
                status="gateway_rejected",
                message="Gateway Rejected: fraud",
                processor=self.name,
            )
        else:
            result = PaymentResult(
                success=True,
                amount=amount,
                transaction_id=transaction_id,
                status="submitted_for_settlement",
                message="Approved",
                processor=self.name,
                details={"processor_response_code": "1000"},
            )

        async with self._lock:
            if result.transaction_id:
                self._transactions[result.transaction_id] = result

        logger.info(
            "Mock sale processed",
            amount=str(amount),
            success=result.success,
            status=result.status,
        )
        return result

    # =========================================
    # Testing utilities
    # =========================================

    @property
    def transactions(self) -> list[PaymentResult]:
        return list(self._transactions.values())

    def set_unavailable(self, reason: Optional[str] = "Gateway unavailable") -> None:
        """Make every following call raise PaymentGatewayError (None restores)."""
        self._unavailable = reason
