"""
Abstract base class for payment gateway clients.

This defines the contract that every gateway implementation follows,
whether the offline sandbox or a real processor such as Braintree.

Design principles:
- Nonce based: the browser tokenizes the card, the server only sees a nonce
- Async-first: All operations are coroutines
- Result objects: Return structured data, not SDK objects
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional


def to_amount(value: float | Decimal) -> Decimal:
    """Round a price total to cents."""
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


@dataclass
class PaymentResult:
    """
    Outcome of a sale.

    Stored verbatim on the order as its ``payment`` document.
    """
    success: bool
    amount: Decimal
    transaction_id: Optional[str] = None
    status: Optional[str] = None
    message: Optional[str] = None
    processor: str = "unknown"
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "amount": str(self.amount),
            "transaction_id": self.transaction_id,
            "status": self.status,
            "message": self.message,
            "processor": self.processor,
            "details": self.details,
        }


class PaymentGateway(ABC):
    """
    Abstract interface for payment gateways.

    Usage:
        gateway = MockPaymentGateway()

        # Hand a client token to the browser drop-in
        token = await gateway.generate_client_token()

        # Charge the nonce the drop-in returns
        result = await gateway.sale(to_amount(42.5), nonce)
        if result.success:
            ...
    """

    name: str = "unknown"

    @abstractmethod
    async def generate_client_token(self) -> str:
        """
        Create a token the browser uses to initialise the payment UI.

        Raises:
            PaymentGatewayError: If the gateway is unreachable
        """
        pass

    @abstractmethod
    async def sale(self, amount: Decimal, nonce: str) -> PaymentResult:
        """
        Charge ``amount`` against the payment method behind ``nonce``
        and submit it for settlement.

        A declined card is a normal result (success=False), not an error.

        Raises:
            PaymentGatewayError: If the gateway could not process the request
        """
        pass


class PaymentGatewayError(Exception):
    """Base exception for gateway failures (network, credentials, SDK errors)."""
    pass
