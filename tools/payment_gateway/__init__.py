"""
Payment gateway clients used at checkout.

Exports the abstract interface and implementations.
"""

from tools.payment_gateway.base import PaymentGateway, PaymentGatewayError, PaymentResult, to_amount
from tools.payment_gateway.factory import create_payment_gateway
from tools.payment_gateway.mock_gateway import MockPaymentGateway

__all__ = [
    "PaymentGateway",
    "PaymentGatewayError",
    "PaymentResult",
    "MockPaymentGateway",
    "create_payment_gateway",
    "to_amount",
]
