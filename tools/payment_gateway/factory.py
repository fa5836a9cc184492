"""
Payment gateway factory.

Creates the gateway configured by ``payment_backend``.
"""

from typing import TYPE_CHECKING

from core.logging import get_logger
from tools.payment_gateway.base import PaymentGateway


if TYPE_CHECKING:
    from core.config import Settings


logger = get_logger(__name__)


def create_payment_gateway(settings: "Settings") -> PaymentGateway:
    backend = settings.payment_backend.lower()

    if backend == "mock":
        from tools.payment_gateway.mock_gateway import MockPaymentGateway

        logger.info("Using MockPaymentGateway")
        return MockPaymentGateway()

    elif backend == "braintree":
        from tools.payment_gateway.braintree_gateway import BraintreePaymentGateway

        logger.info(
            "Using BraintreePaymentGateway",
            environment=settings.braintree_environment,
        )
        return BraintreePaymentGateway(
            merchant_id=settings.braintree_merchant_id,
            public_key=settings.braintree_public_key,
            private_key=settings.braintree_private_key,
            environment=settings.braintree_environment,
        )

    raise ValueError(f"Unsupported payment backend: {backend}")
