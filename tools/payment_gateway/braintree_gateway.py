"""
Braintree payment gateway.

Wraps the synchronous ``braintree`` SDK; calls run in a worker thread so
they do not block the event loop.
"""

import asyncio
from decimal import Decimal

import braintree
from braintree.exceptions.braintree_error import BraintreeError

from core.logging import get_logger
from tools.payment_gateway.base import PaymentGateway, PaymentGatewayError, PaymentResult


logger = get_logger(__name__)


class BraintreePaymentGateway(PaymentGateway):

    name = "braintree"

    def __init__(
        self,
        merchant_id: str,
        public_key: str,
        private_key: str,
        environment: str = "sandbox",
    ):
        if not (merchant_id and public_key and private_key):
            raise PaymentGatewayError("Braintree credentials are not configured")

        env = braintree.Environment.Production if environment == "production" else braintree.Environment.Sandbox
        self._gateway = braintree.BraintreeGateway(
            braintree.Configuration(
                environment=env,
                merchant_id=merchant_id,
                public_key=public_key,
                private_key=private_key,
            )
        )

    async def generate_client_token(self) -> str:
        try:
            return await asyncio.to_thread(self._gateway.client_token.generate)
        except BraintreeError as e:
            logger.error("Braintree client token failed", error=str(e))
            raise PaymentGatewayError(f"Could not generate client token: {e}") from e

    async def sale(self, amount: Decimal, nonce: str) -> PaymentResult:
        request = {
            "amount": str(amount),
            "payment_method_nonce": nonce,
            "options": {"submit_for_settlement": True},
        }
        try:
            result = await asyncio.to_thread(self._gateway.transaction.sale, request)
        except BraintreeError as e:
            logger.error("Braintree sale failed", error=str(e))
            raise PaymentGatewayError(f"Sale request failed: {e}") from e

        transaction = getattr(result, "transaction", None)
        if result.is_success:
            return PaymentResult(
                success=True,
                amount=amount,
                transaction_id=transaction.id,
                status=transaction.status,
                message="Approved",
                processor=self.name,
                details={"processor_response_code": transaction.processor_response_code},
            )

        details = {
            "errors": [
                {"attribute": err.attribute, "code": err.code, "message": err.message}
                for err in result.errors.deep_errors
            ],
        }
        if transaction is not None:
            details["processor_response_code"] = transaction.processor_response_code
        return PaymentResult(
            success=False,
            amount=amount,
            transaction_id=transaction.id if transaction is not None else None,
            status=transaction.status if transaction is not None else "validation_failed",
            message=result.message,
            processor=self.name,
            details=details,
        )
