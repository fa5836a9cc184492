"""
Checkout and order management.

Checkout charges the stored price of every cart item through the
payment gateway and records an order only when the sale is approved.
"""

from dataclasses import dataclass, field
from typing import Optional

from core.logging import get_logger
from core.storage import BaseStore, OrderRecord, OrderStatus, ProductRecord, UserRecord
from services.errors import NotFound, PaymentDeclined, ValidationFailed
from tools.payment_gateway import PaymentGateway, to_amount


logger = get_logger(__name__)


@dataclass
class OrderDetail:
    """An order with buyer and products resolved."""
    order: OrderRecord
    buyer: Optional[UserRecord]
    products: list[ProductRecord] = field(default_factory=list)


class OrderService:

    def __init__(self, store: BaseStore, payment_gateway: PaymentGateway):
        self._orders = store.orders
        self._products = store.products
        self._users = store.users
        self._gateway = payment_gateway

    async def client_token(self) -> str:
        return await self._gateway.generate_client_token()

    async def checkout(self, buyer: UserRecord, nonce: str, product_ids: list[str]) -> OrderRecord:
        """
        Charge the cart and create an order.

        A product appearing twice in the cart is charged twice.

        Raises:
            ValidationFailed: Empty cart, missing nonce or unknown product
            PaymentDeclined: The gateway refused the sale
            PaymentGatewayError: The gateway could not be reached
        """
        if not nonce:
            raise ValidationFailed("Payment nonce is required")
        if not product_ids:
            raise ValidationFailed("Cart is empty")

        known = {p.id: p for p in await self._products.get_many(list(set(product_ids)))}
        missing = [pid for pid in product_ids if pid not in known]
        if missing:
            raise ValidationFailed(f"Product not found: {missing[0]}")

        amount = to_amount(sum(known[pid].price for pid in product_ids))
        log = logger.bind(buyer_id=buyer.id, items=len(product_ids), amount=str(amount))

        result = await self._gateway.sale(amount, nonce)
        if not result.success:
            log.info("Payment declined", status=result.status)
            raise PaymentDeclined(result.message or "Payment declined")

        order = await self._orders.create(
            OrderRecord(
                buyer_id=buyer.id,
                product_ids=list(product_ids),
                payment=result.to_dict(),
            )
        )
        log.info("Order placed", order_id=order.id, transaction_id=result.transaction_id)
        return order

    async def _with_details(self, orders: list[OrderRecord]) -> list[OrderDetail]:
        product_ids = {pid for o in orders for pid in o.product_ids}
        buyer_ids = {o.buyer_id for o in orders}
        products = {p.id: p for p in await self._products.get_many(list(product_ids))}
        buyers = {u.id: u for u in await self._users.get_many(list(buyer_ids))}

        return [
            OrderDetail(
                order=o,
                buyer=buyers.get(o.buyer_id),
                # Deleted products drop out of the order view
                products=[products[pid] for pid in o.product_ids if pid in products],
            )
            for o in orders
        ]

    async def for_buyer(self, buyer: UserRecord) -> list[OrderDetail]:
        return await self._with_details(await self._orders.list_by_buyer(buyer.id))

    async def all_orders(self) -> list[OrderDetail]:
        return await self._with_details(await self._orders.list_all())

    async def update_status(self, order_id: str, status: OrderStatus) -> OrderDetail:
        updated = await self._orders.update_status(order_id, status)
        if updated is None:
            raise NotFound("Order not found")

        logger.info("Order status changed", order_id=order_id, status=status.value)
        return (await self._with_details([updated]))[0]
