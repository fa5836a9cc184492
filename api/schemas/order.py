"""
Order, checkout and payment schemas.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from api.schemas.catalog import ProductOut
from core.storage import OrderStatus
from services.orders import OrderDetail


class BuyerOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: str


class OrderOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    products: list[ProductOut] = Field(default_factory=list)
    payment: dict[str, Any] = Field(default_factory=dict)
    buyer: Optional[BuyerOut] = None
    status: OrderStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_detail(cls, detail: OrderDetail) -> "OrderOut":
        order = detail.order
        return cls(
            id=order.id,
            products=[ProductOut.from_record(p) for p in detail.products],
            payment=order.payment,
            buyer=BuyerOut(id=detail.buyer.id, name=detail.buyer.name) if detail.buyer else None,
            status=order.status,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderStatusRequest(BaseModel):
    status: OrderStatus = Field(
        ...,
        description="New fulfilment status",
        examples=["Shipped"],
    )


class CartItem(BaseModel):
    """A cart entry; only the id is trusted, the rest is what the client cached."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., alias="_id")


class PaymentRequest(BaseModel):
    nonce: str = Field(default="", description="Payment method nonce from the gateway drop-in")
    cart: list[CartItem] = Field(default_factory=list)


class PaymentResponse(BaseModel):
    ok: bool = True
    order_id: str


class ClientTokenResponse(BaseModel):
    client_token: str
