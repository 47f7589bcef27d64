from .order import OrderSerializer
from .order_payload import CartItemSerializer, OrderCreatePayloadSerializer

__all__ = ["OrderSerializer", "CartItemSerializer", "OrderCreatePayloadSerializer"]
