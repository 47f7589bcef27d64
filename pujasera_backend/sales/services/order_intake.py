# sales/services/order_intake.py

"""
ORDER INTAKE (APPLICATION SERVICE)

The canonical way a hub (or standalone) order enters the system.

Flow (one atomic unit):
1) validate payload -> JobValidationError
2) repeated idempotency key -> return the order already created for it
3) load hub store -> NotFound
4) hub receipt number (Receipt Sequencer)
5) create the order; its creation fires the distribution trigger
   (sales.signals) inside this same unit, so a failed fan-out leaves no order

Money values are normalised server-side. The subtotal is always the cart
sum; totals default to max(subtotal - discount + tax + service, 0).
"""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal, ROUND_HALF_UP

from django.core.exceptions import ValidationError
from django.db import transaction

from jobs.exceptions import JobValidationError, NotFound, format_serializer_errors
from sales.models import Order
from sales.serializers.order_payload import OrderCreatePayloadSerializer
from sales.services.fees import FeeScheduleConfig
from sales.services.order_splitter import line_total
from store.models import Store
from store.services.receipt_sequencer import next_receipt_number

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")

CATALOG_NOTE = "Pesanan dari Katalog Publik"
CATALOG_STAFF_ID = "catalog-system"


class StoreNotFound(NotFound):
    pass


def _money(v) -> Decimal:
    if v is None or v == "":
        return Decimal("0.00")
    return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _cart_line(item: dict) -> dict:
    return {
        "productId": str(item["productId"]),
        "productName": item.get("productName") or "",
        "quantity": int(item["quantity"]),
        "price": str(_money(item["price"])),
        "notes": item.get("notes") or "",
        "storeId": item.get("storeId") or "",
        "storeName": item.get("storeName") or "",
    }


def compute_total(*, subtotal, discount, tax, service) -> Decimal:
    total = _money(subtotal) - _money(discount) + _money(tax) + _money(service)
    return max(total, Decimal("0.00"))


def validate_order_payload(payload) -> dict:
    serializer = OrderCreatePayloadSerializer(data=payload or {})
    if not serializer.is_valid():
        raise JobValidationError(
            "Data pesanan tidak lengkap: " + format_serializer_errors(serializer.errors)
        )
    return serializer.validated_data


class OrderIntake:
    def __init__(self, fee_schedule: FeeScheduleConfig | None = None):
        self.fee_schedule = fee_schedule or FeeScheduleConfig.from_model()

    @transaction.atomic
    def create_hub_order(self, payload: dict, *, idempotency_key: str | None = None) -> Order:
        data = validate_order_payload(payload)

        key = (idempotency_key or data.get("orderId") or "").strip() or None
        if key:
            existing = Order.objects.filter(idempotency_key=key).first()
            if existing is not None:
                logger.info(
                    "Order already created for idempotency key",
                    extra={"idempotency_key": key, "order_id": existing.pk},
                )
                return existing

        try:
            hub = Store.objects.get(pk=data["pujaseraId"])
        except (Store.DoesNotExist, ValueError, ValidationError):
            raise StoreNotFound("Pujasera tidak ditemukan.")

        cart = [_cart_line(item) for item in data["cart"]]
        # the hub subtotal is always the cart sum, so sub-order subtotals add up to it
        subtotal = _money(sum((line_total(i) for i in cart), Decimal("0")))
        if data.get("subtotal") is not None and _money(data["subtotal"]) != subtotal:
            logger.warning(
                "Client subtotal differs from cart; using cart sum",
                extra={"client_subtotal": str(_money(data["subtotal"])), "cart_subtotal": str(subtotal)},
            )
        tax = _money(data.get("taxAmount"))
        service = _money(data.get("serviceFeeAmount"))
        discount = _money(data.get("discountAmount"))
        total = (
            _money(data["totalAmount"])
            if data.get("totalAmount") is not None
            else compute_total(subtotal=subtotal, discount=discount, tax=tax, service=service)
        )

        customer = data.get("customer") or {}
        is_from_catalog = bool(data.get("isFromCatalog"))

        order = Order(
            id=uuid.uuid4().hex,
            store=hub,
            receipt_number=next_receipt_number(hub.pk),
            customer_id=(customer.get("id") or "").strip() or Order.GUEST_CUSTOMER_ID,
            customer_name=(customer.get("name") or "").strip() or "Guest",
            staff_id=(data.get("staffId") or "").strip() or CATALOG_STAFF_ID,
            items=cart,
            subtotal=subtotal,
            tax_amount=tax,
            service_fee_amount=service,
            discount_amount=discount,
            total_amount=total,
            payment_method=(data.get("paymentMethod") or "").strip(),
            points_earned=int(data.get("pointsEarned") or 0),
            points_redeemed=int(data.get("pointsToRedeem") or 0),
            status=Order.STATUS_PROCESSING,
            table_id=(data.get("tableId") or "").strip(),
            is_from_catalog=is_from_catalog,
            pujasera_group_slug=hub.pujasera_group_slug,
            notes=CATALOG_NOTE if is_from_catalog else "",
            idempotency_key=key,
        )
        # read by the distribution trigger
        order._fee_schedule = self.fee_schedule
        order.save(force_insert=True)

        logger.info(
            "Hub order created",
            extra={"order_id": order.pk, "store_id": str(hub.pk), "receipt_number": order.receipt_number},
        )
        return Order.objects.get(pk=order.pk)
