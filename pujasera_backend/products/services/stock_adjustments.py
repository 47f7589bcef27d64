# products/services/stock_adjustments.py

"""
STOCK ADJUSTMENTS SERVICE

Rules:
- stock never goes below zero: decrements are a conditional UPDATE
  (stock >= qty) so a lost race fails instead of overselling
- quantities are positive integers
- "manual-" cart lines are not stock-tracked
"""

from __future__ import annotations

from dataclasses import dataclass

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F

from jobs.exceptions import JobError, NotFound
from products.models import Product

MANUAL_PRODUCT_PREFIX = "manual-"


class StockAdjustmentError(JobError):
    """Domain error for adjustment failures."""


class ProductNotFound(StockAdjustmentError, NotFound):
    pass


class InsufficientStock(StockAdjustmentError):
    pass


@dataclass(frozen=True)
class StockLine:
    product_id: str
    quantity: int


def _to_int_qty(value) -> int:
    if isinstance(value, bool):
        # bool is an int subclass
        raise StockAdjustmentError("quantity must be an integer")
    try:
        qty = int(value)
    except (TypeError, ValueError):
        raise StockAdjustmentError("quantity must be an integer")
    if qty <= 0:
        raise StockAdjustmentError("quantity must be greater than 0")
    return qty


def is_stock_tracked(product_id) -> bool:
    return bool(product_id) and not str(product_id).startswith(MANUAL_PRODUCT_PREFIX)


def stock_lines(items) -> list[StockLine]:
    """
    Collapse cart items into one line per tracked product (summed quantity),
    in first-seen order.
    """
    totals: dict[str, int] = {}
    for item in items or []:
        product_id = str(item.get("productId") or "")
        if not is_stock_tracked(product_id):
            continue
        totals[product_id] = totals.get(product_id, 0) + _to_int_qty(item.get("quantity"))
    return [StockLine(product_id=pid, quantity=qty) for pid, qty in totals.items()]


def lock_products(store_id, product_ids) -> dict[str, Product]:
    """
    Lock the store's products (pk order) and fail on any missing id.
    """
    ids = sorted({str(pid) for pid in product_ids})
    if not ids:
        return {}
    try:
        products = list(
            Product.objects.select_for_update().filter(store_id=store_id, pk__in=ids).order_by("pk")
        )
    except (ValueError, ValidationError):
        # a non-uuid product id
        raise ProductNotFound(f"Product not found in store {store_id}")
    found = {str(p.pk): p for p in products}
    missing = [pid for pid in ids if pid not in found]
    if missing:
        raise ProductNotFound(f"Product {missing[0]} not found in store {store_id}")
    return found


@transaction.atomic
def decrement_stock(store_id, product_id, quantity) -> None:
    qty = _to_int_qty(quantity)
    try:
        updated = Product.objects.filter(
            pk=product_id, store_id=store_id, stock__gte=qty
        ).update(stock=F("stock") - qty)
    except (ValueError, ValidationError):
        raise ProductNotFound(f"Product {product_id} not found in store {store_id}")

    if updated:
        return

    product = Product.objects.filter(pk=product_id, store_id=store_id).only("name", "stock").first()
    if product is None:
        raise ProductNotFound(f"Product {product_id} not found in store {store_id}")
    raise InsufficientStock(
        f"Stok {product.name} tidak mencukupi: tersedia {product.stock}, diminta {qty}"
    )


@transaction.atomic
def increment_stock(store_id, product_id, quantity) -> None:
    qty = _to_int_qty(quantity)
    try:
        updated = Product.objects.filter(pk=product_id, store_id=store_id).update(
            stock=F("stock") + qty
        )
    except (ValueError, ValidationError):
        updated = 0
    if not updated:
        raise ProductNotFound(f"Product {product_id} not found in store {store_id}")


@transaction.atomic
def apply_cart_stock(store_id, items) -> list[StockLine]:
    """Decrement stock for every tracked cart line of one store."""
    lines = stock_lines(items)
    for line in lines:
        decrement_stock(store_id, line.product_id, line.quantity)
    return lines


@transaction.atomic
def restore_cart_stock(store_id, items) -> list[StockLine]:
    lines = stock_lines(items)
    for line in lines:
        increment_stock(store_id, line.product_id, line.quantity)
    return lines
