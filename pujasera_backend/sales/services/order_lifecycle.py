"""
ORDER LIFECYCLE DOMAIN RULES

The only allowed status transitions for Order, plus the operations that
move an order through them (payment, kitchen ready, cancellation).

Cancellation reverses settlement in one atomic unit:
- credit back the recorded fee_tokens (never a recomputed fee)
- revert loyalty (redeemed - earned, clamped at zero)
- restore stock of every sub-order and of the order's own lines
- cancel sub-orders, release the table
"""

from __future__ import annotations

import logging

from django.db import transaction

from jobs.exceptions import JobError, NotFound
from products.services.stock_adjustments import ProductNotFound, increment_stock, stock_lines
from sales.models import Order
from sales.services.distribution import canonical_store_id, sub_order_id
from sales.services.order_splitter import tenant_tag
from store.models import Table
from store.services import loyalty, table_state, token_ledger

logger = logging.getLogger(__name__)

# ============================================================
# DOMAIN ERRORS
# ============================================================


class OrderLifecycleError(JobError):
    pass


class OrderNotFound(OrderLifecycleError, NotFound):
    pass


class InvalidOrderTransition(OrderLifecycleError):
    pass


# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    Order.STATUS_CANCELLED,
}

ALLOWED_TRANSITIONS = {
    Order.STATUS_PROCESSING: {
        Order.STATUS_READY,
        Order.STATUS_PAID,
        Order.STATUS_UNPAID,
        Order.STATUS_COMPLETED,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_UNPAID: {
        Order.STATUS_PROCESSING,
        Order.STATUS_PAID,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_READY: {
        Order.STATUS_PAID,
        Order.STATUS_COMPLETED,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_PAID: {
        Order.STATUS_READY,
        Order.STATUS_COMPLETED,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_COMPLETED: {
        Order.STATUS_CANCELLED,
    },
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, order: Order, target_status: str):
    if not can_transition(from_status=order.status, to_status=target_status):
        raise InvalidOrderTransition(
            f"Order {order.pk} cannot transition from "
            f"'{order.status}' to '{target_status}'"
        )


def _lock_order(order_id) -> Order:
    try:
        return Order.objects.select_for_update().get(pk=order_id)
    except Order.DoesNotExist:
        raise OrderNotFound(f"Order {order_id} not found")


def _order_table(order: Order):
    if not order.table_id:
        return None
    try:
        return table_state.lock_table(order.table_id, store=order.store_id)
    except table_state.TableNotFound:
        # virtual tables may already be gone
        return None


def _table_holds(table: Table, order: Order) -> bool:
    current = table.current_order or {}
    return current.get("transactionId") == str(order.pk)


# ============================================================
# OPERATIONS
# ============================================================


@transaction.atomic
def mark_order_paid(order_id, *, payment_method: str = "") -> Order:
    order = _lock_order(order_id)
    validate_transition(order=order, target_status=Order.STATUS_PAID)

    order.status = Order.STATUS_PAID
    if payment_method:
        order.payment_method = payment_method
    order.save(update_fields=["status", "payment_method", "updated_at"])

    table = _order_table(order)
    if table is not None and _table_holds(table, order):
        if table.is_virtual:
            table_state.clear(table)
        elif table.status == Table.STATUS_OCCUPIED:
            table_state.mark_awaiting_cleanup(table)

    logger.info("Order paid", extra={"order_id": order.pk, "payment_method": order.payment_method})
    return order


@transaction.atomic
def mark_sub_order_ready(parent_id, tenant_id) -> Order:
    """
    Kitchen flow: one tenant finished its part of a hub order.
    The hub order turns ready once every tenant is ready.
    """
    parent = _lock_order(parent_id)
    sub = _lock_order(sub_order_id(parent.pk, tenant_id))

    validate_transition(order=sub, target_status=Order.STATUS_READY)
    sub.status = Order.STATUS_READY
    sub.save(update_fields=["status", "updated_at"])

    items_status = dict(parent.items_status or {})
    items_status[str(sub.store_id)] = Order.STATUS_READY
    parent.items_status = items_status

    update_fields = ["items_status", "updated_at"]
    all_ready = all(s == Order.STATUS_READY for s in items_status.values())
    if all_ready and parent.status == Order.STATUS_PROCESSING:
        parent.status = Order.STATUS_READY
        update_fields.append("status")
    parent.save(update_fields=update_fields)

    return sub


def _line_store_id(item):
    tag = tenant_tag(item)
    return canonical_store_id(tag[0]) if tag else None


def _restore_stock(store_id, items) -> None:
    for line in stock_lines(items):
        try:
            increment_stock(store_id, line.product_id, line.quantity)
        except ProductNotFound:
            logger.warning(
                "Product gone, stock not restored",
                extra={"store_id": str(store_id), "product_id": line.product_id},
            )


@transaction.atomic
def cancel_order(order_id) -> Order:
    order = _lock_order(order_id)
    if order.is_sub_order:
        raise InvalidOrderTransition("Sub-orders are cancelled through their hub order")
    validate_transition(order=order, target_status=Order.STATUS_CANCELLED)

    if order.fee_tokens:
        token_ledger.credit(order.store_id, order.fee_tokens)

    loyalty.revert_points(
        order.customer_id,
        store=order.store_id,
        earned=order.points_earned,
        redeemed=order.points_redeemed,
    )

    tenant_ids = set()
    for sub in Order.objects.select_for_update().filter(parent=order).order_by("pk"):
        tenant_ids.add(str(sub.store_id))
        _restore_stock(sub.store_id, sub.items)
        sub.status = Order.STATUS_CANCELLED
        sub.save(update_fields=["status", "updated_at"])

    own_items = [item for item in order.items if _line_store_id(item) not in tenant_ids]
    _restore_stock(order.store_id, own_items)

    table = _order_table(order)
    if table is not None and _table_holds(table, order):
        table_state.clear(table)

    order.status = Order.STATUS_CANCELLED
    order.items_status = {k: Order.STATUS_CANCELLED for k in (order.items_status or {})}
    order.save(update_fields=["status", "items_status", "updated_at"])

    logger.info(
        "Order cancelled",
        extra={"order_id": order.pk, "fee_refunded": str(order.fee_tokens or 0)},
    )
    return order
