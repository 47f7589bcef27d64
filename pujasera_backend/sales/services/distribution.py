# sales/services/distribution.py

"""
TRANSACTION DISTRIBUTION (FAN-OUT + SETTLEMENT)

Runs once per hub/standalone order, inside the unit that created it.

Read phase (locks everything the write phase branches on):
- the order row (redelivery guard: distributed_at)
- the hub and every tenant store, in pk order
- every stock-tracked product, per owning store
- the customer loyalty record, the table

Write phase:
1) platform fee -> Token Ledger debit on the order's store
2) per tenant: own receipt number, sub-order upsert at
   "<order id>_<tenant id>", tenant stock decrement
3) stock of untagged lines in the order's own store
4) loyalty net adjustment
5) table policy
6) items_status, fee_tokens, distributed_at

Idempotency contract: a sub-order's identity is the composite key above;
re-running the fan-out overwrites a sub-order (keeping its receipt number)
instead of creating a second one.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from jobs.exceptions import JobError, NotFound
from products.services.stock_adjustments import (
    InsufficientStock,
    apply_cart_stock,
    lock_products,
    stock_lines,
)
from sales.models import Order
from sales.services.fees import FeeScheduleConfig, compute_fee
from sales.services.order_splitter import TenantGroup, split, untagged_items
from store.models import Store, Table
from store.services import loyalty, table_state, token_ledger
from store.services.receipt_sequencer import format_receipt_number, next_receipt_number

logger = logging.getLogger(__name__)


class DistributionError(JobError):
    pass


class TenantNotFound(DistributionError, NotFound):
    pass


@dataclass(frozen=True)
class DistributionResult:
    order_id: str
    fee_tokens: Decimal
    sub_order_ids: tuple = ()
    already_distributed: bool = False


@dataclass
class _Plan:
    hub: Store
    groups: dict
    own_items: list
    table: Table | None
    fee: Decimal


def sub_order_id(parent_id, tenant_id) -> str:
    return f"{parent_id}_{tenant_id}"


def canonical_store_id(raw) -> str | None:
    try:
        return str(uuid.UUID(str(raw)))
    except ValueError:
        return None


def _is_tenant_of(store: Store | None, hub: Store) -> bool:
    """A sub-order may only go to a tenant in the ordering hub's group."""
    return (
        store is not None
        and store.kind == Store.KIND_TENANT
        and bool(hub.pujasera_group_slug)
        and store.pujasera_group_slug == hub.pujasera_group_slug
    )


def _check_stock(products: dict, items) -> None:
    for line in stock_lines(items):
        product = products[line.product_id]
        if product.stock < line.quantity:
            raise InsufficientStock(
                f"Stok {product.name} tidak mencukupi: "
                f"tersedia {product.stock}, diminta {line.quantity}"
            )


def _lock_and_check_products(store_id, items) -> None:
    lines = stock_lines(items)
    products = lock_products(store_id, [line.product_id for line in lines])
    _check_stock(products, items)


class TransactionDistributor:
    def __init__(self, fee_schedule: FeeScheduleConfig):
        self.fee_schedule = fee_schedule

    def distribute(self, order: Order) -> DistributionResult:
        with transaction.atomic():
            order = Order.objects.select_for_update().get(pk=order.pk)

            if order.distributed_at is not None:
                logger.info("Order already distributed", extra={"order_id": order.pk})
                return DistributionResult(
                    order_id=order.pk,
                    fee_tokens=order.fee_tokens or Decimal("0"),
                    sub_order_ids=tuple(order.sub_orders.values_list("pk", flat=True)),
                    already_distributed=True,
                )

            plan = self._read_phase(order)
            return self._write_phase(order, plan)

    # --------------------------------------------------
    # READ PHASE
    # --------------------------------------------------

    def _read_phase(self, order: Order) -> _Plan:
        own_store_id = str(order.store_id)
        own_items = untagged_items(order.items)

        groups: dict[str, TenantGroup] = {}
        for raw_id, group in split(order.items).items():
            tenant_id = canonical_store_id(raw_id)
            if tenant_id is None:
                raise TenantNotFound(f"Tenant {group.store_name} ({raw_id}) tidak ditemukan.")
            if tenant_id == own_store_id:
                # lines tagged with the ordering store itself are its own items
                own_items.extend(group.items)
                continue
            groups[tenant_id] = group

        store_ids = sorted({own_store_id, *groups.keys()})
        stores = {
            str(s.pk): s
            for s in Store.objects.select_for_update().filter(pk__in=store_ids).order_by("pk")
        }
        hub = stores[own_store_id]
        for tenant_id, group in groups.items():
            if not _is_tenant_of(stores.get(tenant_id), hub):
                raise TenantNotFound(f"Tenant {group.store_name} ({tenant_id}) tidak ditemukan.")

        for tenant_id, group in groups.items():
            _lock_and_check_products(tenant_id, group.items)
        _lock_and_check_products(own_store_id, own_items)

        if not order.is_guest:
            loyalty.lock_customer(order.customer_id, store=hub)

        table = None
        if order.table_id:
            table = table_state.lock_table(order.table_id, store=hub)

        fee = compute_fee(order.total_amount, self.fee_schedule)
        return _Plan(hub=hub, groups=groups, own_items=own_items, table=table, fee=fee)

    # --------------------------------------------------
    # WRITE PHASE
    # --------------------------------------------------

    def _write_phase(self, order: Order, plan: _Plan) -> DistributionResult:
        if plan.fee > 0:
            token_ledger.debit(plan.hub.pk, plan.fee)

        hub_receipt = format_receipt_number(order.receipt_number)
        sub_ids = []
        items_status = {}

        for tenant_id, group in plan.groups.items():
            sid = sub_order_id(order.pk, tenant_id)
            existing = Order.objects.filter(pk=sid).only("receipt_number").first()
            receipt_number = (
                existing.receipt_number if existing is not None else next_receipt_number(tenant_id)
            )

            Order.objects.update_or_create(
                id=sid,
                defaults={
                    "store_id": tenant_id,
                    "receipt_number": receipt_number,
                    "parent": order,
                    "parent_receipt_number": order.receipt_number,
                    "customer_id": order.customer_id,
                    "customer_name": order.customer_name,
                    "staff_id": order.staff_id,
                    "items": list(group.items),
                    "subtotal": group.subtotal,
                    "total_amount": group.subtotal,
                    "payment_method": order.payment_method,
                    "status": Order.STATUS_PROCESSING,
                    "table_id": order.table_id,
                    "is_from_catalog": order.is_from_catalog,
                    "pujasera_group_slug": plan.hub.pujasera_group_slug,
                    "notes": f"Bagian dari pesanan pujasera #{hub_receipt}",
                },
            )
            apply_cart_stock(tenant_id, group.items)

            sub_ids.append(sid)
            items_status[tenant_id] = Order.STATUS_PROCESSING

        if plan.own_items:
            logger.info(
                "Order lines without tenant kept on the order",
                extra={"order_id": order.pk, "lines": len(plan.own_items)},
            )
            apply_cart_stock(order.store_id, plan.own_items)

        loyalty.adjust_points(
            order.customer_id,
            store=plan.hub,
            earned=order.points_earned,
            redeemed=order.points_redeemed,
        )

        self._apply_table_policy(order, plan.table)

        Order.objects.filter(pk=order.pk).update(
            items_status=items_status,
            fee_tokens=plan.fee,
            distributed_at=timezone.now(),
        )

        logger.info(
            "Order distributed",
            extra={
                "order_id": order.pk,
                "store_id": str(order.store_id),
                "fee_tokens": str(plan.fee),
                "tenants": len(sub_ids),
            },
        )
        return DistributionResult(order_id=order.pk, fee_tokens=plan.fee, sub_order_ids=tuple(sub_ids))

    def _apply_table_policy(self, order: Order, table: Table | None) -> None:
        if table is None:
            return

        # deferred-pay catalog order: the table only learns its order id
        if order.is_from_catalog and order.payment_method == Order.PAYMENT_PAY_AT_CASHIER:
            table_state.attach_order(table, order.pk)
            return

        if order.payment_method == Order.PAYMENT_UNPAID or order.status == Order.STATUS_UNPAID:
            return

        if table.is_virtual:
            table_state.clear(table)
            return

        table_state.occupy(
            table,
            table_state.order_snapshot(
                items=order.items,
                total_amount=order.total_amount,
                transaction_id=order.pk,
                order_time=order.created_at,
            ),
        )
