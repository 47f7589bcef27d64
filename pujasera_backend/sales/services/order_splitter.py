# sales/services/order_splitter.py

"""
ORDER SPLITTER

Groups a flat cart into per-tenant item groups.

- A line belongs to a tenant when it carries both storeId and storeName.
- Untagged lines are left out of the result (they stay on the hub order).
- subtotal = sum(price * quantity) per group, no extra rounding.
- Tenants keep first-seen cart order.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class TenantGroup:
    store_id: str
    store_name: str
    items: tuple
    subtotal: Decimal


def line_total(item: dict) -> Decimal:
    price = Decimal(str(item.get("price") or 0))
    quantity = int(item.get("quantity") or 0)
    return price * quantity


def tenant_tag(item: dict):
    store_id = str(item.get("storeId") or "").strip()
    store_name = str(item.get("storeName") or "").strip()
    if not store_id or not store_name:
        return None
    return store_id, store_name


def split(cart_items) -> dict[str, TenantGroup]:
    grouped: dict[str, dict] = {}
    for item in cart_items or []:
        tag = tenant_tag(item)
        if tag is None:
            continue
        store_id, store_name = tag
        group = grouped.setdefault(store_id, {"store_name": store_name, "items": []})
        group["items"].append(item)

    return {
        store_id: TenantGroup(
            store_id=store_id,
            store_name=group["store_name"],
            items=tuple(group["items"]),
            subtotal=sum((line_total(i) for i in group["items"]), Decimal("0")),
        )
        for store_id, group in grouped.items()
    }


def untagged_items(cart_items) -> list[dict]:
    return [item for item in cart_items or [] if tenant_tag(item) is None]
