# jobs/handlers/order_create.py

from __future__ import annotations

import logging

from sales.services.order_intake import OrderIntake

logger = logging.getLogger(__name__)


def handle_order_create(entry, context) -> None:
    """
    Hand the payload to the order intake. The idempotency key is the
    payload's orderId when the producer supplied one, else the entry id,
    so a redelivered entry finds the order it already created.
    """
    payload = entry.payload or {}
    key = str(payload.get("orderId") or entry.pk)

    order = OrderIntake(context.fee_schedule).create_hub_order(payload, idempotency_key=key)

    logger.info(
        "order-create handled",
        extra={"entry_id": str(entry.pk), "order_id": order.pk, "receipt_number": order.receipt_number},
    )
