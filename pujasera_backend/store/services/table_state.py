# store/services/table_state.py

"""
TABLE STATE MACHINE

available -> reserved | occupied
reserved  -> occupied
occupied  -> awaiting_cleanup | occupied (follow-up order replaces the snapshot)
awaiting_cleanup -> available
any -> available (manual reset)

Clearing a virtual table deletes it instead of resetting it.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from jobs.exceptions import JobError, NotFound
from store.models import Table

# ============================================================
# DOMAIN ERRORS
# ============================================================


class TableStateError(JobError):
    pass


class TableNotFound(TableStateError, NotFound):
    pass


class InvalidTableTransition(TableStateError):
    pass


# ============================================================
# STATE DEFINITIONS
# ============================================================

ALLOWED_TRANSITIONS = {
    Table.STATUS_AVAILABLE: {Table.STATUS_RESERVED, Table.STATUS_OCCUPIED},
    Table.STATUS_RESERVED: {Table.STATUS_OCCUPIED},
    Table.STATUS_OCCUPIED: {Table.STATUS_OCCUPIED, Table.STATUS_AWAITING_CLEANUP},
    Table.STATUS_AWAITING_CLEANUP: {Table.STATUS_AVAILABLE},
}


def can_transition(*, from_status: str, to_status: str) -> bool:
    if to_status == Table.STATUS_AVAILABLE:
        return True
    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, table: Table, target_status: str):
    if not can_transition(from_status=table.status, to_status=target_status):
        raise InvalidTableTransition(
            f"Table {table.name} cannot transition from "
            f"'{table.status}' to '{target_status}'"
        )


# ============================================================
# OPERATIONS
# ============================================================


def lock_table(table_id, *, store=None) -> Table:
    qs = Table.objects.select_for_update()
    if store is not None:
        qs = qs.filter(store=store)
    try:
        return qs.get(pk=table_id)
    except (Table.DoesNotExist, ValueError, ValidationError):
        raise TableNotFound(f"Table {table_id} not found")


def order_snapshot(*, items, total_amount, transaction_id, order_time=None) -> dict:
    return {
        "items": list(items or []),
        "totalAmount": str(total_amount),
        "orderTime": (order_time or timezone.now()).isoformat(),
        "transactionId": str(transaction_id),
    }


def _set_status(table: Table, target_status: str, **fields) -> Table:
    validate_transition(table=table, target_status=target_status)
    table.status = target_status
    for name, value in fields.items():
        setattr(table, name, value)
    table.save(update_fields=["status", *fields.keys(), "updated_at"])
    return table


def reserve(table: Table) -> Table:
    return _set_status(table, Table.STATUS_RESERVED)


def occupy(table: Table, snapshot: dict) -> Table:
    return _set_status(table, Table.STATUS_OCCUPIED, current_order=snapshot)


def attach_order(table: Table, order_id) -> Table:
    """
    Link a deferred-pay catalog order to its table without changing status.
    """
    current = dict(table.current_order or {})
    current["transactionId"] = str(order_id)
    table.current_order = current
    table.save(update_fields=["current_order", "updated_at"])
    return table


def mark_awaiting_cleanup(table: Table) -> Table:
    return _set_status(table, Table.STATUS_AWAITING_CLEANUP)


@transaction.atomic
def clear(table: Table):
    """
    Virtual table: deleted, returns None.
    Physical table: status=available, current_order=None.
    """
    if table.is_virtual:
        table.delete()
        return None
    return _set_status(table, Table.STATUS_AVAILABLE, current_order=None)
