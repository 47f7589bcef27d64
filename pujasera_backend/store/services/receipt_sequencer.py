# store/services/receipt_sequencer.py

"""
RECEIPT SEQUENCER

Per-store monotonic counter behind human-facing receipt numbers.

- Increment-and-read under the store row lock, inside the caller's atomic
  unit: concurrent callers always get distinct numbers.
- Gaps are acceptable (rolled-back units), duplicates are not.
"""

from __future__ import annotations

from django.db import transaction
from django.utils import timezone

from store.models import Store
from store.services.token_ledger import StoreNotFound


@transaction.atomic
def next_receipt_number(store_id) -> int:
    try:
        store = (
            Store.objects.select_for_update()
            .only("id", "transaction_counter", "first_transaction_at")
            .get(pk=store_id)
        )
    except Store.DoesNotExist:
        raise StoreNotFound(f"Store {store_id} not found")

    number = store.transaction_counter + 1
    updates = {"transaction_counter": number}
    if store.first_transaction_at is None:
        updates["first_transaction_at"] = timezone.now()

    Store.objects.filter(pk=store.pk).update(**updates)
    return number


def format_receipt_number(number) -> str:
    return f"{int(number):06d}"
