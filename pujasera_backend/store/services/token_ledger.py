# store/services/token_ledger.py

"""
TOKEN LEDGER

Atomic mutator for a store's prepaid platform-token balance.

Rules:
- Runs inside the caller's atomic unit (nested atomic = savepoint).
- The balance check happens under the store row lock, in the same unit as
  the debit; a debit that would go negative is rejected wholesale.
- Only token_balance is written (queryset update, no save()).
"""

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction
from django.db.models import F

from jobs.exceptions import InsufficientBalance as InsufficientBalanceBase
from jobs.exceptions import JobError, NotFound
from store.models import Store

logger = logging.getLogger(__name__)

TOKEN_PLACES = Decimal("0.000001")


class TokenLedgerError(JobError):
    pass


class StoreNotFound(TokenLedgerError, NotFound):
    pass


class InsufficientBalance(TokenLedgerError, InsufficientBalanceBase):
    pass


def to_tokens(value) -> Decimal:
    if value is None:
        return Decimal("0").quantize(TOKEN_PLACES)
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(TOKEN_PLACES, rounding=ROUND_HALF_UP)


def _validate_amount(amount) -> Decimal:
    amount = to_tokens(amount)
    if amount < 0:
        raise ValueError("Token amount must be >= 0")
    return amount


def _lock_store(store_id) -> Store:
    try:
        return (
            Store.objects.select_for_update()
            .only("id", "name", "token_balance")
            .get(pk=store_id)
        )
    except Store.DoesNotExist:
        raise StoreNotFound(f"Store {store_id} not found")


@transaction.atomic
def debit(store_id, amount) -> Decimal:
    """
    Debit `amount` tokens from the store. Returns the new balance.

    Raises InsufficientBalance when balance < amount at lock time.
    """
    amount = _validate_amount(amount)
    store = _lock_store(store_id)

    if store.token_balance < amount:
        raise InsufficientBalance(
            f"Saldo token {store.name} tidak mencukupi: "
            f"balance {store.token_balance}, required {amount}"
        )

    Store.objects.filter(pk=store.pk).update(token_balance=F("token_balance") - amount)
    new_balance = store.token_balance - amount

    logger.info(
        "Token debit",
        extra={"store_id": str(store.pk), "amount": str(amount), "balance": str(new_balance)},
    )
    return new_balance


@transaction.atomic
def credit(store_id, amount) -> Decimal:
    """Unconditional credit (cancellation refund, top-up, registration bonus)."""
    amount = _validate_amount(amount)
    store = _lock_store(store_id)

    Store.objects.filter(pk=store.pk).update(token_balance=F("token_balance") + amount)
    new_balance = store.token_balance + amount

    logger.info(
        "Token credit",
        extra={"store_id": str(store.pk), "amount": str(amount), "balance": str(new_balance)},
    )
    return new_balance
