# store/services/loyalty.py

"""
LOYALTY ADJUSTER

Per-customer point balance, netted per order (earned - redeemed) and applied
atomically with the order write. Points never go negative.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F

from jobs.exceptions import JobError, NotFound
from store.models import Customer

logger = logging.getLogger(__name__)

GUEST_CUSTOMER_ID = "N/A"

# (minimum points, tier), highest first
TIER_THRESHOLDS = (
    (2000, Customer.TIER_GOLD),
    (500, Customer.TIER_SILVER),
    (0, Customer.TIER_BRONZE),
)


class LoyaltyError(JobError):
    pass


class CustomerNotFound(LoyaltyError, NotFound):
    pass


class InsufficientPoints(LoyaltyError):
    pass


def is_guest(customer_id) -> bool:
    return not customer_id or str(customer_id).strip() in {"", GUEST_CUSTOMER_ID}


def member_tier_for(points: int) -> str:
    for minimum, tier in TIER_THRESHOLDS:
        if points >= minimum:
            return tier
    return Customer.TIER_BRONZE


def lock_customer(customer_id, store=None) -> Customer:
    qs = Customer.objects.select_for_update()
    if store is not None:
        qs = qs.filter(store=store)
    try:
        return qs.get(pk=customer_id)
    except (Customer.DoesNotExist, ValueError, ValidationError):
        # ValueError: customer id is not a valid uuid
        raise CustomerNotFound(f"Customer {customer_id} not found")


@transaction.atomic
def adjust_points(customer_id, *, store=None, earned: int = 0, redeemed: int = 0):
    """
    Apply net = earned - redeemed to the customer's balance.

    Guests are skipped (returns None). Returns the new balance otherwise.
    """
    if is_guest(customer_id):
        return None

    earned = int(earned or 0)
    redeemed = int(redeemed or 0)
    if earned < 0 or redeemed < 0:
        raise LoyaltyError("Points earned/redeemed must be >= 0")

    customer = lock_customer(customer_id, store)
    net = earned - redeemed
    new_points = customer.loyalty_points + net

    if new_points < 0:
        raise InsufficientPoints(
            f"Customer {customer.pk} has {customer.loyalty_points} points, "
            f"cannot redeem {redeemed}"
        )

    Customer.objects.filter(pk=customer.pk).update(
        loyalty_points=F("loyalty_points") + net,
        member_tier=member_tier_for(new_points),
    )
    return new_points


@transaction.atomic
def revert_points(customer_id, *, store=None, earned: int = 0, redeemed: int = 0):
    """
    Undo an order's point effect (cancellation): balance += redeemed - earned,
    clamped at zero when the earned points were already spent.
    """
    if is_guest(customer_id):
        return None

    customer = lock_customer(customer_id, store)
    target = customer.loyalty_points + int(redeemed or 0) - int(earned or 0)

    if target < 0:
        logger.warning(
            "Loyalty revert clamped at zero",
            extra={"customer_id": str(customer.pk), "points": customer.loyalty_points},
        )
        target = 0

    Customer.objects.filter(pk=customer.pk).update(
        loyalty_points=target,
        member_tier=member_tier_for(target),
    )
    return target
