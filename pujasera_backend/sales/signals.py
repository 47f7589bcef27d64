# sales/signals.py

"""
DISTRIBUTION TRIGGER

Creating a top-level order fans it out synchronously, inside the creating
transaction: if distribution fails, the order insert rolls back with it.
Sub-orders (parent set) and fixture loads (raw) are ignored.
"""

from __future__ import annotations

from django.db.models.signals import post_save
from django.dispatch import receiver

from sales.models import Order
from sales.services.distribution import TransactionDistributor
from sales.services.fees import FeeScheduleConfig


@receiver(post_save, sender=Order, dispatch_uid="sales_distribute_new_order")
def distribute_new_order(sender, instance: Order, created: bool, raw: bool = False, **kwargs):
    if not created or raw or instance.parent_id is not None:
        return

    schedule = getattr(instance, "_fee_schedule", None) or FeeScheduleConfig.from_model()
    TransactionDistributor(schedule).distribute(instance)
