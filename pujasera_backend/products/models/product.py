# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class Product(models.Model):
    """
    A sellable menu item owned by one tenant (or standalone) store.

    STOCK MODEL:
    - stock is a plain non-negative counter on the product
    - only products.services.stock_adjustments mutates it
    - cart lines whose productId starts with "manual-" are ad-hoc items and
      have no Product row
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    store = models.ForeignKey(
        "store.Store",
        on_delete=models.CASCADE,
        related_name="products",
    )

    name = models.CharField(max_length=255, db_index=True)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    stock = models.PositiveIntegerField(default=0)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["store", "name"], name="products_store_name_idx"),
        ]

    def clean(self):
        if self.unit_price is None or Decimal(self.unit_price) < 0:
            raise ValidationError("Unit price cannot be negative")

    def __str__(self):
        return f"{self.name} ({self.stock})"
