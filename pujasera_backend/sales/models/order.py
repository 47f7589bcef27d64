# sales/models/order.py

from decimal import Decimal

from django.db import models


class Order(models.Model):
    """
    Financial record of a sale (hub order or tenant sub-order).

    IDENTITY:
    - hub / standalone orders: random hex id
    - tenant sub-orders: "<hub order id>_<tenant store id>"
      A redelivered distribution overwrites the sub-order at that id
      instead of creating a second one.

    GUARANTEES:
    - receipt_number is unique within a store (Receipt Sequencer)
    - items_status is only populated on hub orders
    - fee_tokens records the platform fee actually debited, so a cancellation
      credits back exactly that amount
    """

    STATUS_PROCESSING = "processing"
    STATUS_READY = "ready"
    STATUS_COMPLETED = "completed"
    STATUS_PAID = "paid"
    STATUS_UNPAID = "unpaid"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PROCESSING, "Diproses"),
        (STATUS_READY, "Siap Diambil"),
        (STATUS_COMPLETED, "Selesai"),
        (STATUS_PAID, "Lunas"),
        (STATUS_UNPAID, "Belum Dibayar"),
        (STATUS_CANCELLED, "Dibatalkan"),
    ]

    GUEST_CUSTOMER_ID = "N/A"

    PAYMENT_PAY_AT_CASHIER = "kasir"
    PAYMENT_UNPAID = "Belum Dibayar"

    id = models.CharField(primary_key=True, max_length=120, editable=False)

    store = models.ForeignKey("store.Store", on_delete=models.PROTECT, related_name="orders")
    receipt_number = models.PositiveIntegerField()

    customer_id = models.CharField(max_length=64, default=GUEST_CUSTOMER_ID)
    customer_name = models.CharField(max_length=255, default="Guest")
    staff_id = models.CharField(max_length=64, blank=True, default="")

    # [{productId, productName, quantity, price, notes, storeId, storeName}]
    items = models.JSONField(default=list)

    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    tax_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    service_fee_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    discount_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    payment_method = models.CharField(max_length=32, blank=True, default="")
    points_earned = models.PositiveIntegerField(default=0)
    points_redeemed = models.PositiveIntegerField(default=0)

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PROCESSING)
    items_status = models.JSONField(default=dict, blank=True)

    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.CASCADE,
        related_name="sub_orders",
    )
    parent_receipt_number = models.PositiveIntegerField(null=True, blank=True)

    table_id = models.CharField(max_length=64, blank=True, default="")
    is_from_catalog = models.BooleanField(default=False)
    pujasera_group_slug = models.SlugField(max_length=120, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    idempotency_key = models.CharField(max_length=128, unique=True, null=True, blank=True)
    fee_tokens = models.DecimalField(max_digits=18, decimal_places=6, null=True, blank=True)
    distributed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["store", "receipt_number"],
                name="uniq_order_receipt_per_store",
            ),
        ]
        indexes = [
            models.Index(fields=["store", "created_at"], name="sales_order_store_created_idx"),
            models.Index(fields=["status"], name="sales_order_status_idx"),
        ]

    @property
    def is_sub_order(self) -> bool:
        return self.parent_id is not None

    @property
    def is_guest(self) -> bool:
        return (self.customer_id or self.GUEST_CUSTOMER_ID) == self.GUEST_CUSTOMER_ID

    def __str__(self):
        return f"#{self.receipt_number:06d} @ {self.store_id} [{self.status}]"
