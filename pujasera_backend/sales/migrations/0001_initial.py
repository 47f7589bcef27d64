"""
MIGRATION: CREATE Order (hub orders and tenant sub-orders)

Constraints:
- receipt numbers unique per store
- idempotency key unique when present
"""

from __future__ import annotations

from decimal import Decimal

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("store", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.CharField(editable=False, max_length=120, primary_key=True, serialize=False)),
                ("receipt_number", models.PositiveIntegerField()),
                ("customer_id", models.CharField(default="N/A", max_length=64)),
                ("customer_name", models.CharField(default="Guest", max_length=255)),
                ("staff_id", models.CharField(blank=True, default="", max_length=64)),
                ("items", models.JSONField(default=list)),
                ("subtotal", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("tax_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                (
                    "service_fee_amount",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14),
                ),
                ("discount_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("total_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("payment_method", models.CharField(blank=True, default="", max_length=32)),
                ("points_earned", models.PositiveIntegerField(default=0)),
                ("points_redeemed", models.PositiveIntegerField(default=0)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("processing", "Diproses"),
                            ("ready", "Siap Diambil"),
                            ("completed", "Selesai"),
                            ("paid", "Lunas"),
                            ("unpaid", "Belum Dibayar"),
                            ("cancelled", "Dibatalkan"),
                        ],
                        default="processing",
                        max_length=16,
                    ),
                ),
                ("items_status", models.JSONField(blank=True, default=dict)),
                ("parent_receipt_number", models.PositiveIntegerField(blank=True, null=True)),
                ("table_id", models.CharField(blank=True, default="", max_length=64)),
                ("is_from_catalog", models.BooleanField(default=False)),
                ("pujasera_group_slug", models.SlugField(blank=True, default="", max_length=120)),
                ("notes", models.TextField(blank=True, default="")),
                ("idempotency_key", models.CharField(blank=True, max_length=128, null=True, unique=True)),
                ("fee_tokens", models.DecimalField(blank=True, decimal_places=6, max_digits=18, null=True)),
                ("distributed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sub_orders",
                        to="sales.order",
                    ),
                ),
                (
                    "store",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to="store.store",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.AddConstraint(
            model_name="order",
            constraint=models.UniqueConstraint(
                fields=("store", "receipt_number"),
                name="uniq_order_receipt_per_store",
            ),
        ),
        migrations.AddIndex(
            model_name="order",
            index=models.Index(fields=["store", "created_at"], name="sales_order_store_created_idx"),
        ),
        migrations.AddIndex(
            model_name="order",
            index=models.Index(fields=["status"], name="sales_order_status_idx"),
        ),
    ]
