"""
MIGRATION: CREATE Store, FeeSchedule, Customer, Table, TopUpRequest

Constraints:
- token balance and loyalty points never negative
- catalog slug unique when present
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Store",
            fields=[
                (
                    "id",
                    models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False),
                ),
                ("name", models.CharField(max_length=255)),
                ("location", models.CharField(blank=True, default="", max_length=255)),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("hub", "Pujasera hub"),
                            ("tenant", "Pujasera tenant"),
                            ("standalone", "Standalone store"),
                        ],
                        default="standalone",
                        max_length=16,
                    ),
                ),
                ("pujasera_group_slug", models.SlugField(blank=True, default="", max_length=120)),
                ("pujasera_name", models.CharField(blank=True, default="", max_length=255)),
                ("catalog_slug", models.SlugField(blank=True, max_length=120, null=True)),
                (
                    "token_balance",
                    models.DecimalField(
                        decimal_places=6,
                        default=Decimal("0"),
                        help_text="Prepaid platform tokens (Pradana Token).",
                        max_digits=18,
                    ),
                ),
                ("transaction_counter", models.PositiveIntegerField(default=0)),
                ("first_transaction_at", models.DateTimeField(blank=True, null=True)),
                ("referral_code", models.CharField(blank=True, default="", max_length=64)),
                ("is_pos_enabled", models.BooleanField(default=True)),
                ("daily_summary_enabled", models.BooleanField(default=True)),
                ("last_inactivity_followup_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "admins",
                    models.ManyToManyField(
                        blank=True,
                        related_name="administered_stores",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.AddConstraint(
            model_name="store",
            constraint=models.UniqueConstraint(
                condition=models.Q(("catalog_slug__isnull", False), models.Q(("catalog_slug", ""), _negated=True)),
                fields=("catalog_slug",),
                name="uniq_store_catalog_slug_when_present",
            ),
        ),
        migrations.AddConstraint(
            model_name="store",
            constraint=models.CheckConstraint(
                condition=models.Q(("token_balance__gte", 0)),
                name="store_token_balance_non_negative",
            ),
        ),
        migrations.CreateModel(
            name="FeeSchedule",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(default="transactionFees", max_length=64, unique=True)),
                ("fee_percentage", models.DecimalField(decimal_places=6, default=Decimal("0.005"), max_digits=8)),
                ("min_fee_rp", models.DecimalField(decimal_places=2, default=Decimal("500"), max_digits=14)),
                ("max_fee_rp", models.DecimalField(decimal_places=2, default=Decimal("2500"), max_digits=14)),
                ("token_value_rp", models.DecimalField(decimal_places=2, default=Decimal("1000"), max_digits=14)),
                (
                    "new_pujasera_bonus_tokens",
                    models.DecimalField(decimal_places=6, default=Decimal("0"), max_digits=18),
                ),
                (
                    "new_tenant_bonus_tokens",
                    models.DecimalField(decimal_places=6, default=Decimal("0"), max_digits=18),
                ),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Fee schedule",
            },
        ),
        migrations.CreateModel(
            name="Customer",
            fields=[
                (
                    "id",
                    models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False),
                ),
                ("name", models.CharField(max_length=255)),
                ("phone", models.CharField(blank=True, default="", max_length=32)),
                ("loyalty_points", models.PositiveIntegerField(default=0)),
                (
                    "member_tier",
                    models.CharField(
                        choices=[("bronze", "Bronze"), ("silver", "Silver"), ("gold", "Gold")],
                        default="bronze",
                        max_length=16,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "store",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="customers",
                        to="store.store",
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.AddConstraint(
            model_name="customer",
            constraint=models.CheckConstraint(
                condition=models.Q(("loyalty_points__gte", 0)),
                name="customer_loyalty_points_non_negative",
            ),
        ),
        migrations.CreateModel(
            name="Table",
            fields=[
                (
                    "id",
                    models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False),
                ),
                ("name", models.CharField(max_length=64)),
                ("capacity", models.PositiveIntegerField(default=2)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("available", "Tersedia"),
                            ("reserved", "Dipesan"),
                            ("occupied", "Terisi"),
                            ("awaiting_cleanup", "Menunggu Dibersihkan"),
                        ],
                        default="available",
                        max_length=20,
                    ),
                ),
                ("current_order", models.JSONField(blank=True, null=True)),
                ("is_virtual", models.BooleanField(default=False)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "store",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tables",
                        to="store.store",
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="TopUpRequest",
            fields=[
                (
                    "id",
                    models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False),
                ),
                ("amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("tokens_to_add", models.DecimalField(decimal_places=6, max_digits=18)),
                ("unique_code", models.PositiveIntegerField(default=0)),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("proof_url", models.URLField(blank=True, default="")),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("completed", "Completed"), ("rejected", "Rejected")],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("requested_at", models.DateTimeField(auto_now_add=True)),
                ("processed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "requested_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="top_up_requests",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "store",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="top_up_requests",
                        to="store.store",
                    ),
                ),
            ],
            options={
                "ordering": ["-requested_at"],
            },
        ),
        migrations.AddIndex(
            model_name="topuprequest",
            index=models.Index(fields=["status", "requested_at"], name="store_topup_status_idx"),
        ),
    ]
