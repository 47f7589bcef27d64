# sales/admin.py

from django.contrib import admin

from sales.models import Order


class SubOrderInline(admin.TabularInline):
    model = Order
    fk_name = "parent"
    extra = 0
    can_delete = False
    fields = ("id", "store", "receipt_number", "status", "total_amount")
    readonly_fields = fields
    show_change_link = True


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "store",
        "receipt_number",
        "status",
        "total_amount",
        "fee_tokens",
        "parent",
        "created_at",
    )
    list_filter = ("status", "is_from_catalog", "payment_method")
    search_fields = ("id", "customer_name", "customer_id", "pujasera_group_slug")
    raw_id_fields = ("store", "parent")
    inlines = [SubOrderInline]

    # Settlement fields are written by the distribution pipeline only.
    readonly_fields = ("items_status", "fee_tokens", "distributed_at", "idempotency_key")
