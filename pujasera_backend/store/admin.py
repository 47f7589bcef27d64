# store/admin.py

from django.contrib import admin

from store.models import Customer, FeeSchedule, Store, Table, TopUpRequest


@admin.register(Store)
class StoreAdmin(admin.ModelAdmin):
    list_display = ("name", "kind", "pujasera_group_slug", "token_balance", "transaction_counter", "created_at")
    list_filter = ("kind", "is_pos_enabled", "daily_summary_enabled")
    search_fields = ("name", "pujasera_group_slug", "catalog_slug")
    filter_horizontal = ("admins",)
    # Balance and counter only move through the ledger and the sequencer.
    readonly_fields = ("token_balance", "transaction_counter", "first_transaction_at")


@admin.register(FeeSchedule)
class FeeScheduleAdmin(admin.ModelAdmin):
    list_display = ("key", "fee_percentage", "min_fee_rp", "max_fee_rp", "token_value_rp", "updated_at")


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("name", "store", "phone", "loyalty_points", "member_tier")
    list_filter = ("member_tier",)
    search_fields = ("name", "phone")


@admin.register(Table)
class TableAdmin(admin.ModelAdmin):
    list_display = ("name", "store", "status", "is_virtual", "capacity")
    list_filter = ("status", "is_virtual")


@admin.register(TopUpRequest)
class TopUpRequestAdmin(admin.ModelAdmin):
    list_display = ("store", "tokens_to_add", "total_amount", "status", "requested_at", "processed_at")
    list_filter = ("status",)
    readonly_fields = ("status", "processed_at")
