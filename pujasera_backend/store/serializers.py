# store/serializers.py

from decimal import Decimal

from rest_framework import serializers

from store.models import Customer, Store, Table, TopUpRequest


class StoreSerializer(serializers.ModelSerializer):
    class Meta:
        model = Store
        fields = [
            "id",
            "name",
            "location",
            "kind",
            "pujasera_group_slug",
            "pujasera_name",
            "catalog_slug",
            "token_balance",
            "transaction_counter",
            "first_transaction_at",
            "is_pos_enabled",
            "daily_summary_enabled",
            "created_at",
        ]
        read_only_fields = fields


class CustomerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = ["id", "store", "name", "phone", "loyalty_points", "member_tier", "created_at"]
        read_only_fields = ["id", "loyalty_points", "member_tier", "created_at"]


class TableSerializer(serializers.ModelSerializer):
    class Meta:
        model = Table
        fields = ["id", "store", "name", "capacity", "status", "current_order", "is_virtual", "updated_at"]
        read_only_fields = ["id", "status", "current_order", "updated_at"]


class TopUpRequestSerializer(serializers.ModelSerializer):
    store_name = serializers.CharField(source="store.name", read_only=True)

    class Meta:
        model = TopUpRequest
        fields = [
            "id",
            "store",
            "store_name",
            "requested_by",
            "amount",
            "tokens_to_add",
            "unique_code",
            "total_amount",
            "proof_url",
            "status",
            "requested_at",
            "processed_at",
        ]
        read_only_fields = fields


class TopUpCreateSerializer(serializers.Serializer):
    """
    amount is in rupiah; tokens are derived from the fee schedule token value
    by the view. total_amount = amount + unique_code (bank transfer matching).
    """

    store = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("1"))
    unique_code = serializers.IntegerField(required=False, min_value=0, max_value=999, default=0)
    proof_url = serializers.URLField(required=False, allow_blank=True, default="")
