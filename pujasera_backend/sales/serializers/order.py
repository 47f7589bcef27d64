# sales/serializers/order.py

from rest_framework import serializers

from sales.models import Order


class OrderSerializer(serializers.ModelSerializer):
    """
    Read serializer for hub orders and tenant sub-orders.
    """

    store_name = serializers.CharField(source="store.name", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "store",
            "store_name",
            "receipt_number",
            "customer_id",
            "customer_name",
            "staff_id",
            "items",
            "subtotal",
            "tax_amount",
            "service_fee_amount",
            "discount_amount",
            "total_amount",
            "payment_method",
            "points_earned",
            "points_redeemed",
            "status",
            "items_status",
            "parent",
            "parent_receipt_number",
            "table_id",
            "is_from_catalog",
            "pujasera_group_slug",
            "notes",
            "fee_tokens",
            "distributed_at",
            "created_at",
        ]
        read_only_fields = fields


class OrderPaySerializer(serializers.Serializer):
    payment_method = serializers.CharField(required=False, allow_blank=True, max_length=32)


class KitchenReadySerializer(serializers.Serializer):
    parent_id = serializers.CharField(max_length=120)
    tenant_id = serializers.CharField(max_length=64)


class FeePreviewQuerySerializer(serializers.Serializer):
    total = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0)
