# sales/serializers/order_payload.py

from rest_framework import serializers


class CustomerRefSerializer(serializers.Serializer):
    id = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=64)
    name = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)


class CartItemSerializer(serializers.Serializer):
    productId = serializers.CharField(max_length=64)
    productName = serializers.CharField(required=False, allow_blank=True, default="")
    quantity = serializers.IntegerField(min_value=1)
    price = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True, default="")
    storeId = serializers.CharField(required=False, allow_blank=True, allow_null=True, default="")
    storeName = serializers.CharField(required=False, allow_blank=True, allow_null=True, default="")


class OrderCreatePayloadSerializer(serializers.Serializer):
    """
    Payload of an order-create job (and of the direct POS checkout).

    Does NOT touch the database; existence checks happen in OrderIntake.
    """

    orderId = serializers.CharField(required=False, allow_blank=True, max_length=128)
    pujaseraId = serializers.CharField(max_length=64)
    customer = CustomerRefSerializer()
    cart = CartItemSerializer(many=True, allow_empty=False)

    subtotal = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0, required=False)
    taxAmount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0, default=0)
    serviceFeeAmount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0, default=0)
    discountAmount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0, default=0)
    totalAmount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0, required=False)

    paymentMethod = serializers.CharField(required=False, allow_blank=True, default="", max_length=32)
    staffId = serializers.CharField(required=False, allow_blank=True, allow_null=True, default="")
    pointsEarned = serializers.IntegerField(required=False, min_value=0, default=0)
    pointsToRedeem = serializers.IntegerField(required=False, min_value=0, default=0)
    tableId = serializers.CharField(required=False, allow_blank=True, allow_null=True, default="")
    isFromCatalog = serializers.BooleanField(required=False, default=False)
