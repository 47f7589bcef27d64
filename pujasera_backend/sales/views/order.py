# sales/views/order.py

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from jobs.api_errors import job_error_response
from jobs.exceptions import JobError
from sales.models import Order
from sales.serializers.order import OrderPaySerializer, OrderSerializer
from sales.services.order_lifecycle import cancel_order, mark_order_paid
from users.permissions import IsStaff, IsStoreAdmin, stores_for_user


class OrderViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    Orders (READ + PAY + CANCEL).

    - list/retrieve: staff of the owning store (hub staff also see tenants)
    - pay: staff
    - cancel: store admins only
    """

    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated, IsStaff]
    filterset_fields = ["store", "status", "parent"]

    def get_queryset(self):
        return (
            Order.objects.select_related("store")
            .filter(store__in=stores_for_user(self.request.user))
            .order_by("-created_at")
        )

    def get_permissions(self):
        if self.action == "cancel":
            return [IsAuthenticated(), IsStoreAdmin()]
        return super().get_permissions()

    @action(detail=True, methods=["post"], url_path="pay")
    def pay(self, request, pk=None):
        order = self.get_object()
        command = OrderPaySerializer(data=request.data)
        command.is_valid(raise_exception=True)

        try:
            order = mark_order_paid(
                order.pk,
                payment_method=command.validated_data.get("payment_method", ""),
            )
        except JobError as exc:
            return job_error_response(exc)

        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        order = self.get_object()

        try:
            order = cancel_order(order.pk)
        except JobError as exc:
            return job_error_response(exc)

        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)
