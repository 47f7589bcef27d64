# sales/views/kitchen.py

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from jobs.api_errors import error_response, job_error_response
from jobs.exceptions import JobError
from sales.serializers.order import KitchenReadySerializer, OrderSerializer
from sales.services.distribution import canonical_store_id
from sales.services.order_lifecycle import mark_sub_order_ready
from users.permissions import IsStaff, stores_for_user


class KitchenReadyView(APIView):
    """
    POST /api/sales/kitchen/ready/  {"parent_id": ..., "tenant_id": ...}

    A tenant kitchen marks its part of a hub order as ready for pickup.
    """

    permission_classes = [IsAuthenticated, IsStaff]

    @extend_schema(request=KitchenReadySerializer, responses={200: OrderSerializer})
    def post(self, request):
        serializer = KitchenReadySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        tenant_id = canonical_store_id(serializer.validated_data["tenant_id"])

        if tenant_id is None or not stores_for_user(request.user).filter(pk=tenant_id).exists():
            return error_response(
                code="FORBIDDEN_STORE",
                message="You cannot update orders of this store.",
                http_status=status.HTTP_403_FORBIDDEN,
            )

        try:
            sub = mark_sub_order_ready(serializer.validated_data["parent_id"], tenant_id)
        except JobError as exc:
            return job_error_response(exc)

        return Response(OrderSerializer(sub).data, status=status.HTTP_200_OK)
