# jobs/views.py

"""
QUEUE API

POST /api/jobs/        enqueue an order-create or notification-send job (202)
GET  /api/jobs/<id>/   poll the entry status

Payloads are validated here with the same serializers the handlers use, so
obviously malformed jobs never reach the queue.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from jobs.api_errors import error_response
from jobs.exceptions import format_serializer_errors
from jobs.models import JobType, QueueEntry
from jobs.serializers import (
    EnqueueJobSerializer,
    NotificationPayloadSerializer,
    QueueEntrySerializer,
)
from jobs.services.queue import enqueue
from sales.serializers.order_payload import OrderCreatePayloadSerializer
from sales.services.distribution import canonical_store_id
from users.permissions import IsStaff, IsStoreAdmin, stores_for_user

PAYLOAD_SERIALIZERS = {
    JobType.ORDER_CREATE.value: OrderCreatePayloadSerializer,
    JobType.NOTIFICATION_SEND.value: NotificationPayloadSerializer,
}


class QueueEntryViewSet(
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = QueueEntrySerializer
    permission_classes = [IsAuthenticated, IsStaff]

    def get_queryset(self):
        return QueueEntry.objects.all()

    @extend_schema(request=EnqueueJobSerializer, responses={202: QueueEntrySerializer})
    def create(self, request, *args, **kwargs):
        command = EnqueueJobSerializer(data=request.data)
        command.is_valid(raise_exception=True)
        job_type = command.validated_data["type"]
        payload = command.validated_data["payload"]

        if job_type == JobType.NOTIFICATION_SEND and not IsStoreAdmin().has_permission(request, self):
            return error_response(
                code="FORBIDDEN",
                message="Only store admins can send notifications.",
                http_status=status.HTTP_403_FORBIDDEN,
            )

        payload_serializer = PAYLOAD_SERIALIZERS[job_type](data=payload)
        if not payload_serializer.is_valid():
            return error_response(
                code="VALIDATION_ERROR",
                message=format_serializer_errors(payload_serializer.errors),
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        if job_type == JobType.ORDER_CREATE:
            store_id = canonical_store_id(payload_serializer.validated_data["pujaseraId"])
            if store_id is None or not stores_for_user(request.user).filter(pk=store_id).exists():
                return error_response(
                    code="FORBIDDEN_STORE",
                    message="You cannot create orders for this store.",
                    http_status=status.HTTP_403_FORBIDDEN,
                )

        # The raw payload is queued; the handler re-validates it.
        entry = enqueue(job_type, payload)
        return Response(QueueEntrySerializer(entry).data, status=status.HTTP_202_ACCEPTED)
