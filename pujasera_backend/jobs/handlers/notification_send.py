# jobs/handlers/notification_send.py

from __future__ import annotations

from jobs.exceptions import GatewayError, JobValidationError, format_serializer_errors
from jobs.serializers import NotificationPayloadSerializer
from jobs.services.whatsapp import resolve_recipient


def handle_notification_send(entry, context) -> None:
    serializer = NotificationPayloadSerializer(data=entry.payload or {})
    if not serializer.is_valid():
        raise JobValidationError(
            "Payload is missing 'to' or 'message' field: "
            + format_serializer_errors(serializer.errors)
        )
    data = serializer.validated_data

    if not context.notifications.device_id:
        raise GatewayError("WhatsApp device id is not configured.")

    is_group = data["isGroup"]
    recipient = resolve_recipient(data["to"], is_group, context.notifications)
    context.gateway.send(recipient, data["message"], is_group=is_group)
