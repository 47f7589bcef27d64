# jobs/serializers.py

from rest_framework import serializers

from jobs.models import JobType, QueueEntry


class NotificationPayloadSerializer(serializers.Serializer):
    to = serializers.CharField(max_length=255)
    message = serializers.CharField()
    isGroup = serializers.BooleanField(required=False, default=False)


class EnqueueJobSerializer(serializers.Serializer):
    """
    Producer command: POST /api/jobs/

    Registration jobs are produced by the registration endpoints only.
    """

    ENQUEUEABLE = (JobType.ORDER_CREATE, JobType.NOTIFICATION_SEND)

    type = serializers.ChoiceField(choices=[(t.value, t.label) for t in ENQUEUEABLE])
    payload = serializers.DictField()


class QueueEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = QueueEntry
        fields = ["id", "type", "status", "error", "created_at", "processed_at"]
        read_only_fields = fields
