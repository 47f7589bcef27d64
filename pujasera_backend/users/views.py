# users/views.py
"""
USER AUTH VIEWS

- Pujasera / tenant registration (AllowAny) only validates and enqueues;
  the identity, store and profile are created by the queue processor.
- Passwords are hashed here; the queue payload never carries the raw value.
- Registration is throttled with its own scope.
"""

from __future__ import annotations

from django.contrib.auth.hashers import make_password
from drf_spectacular.utils import extend_schema
from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle, UserRateThrottle
from rest_framework.views import APIView

from jobs.models import JobType
from jobs.serializers import QueueEntrySerializer
from jobs.services.queue import enqueue

from .serializers import MeSerializer, PujaseraRegisterSerializer, TenantRegisterSerializer


class MeUserThrottle(UserRateThrottle):
    scope = "user"


class _RegistrationView(generics.GenericAPIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "registration"

    job_type = None

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        payload = dict(serializer.validated_data)
        payload["passwordHash"] = make_password(payload.pop("password"))
        entry = enqueue(self.job_type, payload)

        return Response(
            {
                "message": "Pendaftaran sedang diproses.",
                "job": QueueEntrySerializer(entry).data,
            },
            status=status.HTTP_202_ACCEPTED,
        )


@extend_schema(responses={202: QueueEntrySerializer})
class PujaseraRegisterView(_RegistrationView):
    serializer_class = PujaseraRegisterSerializer
    job_type = JobType.PUJASERA_REGISTRATION


@extend_schema(responses={202: QueueEntrySerializer})
class TenantRegisterView(_RegistrationView):
    serializer_class = TenantRegisterSerializer
    job_type = JobType.TENANT_REGISTRATION


class MeView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_classes = [MeUserThrottle]

    @extend_schema(responses={200: MeSerializer})
    def get(self, request):
        return Response(MeSerializer(request.user).data, status=status.HTTP_200_OK)
