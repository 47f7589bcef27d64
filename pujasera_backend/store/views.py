# store/views.py

"""
STORE API

Tables:
    GET/POST /api/store/tables/
    POST     /api/store/tables/<id>/reserve/
    POST     /api/store/tables/<id>/clean/    awaiting_cleanup -> available
    POST     /api/store/tables/<id>/clear/    reset from any state

Top-ups:
    GET/POST /api/store/top-ups/
    POST     /api/store/top-ups/<id>/approve/   platform admins only
    POST     /api/store/top-ups/<id>/reject/    platform admins only
"""

from __future__ import annotations

from django.db import transaction
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from jobs.api_errors import error_response, job_error_response
from jobs.exceptions import JobError
from sales.services.fees import FeeScheduleConfig
from store.models import Customer, Table, TopUpRequest
from store.serializers import (
    CustomerSerializer,
    TableSerializer,
    TopUpCreateSerializer,
    TopUpRequestSerializer,
)
from store.services import table_state
from store.services.token_ledger import to_tokens
from store.services.top_up import approve_top_up, reject_top_up, submit_top_up
from users.permissions import IsPlatformAdmin, IsStaff, IsStoreAdmin, stores_for_user


def _forbidden_store():
    return error_response(
        code="FORBIDDEN_STORE",
        message="You cannot manage this store.",
        http_status=status.HTTP_403_FORBIDDEN,
    )


# ============================================================
# TABLES
# ============================================================


class TableViewSet(
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = TableSerializer
    permission_classes = [IsAuthenticated, IsStaff]
    filterset_fields = ["store", "status", "is_virtual"]

    def get_queryset(self):
        return Table.objects.filter(store__in=stores_for_user(self.request.user)).order_by("name")

    def get_permissions(self):
        if self.action == "create":
            return [IsAuthenticated(), IsStoreAdmin()]
        return super().get_permissions()

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        store = serializer.validated_data["store"]
        if not stores_for_user(request.user).filter(pk=store.pk).exists():
            return _forbidden_store()
        table = serializer.save()
        return Response(TableSerializer(table).data, status=status.HTTP_201_CREATED)

    def _transition(self, operation):
        table = self.get_object()
        try:
            with transaction.atomic():
                locked = table_state.lock_table(table.pk)
                result = operation(locked)
        except JobError as exc:
            return job_error_response(exc)

        if result is None:
            return Response({"id": str(table.pk), "deleted": True}, status=status.HTTP_200_OK)
        return Response(TableSerializer(result).data, status=status.HTTP_200_OK)

    @extend_schema(request=None, responses={200: TableSerializer})
    @action(detail=True, methods=["post"], url_path="reserve")
    def reserve(self, request, pk=None):
        return self._transition(table_state.reserve)

    @extend_schema(request=None, responses={200: TableSerializer})
    @action(detail=True, methods=["post"], url_path="clean")
    def clean(self, request, pk=None):
        def finish_cleanup(table):
            if table.status != Table.STATUS_AWAITING_CLEANUP:
                raise table_state.InvalidTableTransition(
                    f"Table {table.name} is not awaiting cleanup"
                )
            return table_state.clear(table)

        return self._transition(finish_cleanup)

    @extend_schema(request=None, responses={200: TableSerializer})
    @action(detail=True, methods=["post"], url_path="clear")
    def clear(self, request, pk=None):
        return self._transition(table_state.clear)


# ============================================================
# CUSTOMERS
# ============================================================


class CustomerViewSet(
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = CustomerSerializer
    permission_classes = [IsAuthenticated, IsStaff]
    filterset_fields = ["store", "member_tier"]

    def get_queryset(self):
        return Customer.objects.filter(store__in=stores_for_user(self.request.user)).order_by("name")

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        if not stores_for_user(request.user).filter(pk=serializer.validated_data["store"].pk).exists():
            return _forbidden_store()
        customer = serializer.save()
        return Response(CustomerSerializer(customer).data, status=status.HTTP_201_CREATED)


# ============================================================
# TOP-UPS
# ============================================================


class TopUpRequestViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = TopUpRequestSerializer
    permission_classes = [IsAuthenticated, IsStoreAdmin]
    filterset_fields = ["store", "status"]

    def get_queryset(self):
        qs = TopUpRequest.objects.select_related("store")
        user = self.request.user
        if user.is_staff or user.is_superuser:
            return qs
        return qs.filter(store__in=stores_for_user(user))

    def get_permissions(self):
        if self.action in ("approve", "reject"):
            return [IsAuthenticated(), IsPlatformAdmin()]
        return super().get_permissions()

    @extend_schema(request=TopUpCreateSerializer, responses={201: TopUpRequestSerializer})
    def create(self, request, *args, **kwargs):
        command = TopUpCreateSerializer(data=request.data)
        command.is_valid(raise_exception=True)
        data = command.validated_data

        store = stores_for_user(request.user).filter(pk=data["store"]).first()
        if store is None:
            return _forbidden_store()

        schedule = FeeScheduleConfig.from_model()
        amount = data["amount"]
        req = submit_top_up(
            store=store,
            requested_by=request.user,
            amount=amount,
            tokens_to_add=to_tokens(amount / schedule.token_value_rp),
            total_amount=amount + data["unique_code"],
            unique_code=data["unique_code"],
            proof_url=data["proof_url"],
        )
        return Response(TopUpRequestSerializer(req).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: TopUpRequestSerializer})
    @action(detail=True, methods=["post"], url_path="approve")
    def approve(self, request, pk=None):
        try:
            req = approve_top_up(pk)
        except JobError as exc:
            return job_error_response(exc)
        return Response(TopUpRequestSerializer(req).data, status=status.HTTP_200_OK)

    @extend_schema(request=None, responses={200: TopUpRequestSerializer})
    @action(detail=True, methods=["post"], url_path="reject")
    def reject(self, request, pk=None):
        try:
            req = reject_top_up(pk)
        except JobError as exc:
            return job_error_response(exc)
        return Response(TopUpRequestSerializer(req).data, status=status.HTTP_200_OK)
