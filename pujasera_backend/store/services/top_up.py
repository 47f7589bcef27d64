# store/services/top_up.py

"""
TOKEN TOP-UP REQUESTS

submit  -> pending (creation signal notifies the platform admin group)
approve -> completed + tokens credited through the token ledger
reject  -> rejected, balance untouched

approve/reject notify the requesting admin (if they have a WhatsApp
number) and the admin group.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from jobs.exceptions import JobError, NotFound
from jobs.services.queue import enqueue_admin_group_notification, enqueue_notification
from jobs.services.whatsapp import format_whatsapp_number
from store.models import Store, TopUpRequest
from store.services import token_ledger

logger = logging.getLogger(__name__)


class TopUpError(JobError):
    pass


class TopUpNotFound(TopUpError, NotFound):
    pass


class TopUpAlreadyProcessed(TopUpError):
    pass


def format_token_amount(value) -> str:
    """id-ID grouping: 1500000 -> "1.500.000", 2.5 -> "2,5"."""
    value = Decimal(str(value or 0)).normalize()
    text = f"{value:,f}"
    return text.translate(str.maketrans(",.", ".,"))


def submit_top_up(*, store: Store, requested_by, amount, tokens_to_add, total_amount,
                  unique_code: int = 0, proof_url: str = "") -> TopUpRequest:
    return TopUpRequest.objects.create(
        store=store,
        requested_by=requested_by,
        amount=amount,
        tokens_to_add=tokens_to_add,
        unique_code=unique_code,
        total_amount=total_amount,
        proof_url=proof_url or "",
    )


def _lock_pending(request_id) -> TopUpRequest:
    try:
        req = (
            TopUpRequest.objects.select_for_update()
            .select_related("store", "requested_by")
            .get(pk=request_id)
        )
    except (TopUpRequest.DoesNotExist, ValueError, ValidationError):
        raise TopUpNotFound(f"Top-up request {request_id} not found")

    if req.status != TopUpRequest.STATUS_PENDING:
        raise TopUpAlreadyProcessed(f"Top-up request {req.pk} is already {req.status}")
    return req


def _requester(req: TopUpRequest):
    """(display name, whatsapp) of the requesting admin."""
    user = req.requested_by
    if user is None:
        return "Pelanggan", ""
    profile = getattr(user, "staff_profile", None)
    if profile is not None:
        return profile.name or user.display_name or "Pelanggan", profile.whatsapp
    return user.display_name or "Pelanggan", ""


def _notify_processed(req: TopUpRequest):
    name, whatsapp = _requester(req)
    amount = format_token_amount(req.tokens_to_add)
    store_name = req.store.name

    if req.status == TopUpRequest.STATUS_COMPLETED:
        customer_message = (
            f"*Top-up Disetujui!*\n\nHalo {name},\n"
            f"Permintaan top-up Anda untuk toko *{store_name}* telah disetujui.\n\n"
            f"Sejumlah *{amount} token* telah ditambahkan ke saldo Anda.\n\nTerima kasih!"
        )
        admin_message = (
            f"*Top-up Disetujui*\n\nPermintaan dari: *{store_name}*\n"
            f"Jumlah: *{amount} token*\n\nSaldo toko telah ditambahkan."
        )
    else:
        customer_message = (
            f"*Top-up Ditolak*\n\nHalo {name},\n"
            f"Permintaan top-up Anda untuk toko *{store_name}* sejumlah {amount} token "
            f"telah ditolak.\n\nSilakan periksa bukti transfer Anda dan coba lagi."
        )
        admin_message = (
            f"*Top-up Ditolak*\n\nPermintaan dari: *{store_name}*\n"
            f"Jumlah: *{amount} token*\n\nTidak ada perubahan pada saldo toko."
        )

    if whatsapp:
        enqueue_notification(format_whatsapp_number(whatsapp), customer_message)
    else:
        logger.warning(
            "Top-up requester has no WhatsApp number",
            extra={"top_up_id": str(req.pk), "store_id": str(req.store_id)},
        )
    enqueue_admin_group_notification(admin_message)


@transaction.atomic
def approve_top_up(request_id) -> TopUpRequest:
    req = _lock_pending(request_id)

    token_ledger.credit(req.store_id, req.tokens_to_add)
    req.status = TopUpRequest.STATUS_COMPLETED
    req.processed_at = timezone.now()
    req.save(update_fields=["status", "processed_at"])

    _notify_processed(req)
    return req


@transaction.atomic
def reject_top_up(request_id) -> TopUpRequest:
    req = _lock_pending(request_id)

    req.status = TopUpRequest.STATUS_REJECTED
    req.processed_at = timezone.now()
    req.save(update_fields=["status", "processed_at"])

    _notify_processed(req)
    return req
