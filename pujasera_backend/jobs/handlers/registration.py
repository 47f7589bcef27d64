# jobs/handlers/registration.py

"""
REGISTRATION HANDLERS (pujasera hub + tenant)

Saga:
1) create the authentication identity
2) one atomic unit: store + staff profile (+ bonus tokens via the ledger)
3) enqueue welcome + admin-group notifications

If step 2 fails the identity from step 1 is deleted (compensation). A
failed compensation is logged as CompensationFailure and never replaces
the original error.
"""

from __future__ import annotations

import logging
import string

from django.db import transaction
from django.utils.crypto import get_random_string
from django.utils.text import slugify

from jobs.exceptions import (
    CompensationFailure,
    JobValidationError,
    NotFound,
    RegistrationError,
    format_serializer_errors,
)
from jobs.services.queue import enqueue_admin_group_notification, enqueue_notification
from jobs.services.whatsapp import format_whatsapp_number
from store.models import Store
from store.services import token_ledger
from store.services.top_up import format_token_amount
from users.models import StaffProfile, User
from users.serializers import (
    PujaseraRegistrationPayloadSerializer,
    TenantRegistrationPayloadSerializer,
)

logger = logging.getLogger(__name__)


class PujaseraGroupNotFound(NotFound):
    pass


def _validate(serializer_class, payload) -> dict:
    serializer = serializer_class(data=payload or {})
    if not serializer.is_valid():
        raise JobValidationError(
            "Data registrasi tidak lengkap: " + format_serializer_errors(serializer.errors)
        )
    return serializer.validated_data


def make_group_slug(name: str) -> str:
    base = slugify(name or "")[:100] or "pujasera"
    suffix = get_random_string(5, allowed_chars=string.ascii_lowercase + string.digits)
    return f"{base}-{suffix}"


def _compensate(context, identity, entry) -> None:
    try:
        context.identity_provider.delete_identity(identity.uid)
        logger.info(
            "Registration compensated: identity deleted",
            extra={"entry_id": str(entry.pk), "uid": identity.uid},
        )
    except Exception as exc:
        failure = CompensationFailure(f"Failed to clean up orphaned identity {identity.uid}: {exc}")
        logger.error(str(failure), extra={"entry_id": str(entry.pk)}, exc_info=True)


def _run_saga(entry, context, *, email, display_name, password_hash, role, write, label):
    identity = context.identity_provider.create_identity(
        email=email,
        display_name=display_name,
        password_hash=password_hash,
        role=role,
    )
    try:
        with transaction.atomic():
            return write(identity)
    except Exception as exc:
        _compensate(context, identity, entry)
        raise RegistrationError(f"Gagal mendaftarkan {label}: {exc}") from exc


def _create_profile(identity, *, store, name, whatsapp, group_slug) -> StaffProfile:
    user = User.objects.get(pk=identity.uid)
    store.admins.add(user)
    return StaffProfile.objects.create(
        user=user,
        name=name,
        whatsapp=whatsapp,
        store=store,
        pujasera_group_slug=group_slug,
    )


def _grant_bonus(store: Store, bonus) -> None:
    if bonus and bonus > 0:
        token_ledger.credit(store.pk, bonus)


# ============================================================
# PUJASERA (HUB)
# ============================================================


def handle_pujasera_registration(entry, context) -> None:
    data = _validate(PujaseraRegistrationPayloadSerializer, entry.payload)
    bonus = context.fee_schedule.new_pujasera_bonus_tokens
    group_slug = make_group_slug(data["pujaseraName"])

    def write(identity):
        # the hub store shares its admin's identity id
        store = Store.objects.create(
            id=identity.uid,
            name=data["pujaseraName"],
            location=data["pujaseraLocation"],
            kind=Store.KIND_HUB,
            pujasera_group_slug=group_slug,
            pujasera_name=data["pujaseraName"],
            catalog_slug=group_slug,
            referral_code=data.get("referralCode") or "",
        )
        _create_profile(
            identity,
            store=store,
            name=data["adminName"],
            whatsapp=data["whatsapp"],
            group_slug=group_slug,
        )
        _grant_bonus(store, bonus)
        return store

    store = _run_saga(
        entry,
        context,
        email=data["email"],
        display_name=data["adminName"],
        password_hash=data["passwordHash"],
        role=User.ROLE_PUJASERA_ADMIN,
        write=write,
        label="pujasera",
    )

    tokens = format_token_amount(bonus)
    enqueue_notification(
        format_whatsapp_number(data["whatsapp"]),
        f"*Selamat Datang di Chika POS, {data['adminName']}!*\n\n"
        f"Grup Pujasera Anda *\"{data['pujaseraName']}\"* telah berhasil dibuat "
        f"dengan bonus *{tokens} Pradana Token*.\n\n"
        "Silakan login untuk mulai mengelola pujasera Anda.",
    )
    enqueue_admin_group_notification(
        "*PENDAFTARAN PUJASERA BARU*\n\n"
        f"*Pujasera:* {data['pujaseraName']}\n"
        f"*Lokasi:* {data['pujaseraLocation']}\n"
        f"*Admin:* {data['adminName']}\n"
        f"*Email:* {data['email']}\n"
        f"*WhatsApp:* {data['whatsapp']}\n\n"
        f"Bonus {tokens} token telah diberikan."
    )
    logger.info(
        "Pujasera registered",
        extra={"entry_id": str(entry.pk), "store_id": str(store.pk), "slug": group_slug},
    )


# ============================================================
# TENANT
# ============================================================


def handle_tenant_registration(entry, context) -> None:
    data = _validate(TenantRegistrationPayloadSerializer, entry.payload)
    group_slug = data["pujaseraGroupSlug"]

    hub = Store.objects.filter(kind=Store.KIND_HUB, pujasera_group_slug=group_slug).first()
    if hub is None:
        raise PujaseraGroupNotFound("Grup pujasera tidak ditemukan.")

    bonus = context.fee_schedule.new_tenant_bonus_tokens

    def write(identity):
        store = Store.objects.create(
            name=data["storeName"],
            location=hub.location,
            kind=Store.KIND_TENANT,
            pujasera_group_slug=group_slug,
            pujasera_name=hub.name,
        )
        _create_profile(
            identity,
            store=store,
            name=data["adminName"],
            whatsapp=data["whatsapp"],
            group_slug=group_slug,
        )
        _grant_bonus(store, bonus)
        return store

    store = _run_saga(
        entry,
        context,
        email=data["email"],
        display_name=data["adminName"],
        password_hash=data["passwordHash"],
        role=User.ROLE_ADMIN,
        write=write,
        label="tenant",
    )

    tokens = format_token_amount(bonus)
    enqueue_notification(
        format_whatsapp_number(data["whatsapp"]),
        f"*Selamat Datang di Chika POS, {data['adminName']}!*\n\n"
        f"Toko Anda *\"{data['storeName']}\"* telah berhasil terdaftar di pujasera "
        f"*{hub.name}* dengan bonus *{tokens} Pradana Token*.\n\n"
        "Silakan login untuk mulai mengelola toko Anda.",
    )
    enqueue_admin_group_notification(
        "*TENANT BARU BERGABUNG*\n\n"
        f"*Pujasera:* {hub.name}\n"
        f"*Tenant Baru:* {data['storeName']}\n"
        f"*Admin Tenant:* {data['adminName']}\n"
        f"*Email:* {data['email']}\n\n"
        f"Bonus {tokens} token telah diberikan."
    )
    logger.info(
        "Tenant registered",
        extra={"entry_id": str(entry.pk), "store_id": str(store.pk), "hub_id": str(hub.pk)},
    )
