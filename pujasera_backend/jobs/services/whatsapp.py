# jobs/services/whatsapp.py
"""
WHATSAPP GATEWAY (WhaCenter-compatible)

Contract:
- POST {BASE_URL}/send       form: device_id, number, message
- POST {BASE_URL}/sendGroup  form: device_id, group,  message
- Success = HTTP 2xx AND body.status != "error"; anything else is a GatewayError
  carrying the provider's reason when one is present.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from django.conf import settings

from jobs.exceptions import GatewayError, JobValidationError

logger = logging.getLogger(__name__)

ADMIN_GROUP_ALIAS = "admin_group"
DEFAULT_BASE_URL = "https://app.whacenter.com/api"


@dataclass(frozen=True)
class NotificationConfig:
    device_id: str = ""
    admin_group: str = ""
    base_url: str = DEFAULT_BASE_URL
    timeout: int = 20

    @classmethod
    def from_settings(cls) -> "NotificationConfig":
        cfg = getattr(settings, "WHATSAPP", {}) or {}
        return cls(
            device_id=(cfg.get("DEVICE_ID") or "").strip(),
            admin_group=(cfg.get("ADMIN_GROUP") or "").strip(),
            base_url=(cfg.get("BASE_URL") or DEFAULT_BASE_URL).strip().rstrip("/"),
            timeout=int(cfg.get("TIMEOUT") or 20),
        )


def format_whatsapp_number(number) -> str:
    """
    Normalise an Indonesian number to the 62-prefixed form.

    "0812-3456" -> "628123456", "8123456" -> "628123456"
    """
    if not number:
        return ""
    digits = re.sub(r"\D", "", str(number))
    if digits.startswith("0"):
        return "62" + digits[1:]
    if digits.startswith("8"):
        return "62" + digits
    return digits


def resolve_recipient(to: str, is_group: bool, config: NotificationConfig) -> str:
    """
    "admin_group" is an alias only for group sends; any other value is used
    literally.
    """
    recipient = config.admin_group if (to == ADMIN_GROUP_ALIAS and is_group) else to
    if not recipient:
        raise JobValidationError(
            f"Recipient is invalid. 'to' field was '{to}' and adminGroup is not set."
        )
    return recipient


def _safe_preview(text: str, limit: int = 300) -> str:
    text = (text or "").strip()
    if len(text) <= limit:
        return text
    return text[:limit] + " ...(truncated)"


def _parse_json(raw: str) -> dict[str, Any]:
    try:
        parsed = json.loads(raw or "")
    except ValueError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


class WhatsAppGateway:
    def __init__(self, config: NotificationConfig):
        self.config = config

    def send(self, recipient: str, message: str, *, is_group: bool = False) -> dict:
        if not self.config.device_id:
            raise GatewayError("WhatsApp device id is not configured.")

        endpoint = "sendGroup" if is_group else "send"
        body = urlencode(
            {
                "device_id": self.config.device_id,
                ("group" if is_group else "number"): recipient,
                "message": message,
            }
        ).encode("utf-8")

        req = Request(
            f"{self.config.base_url}/{endpoint}",
            data=body,
            headers={
                "Content-Type": "application/x-www-form-urlencoded",
                "Accept": "application/json",
            },
            method="POST",
        )

        try:
            with urlopen(req, timeout=self.config.timeout) as resp:
                status_code = resp.status
                raw = resp.read().decode("utf-8", errors="replace")
        except HTTPError as e:
            raw = ""
            try:
                raw = e.read().decode("utf-8", errors="replace")
            except OSError:
                raw = ""
            parsed = _parse_json(raw)
            reason = parsed.get("reason") or _safe_preview(raw)
            raise GatewayError(reason or f"WhaCenter API error with status {e.code}") from e
        except URLError as e:
            raise GatewayError(f"WhaCenter unreachable: {e.reason}") from e

        parsed = _parse_json(raw)
        if not (200 <= status_code < 300) or parsed.get("status") == "error":
            raise GatewayError(
                parsed.get("reason") or f"WhaCenter API error with status {status_code}"
            )

        logger.info(
            "WhatsApp message sent",
            extra={"recipient": recipient, "endpoint": endpoint},
        )
        return parsed
