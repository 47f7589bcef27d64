from .notification_send import handle_notification_send
from .order_create import handle_order_create
from .registration import handle_pujasera_registration, handle_tenant_registration

__all__ = [
    "handle_notification_send",
    "handle_order_create",
    "handle_pujasera_registration",
    "handle_tenant_registration",
]
