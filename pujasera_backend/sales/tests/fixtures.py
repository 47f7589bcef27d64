# sales/tests/fixtures.py

from decimal import Decimal

from products.models import Product
from sales.services.fees import FeeScheduleConfig
from store.models import Store


class PujaseraFixtureMixin:
    """
    One hub with two tenants:
    - Tenant A sells Nasi Goreng (10000)
    - Tenant B sells Es Jeruk (5000)
    """

    def make_pujasera(self, *, balance=Decimal("10")):
        self.schedule = FeeScheduleConfig.defaults()
        self.hub = Store.objects.create(
            name="Pujasera Melati",
            kind=Store.KIND_HUB,
            pujasera_group_slug="pujasera-melati-x1y2z",
            pujasera_name="Pujasera Melati",
            token_balance=balance,
        )
        self.tenant_a = Store.objects.create(
            name="Tenant A",
            kind=Store.KIND_TENANT,
            pujasera_group_slug=self.hub.pujasera_group_slug,
        )
        self.tenant_b = Store.objects.create(
            name="Tenant B",
            kind=Store.KIND_TENANT,
            pujasera_group_slug=self.hub.pujasera_group_slug,
        )
        self.nasi = Product.objects.create(
            store=self.tenant_a, name="Nasi Goreng", unit_price=Decimal("10000"), stock=10
        )
        self.jeruk = Product.objects.create(
            store=self.tenant_b, name="Es Jeruk", unit_price=Decimal("5000"), stock=10
        )

    def cart_line(self, product, quantity, *, tenant=None):
        tenant = tenant or product.store
        return {
            "productId": str(product.pk),
            "productName": product.name,
            "quantity": quantity,
            "price": str(product.unit_price),
            "storeId": str(tenant.pk),
            "storeName": tenant.name,
        }

    def order_payload(self, cart=None, **overrides):
        payload = {
            "pujaseraId": str(self.hub.pk),
            "customer": {"id": "N/A", "name": "Guest"},
            "cart": cart
            if cart is not None
            else [self.cart_line(self.nasi, 2), self.cart_line(self.jeruk, 1)],
            "subtotal": "25000",
            "totalAmount": "25000",
            "paymentMethod": "Cash",
            "staffId": "cashier-1",
        }
        payload.update(overrides)
        return payload
