# sales/tests/test_distribution.py

from decimal import Decimal
from unittest.mock import patch

from django.test import TestCase

from jobs.exceptions import JobValidationError
from products.services.stock_adjustments import InsufficientStock
from sales.models import Order
from sales.services.distribution import TransactionDistributor, TenantNotFound, sub_order_id
from sales.services.order_intake import OrderIntake, StoreNotFound
from sales.tests.fixtures import PujaseraFixtureMixin
from store.models import Customer, Store, Table
from store.services.loyalty import InsufficientPoints
from store.services.table_state import TableNotFound
from store.services.token_ledger import InsufficientBalance


class DistributionScenarioTests(PujaseraFixtureMixin, TestCase):
    """
    GUARANTEES:
    - One hub order, one sub-order per tenant
    - Fee debited once from the ordering store
    - Stock, loyalty and table updated in the same unit
    - Any failure leaves nothing behind
    """

    def setUp(self):
        self.make_pujasera()
        self.intake = OrderIntake(self.schedule)

    def test_two_tenant_order_is_fanned_out(self):
        order = self.intake.create_hub_order(self.order_payload())

        self.hub.refresh_from_db()
        self.assertEqual(self.hub.token_balance, Decimal("9.5"))
        self.assertEqual(order.fee_tokens, Decimal("0.5"))
        self.assertIsNotNone(order.distributed_at)
        self.assertEqual(order.receipt_number, 1)

        subs = {str(s.store_id): s for s in order.sub_orders.all()}
        self.assertEqual(set(subs), {str(self.tenant_a.pk), str(self.tenant_b.pk)})

        sub_a = subs[str(self.tenant_a.pk)]
        sub_b = subs[str(self.tenant_b.pk)]
        self.assertEqual(sub_a.pk, sub_order_id(order.pk, self.tenant_a.pk))
        self.assertEqual(sub_a.subtotal, Decimal("20000"))
        self.assertEqual(sub_b.subtotal, Decimal("5000"))
        self.assertEqual(sub_a.parent_receipt_number, 1)
        self.assertEqual(sub_a.notes, "Bagian dari pesanan pujasera #000001")

        self.assertEqual(
            order.items_status,
            {str(self.tenant_a.pk): "processing", str(self.tenant_b.pk): "processing"},
        )

        self.nasi.refresh_from_db()
        self.jeruk.refresh_from_db()
        self.assertEqual(self.nasi.stock, 8)
        self.assertEqual(self.jeruk.stock, 9)

    def test_sub_orders_use_tenant_receipt_counters(self):
        first = self.intake.create_hub_order(self.order_payload())
        second = self.intake.create_hub_order(self.order_payload())

        self.assertNotEqual(first.receipt_number, second.receipt_number)
        receipts_a = list(
            Order.objects.filter(store=self.tenant_a).order_by("receipt_number").values_list("receipt_number", flat=True)
        )
        self.assertEqual(receipts_a, [1, 2])

    def test_redelivery_with_same_key_creates_nothing_new(self):
        payload = self.order_payload(orderId="client-order-1")
        first = self.intake.create_hub_order(payload, idempotency_key="client-order-1")
        again = self.intake.create_hub_order(payload, idempotency_key="client-order-1")

        self.assertEqual(first.pk, again.pk)
        self.assertEqual(Order.objects.filter(parent__isnull=True).count(), 1)
        self.assertEqual(Order.objects.filter(parent__isnull=False).count(), 2)

        self.hub.refresh_from_db()
        self.assertEqual(self.hub.token_balance, Decimal("9.5"))

    def test_distribute_twice_is_a_no_op(self):
        order = self.intake.create_hub_order(self.order_payload())
        result = TransactionDistributor(self.schedule).distribute(order)

        self.assertTrue(result.already_distributed)
        self.assertEqual(len(result.sub_order_ids), 2)
        self.hub.refresh_from_db()
        self.assertEqual(self.hub.token_balance, Decimal("9.5"))

    def test_insufficient_balance_rolls_back_everything(self):
        Store.objects.filter(pk=self.hub.pk).update(token_balance=Decimal("0.4"))

        with self.assertRaises(InsufficientBalance):
            self.intake.create_hub_order(self.order_payload())

        self.assertFalse(Order.objects.exists())
        self.hub.refresh_from_db()
        self.nasi.refresh_from_db()
        self.assertEqual(self.hub.token_balance, Decimal("0.4"))
        self.assertEqual(self.hub.transaction_counter, 0)
        self.assertEqual(self.nasi.stock, 10)

    def test_insufficient_stock_rolls_back_everything(self):
        with self.assertRaises(InsufficientStock):
            self.intake.create_hub_order(
                self.order_payload(cart=[self.cart_line(self.nasi, 11), self.cart_line(self.jeruk, 1)])
            )

        self.assertFalse(Order.objects.exists())
        self.jeruk.refresh_from_db()
        self.assertEqual(self.jeruk.stock, 10)

    def test_unknown_tenant_fails(self):
        cart = [self.cart_line(self.nasi, 1)]
        cart[0]["storeId"] = "00000000-0000-0000-0000-000000000001"

        with self.assertRaises(TenantNotFound):
            self.intake.create_hub_order(self.order_payload(cart=cart))
        self.assertFalse(Order.objects.exists())

    def test_tenant_of_another_group_is_rejected(self):
        from products.models import Product

        foreign = Store.objects.create(name="Foreign", kind=Store.KIND_TENANT, pujasera_group_slug="other-g")
        sate = Product.objects.create(store=foreign, name="Sate", unit_price=Decimal("15000"), stock=5)

        with self.assertRaises(TenantNotFound):
            self.intake.create_hub_order(self.order_payload(cart=[self.cart_line(sate, 2)]))

        self.assertFalse(Order.objects.exists())
        sate.refresh_from_db()
        foreign.refresh_from_db()
        self.assertEqual(sate.stock, 5)
        self.assertEqual(foreign.transaction_counter, 0)

    def test_another_hub_cannot_be_a_tenant(self):
        from products.models import Product

        other_hub = Store.objects.create(
            name="Other hub", kind=Store.KIND_HUB, pujasera_group_slug=self.hub.pujasera_group_slug
        )
        teh = Product.objects.create(store=other_hub, name="Teh", unit_price=Decimal("3000"), stock=5)

        with self.assertRaises(TenantNotFound):
            self.intake.create_hub_order(self.order_payload(cart=[self.cart_line(teh, 1)]))
        self.assertFalse(Order.objects.exists())

    def test_hub_subtotal_is_computed_from_cart(self):
        order = self.intake.create_hub_order(self.order_payload(subtotal="99999"))

        self.assertEqual(order.subtotal, Decimal("25000"))
        sub_total = sum(sub.subtotal for sub in order.sub_orders.all())
        self.assertEqual(sub_total, order.subtotal)

    def test_unknown_hub_fails(self):
        with self.assertRaises(StoreNotFound):
            self.intake.create_hub_order(self.order_payload(pujaseraId="missing-hub"))

    def test_incomplete_payload_fails_validation(self):
        with self.assertRaises(JobValidationError):
            self.intake.create_hub_order({"pujaseraId": str(self.hub.pk), "cart": []})

    def test_untagged_lines_stay_on_hub_and_use_hub_stock(self):
        from products.models import Product

        kerupuk = Product.objects.create(store=self.hub, name="Kerupuk", unit_price=Decimal("2000"), stock=5)
        untagged = {
            "productId": str(kerupuk.pk),
            "productName": "Kerupuk",
            "quantity": 2,
            "price": "2000",
        }
        manual = {"productId": "manual-parkir", "productName": "Parkir", "quantity": 1, "price": "2000"}

        payload = self.order_payload(cart=[self.cart_line(self.nasi, 1), untagged, manual])
        del payload["subtotal"], payload["totalAmount"]
        order = self.intake.create_hub_order(payload)

        self.assertEqual(order.sub_orders.count(), 1)
        self.assertEqual(order.total_amount, Decimal("16000"))
        kerupuk.refresh_from_db()
        self.assertEqual(kerupuk.stock, 3)

    def test_loyalty_is_adjusted_with_the_order(self):
        customer = Customer.objects.create(store=self.hub, name="Sari", loyalty_points=20)

        self.intake.create_hub_order(
            self.order_payload(
                customer={"id": str(customer.pk), "name": "Sari"},
                pointsEarned=25,
                pointsToRedeem=10,
            )
        )
        customer.refresh_from_db()
        self.assertEqual(customer.loyalty_points, 35)

    def test_redeeming_too_many_points_rolls_back(self):
        customer = Customer.objects.create(store=self.hub, name="Sari", loyalty_points=5)

        with self.assertRaises(InsufficientPoints):
            self.intake.create_hub_order(
                self.order_payload(customer={"id": str(customer.pk), "name": "Sari"}, pointsToRedeem=10)
            )
        self.assertFalse(Order.objects.exists())
        self.hub.refresh_from_db()
        self.assertEqual(self.hub.token_balance, Decimal("10"))

    def test_failed_sub_order_write_rolls_back_the_hub_order(self):
        with patch("sales.services.distribution.apply_cart_stock", side_effect=RuntimeError("disk full")):
            with self.assertRaises(RuntimeError):
                self.intake.create_hub_order(self.order_payload())

        self.assertFalse(Order.objects.exists())
        self.hub.refresh_from_db()
        self.assertEqual(self.hub.token_balance, Decimal("10"))


class TablePolicyTests(PujaseraFixtureMixin, TestCase):
    def setUp(self):
        self.make_pujasera()
        self.intake = OrderIntake(self.schedule)
        self.table = Table.objects.create(store=self.hub, name="Meja 5")
        self.virtual = Table.objects.create(store=self.hub, name="Bawa Pulang", is_virtual=True)

    def test_paid_order_occupies_physical_table(self):
        order = self.intake.create_hub_order(self.order_payload(tableId=str(self.table.pk)))

        self.table.refresh_from_db()
        self.assertEqual(self.table.status, Table.STATUS_OCCUPIED)
        self.assertEqual(self.table.current_order["transactionId"], order.pk)
        self.assertEqual(self.table.current_order["totalAmount"], "25000.00")

    def test_paid_order_deletes_virtual_table(self):
        self.intake.create_hub_order(self.order_payload(tableId=str(self.virtual.pk)))
        self.assertFalse(Table.objects.filter(pk=self.virtual.pk).exists())

    def test_catalog_pay_at_cashier_only_attaches_order(self):
        order = self.intake.create_hub_order(
            self.order_payload(tableId=str(self.virtual.pk), isFromCatalog=True, paymentMethod="kasir")
        )

        self.virtual.refresh_from_db()
        self.assertEqual(self.virtual.status, Table.STATUS_AVAILABLE)
        self.assertEqual(self.virtual.current_order["transactionId"], order.pk)
        self.assertEqual(order.notes, "Pesanan dari Katalog Publik")

    def test_unpaid_order_leaves_table_untouched(self):
        self.intake.create_hub_order(
            self.order_payload(tableId=str(self.table.pk), paymentMethod="Belum Dibayar")
        )
        self.table.refresh_from_db()
        self.assertEqual(self.table.status, Table.STATUS_AVAILABLE)
        self.assertIsNone(self.table.current_order)

    def test_unknown_table_fails(self):
        with self.assertRaises(TableNotFound):
            self.intake.create_hub_order(self.order_payload(tableId="00000000-0000-0000-0000-000000000009"))
        self.assertFalse(Order.objects.exists())
