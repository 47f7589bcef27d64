# store/tests/test_table_state.py

from django.test import TestCase

from store.models import Store, Table
from store.services import table_state


class TableStateTests(TestCase):
    """
    GUARANTEES:
    - Only allowed transitions succeed
    - Clearing deletes virtual tables and resets physical ones
    """

    def setUp(self):
        self.hub = Store.objects.create(name="Hub", kind=Store.KIND_HUB)
        self.table = Table.objects.create(store=self.hub, name="Meja 1")
        self.virtual = Table.objects.create(store=self.hub, name="Ambil di Kasir", is_virtual=True)

    def _snapshot(self, order_id="order-1"):
        return table_state.order_snapshot(items=[], total_amount="25000.00", transaction_id=order_id)

    def test_allowed_transitions(self):
        self.assertTrue(table_state.can_transition(from_status="available", to_status="reserved"))
        self.assertTrue(table_state.can_transition(from_status="reserved", to_status="occupied"))
        self.assertTrue(table_state.can_transition(from_status="occupied", to_status="awaiting_cleanup"))
        self.assertTrue(table_state.can_transition(from_status="awaiting_cleanup", to_status="available"))
        self.assertTrue(table_state.can_transition(from_status="reserved", to_status="available"))

    def test_illegal_transition_is_rejected(self):
        with self.assertRaises(table_state.InvalidTableTransition):
            table_state.mark_awaiting_cleanup(self.table)

        table_state.reserve(self.table)
        with self.assertRaises(table_state.InvalidTableTransition):
            table_state.reserve(self.table)

    def test_occupy_attaches_snapshot(self):
        table_state.occupy(self.table, self._snapshot())
        self.table.refresh_from_db()

        self.assertEqual(self.table.status, Table.STATUS_OCCUPIED)
        self.assertEqual(self.table.current_order["transactionId"], "order-1")
        self.assertEqual(self.table.current_order["totalAmount"], "25000.00")
        self.assertIn("orderTime", self.table.current_order)

    def test_attach_order_keeps_status(self):
        table_state.attach_order(self.table, "order-9")
        self.table.refresh_from_db()

        self.assertEqual(self.table.status, Table.STATUS_AVAILABLE)
        self.assertEqual(self.table.current_order, {"transactionId": "order-9"})

    def test_clear_physical_table_resets_it(self):
        table_state.occupy(self.table, self._snapshot())
        table_state.mark_awaiting_cleanup(self.table)

        result = table_state.clear(self.table)
        self.assertIsNotNone(result)

        self.table.refresh_from_db()
        self.assertEqual(self.table.status, Table.STATUS_AVAILABLE)
        self.assertIsNone(self.table.current_order)

    def test_clear_virtual_table_deletes_it(self):
        table_state.occupy(self.virtual, self._snapshot())

        self.assertIsNone(table_state.clear(self.virtual))
        self.assertFalse(Table.objects.filter(pk=self.virtual.pk).exists())

    def test_lock_table_is_scoped_to_store(self):
        other = Store.objects.create(name="Other", kind=Store.KIND_HUB)
        with self.assertRaises(table_state.TableNotFound):
            table_state.lock_table(self.table.pk, store=other)
        with self.assertRaises(table_state.TableNotFound):
            table_state.lock_table("not-a-uuid")
