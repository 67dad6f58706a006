import unittest
from decimal import Decimal

from billing_test_case import BillingApiTestCase
from billing.models import CustomerInvoice, CustomerPayment, PaymentQueueItem, StaffActivity

QUEUE_URL = "/api/v1/payment-queue/"


class PaymentQueueTests(BillingApiTestCase):
    def setUp(self):
        super().setUp()
        self.customer = self.make_customer(company_name="Martin Legal")
        self.older = self.make_invoice(self.customer, "INV-2026-000010", total="80.00", due_in_days=-5)
        self.newer = self.make_invoice(self.customer, "INV-2026-000011", total="120.00", due_in_days=25)
        self.make_invoice(self.customer, "INV-2026-000012", total="60.00", paid="60.00", status="paid")

    def test_lists_pending_items_with_outstanding_invoices(self):
        item = self.make_queue_item(self.customer, "80.00", reference_number="ETR-1")
        self.make_queue_item(self.customer, "10.00", status="rejected")

        response = self.client.get(QUEUE_URL)

        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["total"], 1)
        entry = payload["data"][0]
        self.assertEqual(entry["id"], item.id)
        self.assertEqual(entry["customer_name"], "Alice Martin")
        self.assertEqual(entry["company_name"], "Martin Legal")
        self.assertEqual(
            [inv["invoice_number"] for inv in entry["invoices"]],
            ["INV-2026-000010", "INV-2026-000011"],
        )

    def test_reject_pending_item(self):
        item = self.make_queue_item(self.customer, "80.00")

        response = self.client.post(
            f"/api/v1/payment-queue/{item.id}/reject",
            json={"staff_id": self.staff.id, "staff_notes": "No matching deposit"},
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "rejected")
        stored = self.get(PaymentQueueItem, item.id)
        self.assertEqual(stored.status, "rejected")
        self.assertEqual(stored.processed_by_staff_id, self.staff.id)
        self.assertEqual(stored.staff_notes, "No matching deposit")
        self.assertEqual(self.all(StaffActivity)[0].action_type, "reject_payment")
        self.assertEqual(self.client.get(QUEUE_URL).json()["total"], 0)

    def test_reject_twice_is_an_error(self):
        item = self.make_queue_item(self.customer, "80.00", status="confirmed")

        response = self.client.post(
            f"/api/v1/payment-queue/{item.id}/reject", json={"staff_id": self.staff.id}
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn("confirmed", response.json()["error"])

    def test_reject_unknown_item(self):
        response = self.client.post(
            "/api/v1/payment-queue/missing/reject", json={"staff_id": self.staff.id}
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"], "Queue item not found")

    def test_suggestion_is_stored_and_can_be_confirmed(self):
        item = self.make_queue_item(self.customer, "120.00")

        response = self.client.post(f"/api/v1/payment-queue/{item.id}/suggest-allocation")

        self.assertEqual(response.status_code, 200)
        suggestion = response.json()
        self.assertEqual(suggestion["confidence"], 0.95)
        self.assertEqual(suggestion["allocations"], [{
            "invoice_id": self.newer.id,
            "invoice_number": "INV-2026-000011",
            "allocated_amount": 120.0,
        }])
        self.assertEqual(suggestion["unallocated_amount"], 0.0)

        stored = self.get(PaymentQueueItem, item.id)
        self.assertEqual(stored.ai_confidence, Decimal("0.95"))
        self.assertEqual(stored.ai_allocations[0]["invoice_id"], self.newer.id)

        # Quick confirm with the stored suggestion
        confirm = self.client.post("/api/v1/confirm-manual-payment", json={
            "queue_item_id": item.id,
            "payment_intent_id": item.payment_intent_id,
            "customer_id": self.customer.id,
            "amount": 120,
            "payment_method": "etransfer",
            "allocations": stored.ai_allocations,
            "confirmed_by_staff_id": self.staff.id,
        })
        self.assertEqual(confirm.status_code, 200)
        self.assertTrue(self.get(CustomerPayment, confirm.json()["payment_id"]).ai_allocated)
        self.assertEqual(self.get(CustomerInvoice, self.newer.id).status, "paid")

    def test_suggestion_without_match_goes_oldest_first(self):
        item = self.make_queue_item(self.customer, "150.00")

        suggestion = self.client.post(f"/api/v1/payment-queue/{item.id}/suggest-allocation").json()

        self.assertEqual(
            [(a["invoice_number"], a["allocated_amount"]) for a in suggestion["allocations"]],
            [("INV-2026-000010", 80.0), ("INV-2026-000011", 70.0)],
        )
        self.assertLess(suggestion["confidence"], 0.9)
        self.assertTrue(suggestion["warnings"])

    def test_suggestion_for_unknown_item(self):
        response = self.client.post("/api/v1/payment-queue/missing/suggest-allocation")
        self.assertEqual(response.status_code, 404)


if __name__ == "__main__":
    unittest.main()
