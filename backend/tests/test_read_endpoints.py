import unittest
from datetime import datetime

from billing_test_case import BillingApiTestCase
from billing.models import StaffActivity


class InvoiceEndpointTests(BillingApiTestCase):
    def setUp(self):
        super().setUp()
        self.customer = self.make_customer()
        self.later = self.make_invoice(self.customer, "INV-2026-000031", total="50.00", due_in_days=20)
        self.sooner = self.make_invoice(self.customer, "INV-2026-000030", total="75.00", due_in_days=5)
        self.settled = self.make_invoice(self.customer, "INV-2026-000029", total="20.00", paid="20.00",
                                         status="paid", due_in_days=-30)
        other = self.make_customer(full_name="Someone Else", email="else@example.com")
        self.make_invoice(other, "INV-2026-000099")

    def test_lists_customer_invoices_by_due_date(self):
        response = self.client.get("/api/v1/invoices/", params={"customer_id": self.customer.id})

        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["total"], 3)
        self.assertEqual(
            [inv["invoice_number"] for inv in payload["data"]],
            ["INV-2026-000029", "INV-2026-000030", "INV-2026-000031"],
        )

    def test_outstanding_filter(self):
        payload = self.client.get(
            "/api/v1/invoices/", params={"customer_id": self.customer.id, "outstanding": True}
        ).json()

        self.assertEqual([inv["id"] for inv in payload["data"]], [self.sooner.id, self.later.id])
        self.assertEqual(payload["data"][0]["balance_due"], 75.0)

    def test_get_invoice(self):
        payload = self.client.get(f"/api/v1/invoices/{self.settled.id}").json()
        self.assertEqual(payload["status"], "paid")
        self.assertEqual(payload["amount_paid"], 20.0)

    def test_unknown_invoice(self):
        response = self.client.get("/api/v1/invoices/missing")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"success": False, "error": "Invoice not found"})


class PaymentEndpointTests(BillingApiTestCase):
    def test_payment_with_allocations(self):
        customer = self.make_customer()
        first = self.make_invoice(customer, "INV-2026-000040", total="30.00")
        second = self.make_invoice(customer, "INV-2026-000041", total="90.00")
        item = self.make_queue_item(customer, "70.00", reference_number="ETR-55")

        confirm = self.client.post("/api/v1/confirm-manual-payment", json={
            "queue_item_id": item.id,
            "payment_intent_id": item.payment_intent_id,
            "customer_id": customer.id,
            "amount": 70,
            "payment_method": "etransfer",
            "allocations": [
                {"invoice_id": first.id, "allocated_amount": 30},
                {"invoice_id": second.id, "allocated_amount": 40, "is_ai_matched": True},
            ],
            "confirmed_by_staff_id": self.staff.id,
        })
        payment_id = confirm.json()["payment_id"]

        response = self.client.get(f"/api/v1/payments/{payment_id}")

        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["amount"], 70.0)
        self.assertEqual(payload["allocated_total"], 70.0)
        self.assertEqual(payload["status"], "completed")
        self.assertEqual(
            sorted((a["invoice_number"], a["allocated_amount"], a["is_ai_matched"])
                   for a in payload["allocations"]),
            [("INV-2026-000040", 30.0, False), ("INV-2026-000041", 40.0, True)],
        )

    def test_unknown_payment(self):
        response = self.client.get("/api/v1/payments/missing")
        self.assertEqual(response.status_code, 404)


class ActivityLogEndpointTests(BillingApiTestCase):
    def setUp(self):
        super().setUp()
        for day, action in enumerate(["confirm_payment", "reject_payment", "confirm_payment"], start=1):
            self.add(StaffActivity(
                staff_id=self.staff.id,
                action_type=action,
                entity_type="customer_payments",
                entity_id=f"entity-{day}",
                details={"day": day},
                created_at=datetime(2026, 9, day, 12, 0),
            ))

    def test_newest_first_with_display_fields(self):
        payload = self.client.get("/api/v1/activity-log/").json()

        self.assertEqual(payload["total"], 3)
        self.assertEqual([e["entity_id"] for e in payload["data"]], ["entity-3", "entity-2", "entity-1"])
        self.assertEqual(payload["data"][1]["action_display"], "Payment rejected")
        self.assertEqual(payload["data"][0]["staff_name"], "Accounts Desk")

    def test_pagination(self):
        payload = self.client.get("/api/v1/activity-log/", params={"page": 2, "limit": 2}).json()

        self.assertEqual(payload["total"], 3)
        self.assertEqual(payload["page"], 2)
        self.assertEqual([e["entity_id"] for e in payload["data"]], ["entity-1"])

    def test_filter_by_action(self):
        payload = self.client.get("/api/v1/activity-log/", params={"action_type": "confirm_payment"}).json()

        self.assertEqual(payload["total"], 2)
        self.assertEqual({e["action_type"] for e in payload["data"]}, {"confirm_payment"})


class HealthTests(BillingApiTestCase):
    def test_health(self):
        payload = self.client.get("/health").json()
        self.assertEqual(payload["status"], "ok")
        self.assertFalse(payload["scheduler"]["running"])


if __name__ == "__main__":
    unittest.main()
