"""
Demo data initialisation
- clears billing data (tables are kept)
- creates a staff user, payment methods, customers and invoices
- queues two manual payments for confirmation
"""

import asyncio
import sys
import os
from datetime import date, timedelta
from decimal import Decimal

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from billing.db.session import SessionLocal
from billing.db.init_db import ensure_tables_exist
from billing.models import (
    AccountsReceivable, Customer, CustomerInvoice, PaymentIntent, PaymentMethod,
    PaymentQueueItem, StaffUser
)


async def clear_all_data(db: AsyncSession):
    """Delete billing rows in foreign-key order"""
    print("🗑️  Clearing data...")

    tables_to_clear = [
        "staff_activity_log",
        "ar_payments",
        "accounts_receivable",
        "payment_requests",
        "refunds",
        "invoice_adjustments",
        "customer_credit_log",
        "customer_payment_allocations",
        "customer_payments",
        "payment_confirmation_queue",
        "customer_payment_intents",
        "customer_invoices",
        "payment_methods",
        "customers",
        "staff_users",
    ]

    for table in tables_to_clear:
        await db.execute(text(f"DELETE FROM {table}"))
        print(f"   ✓ cleared {table}")

    await db.commit()
    print("   done\n")


def create_invoice(db: AsyncSession, customer: Customer, number: str, total: str, due_in_days: int) -> CustomerInvoice:
    amount = Decimal(total)
    invoice = CustomerInvoice(
        invoice_number=number,
        customer_id=customer.id,
        order_number=number.replace("INV", "ORD"),
        subtotal=(amount / Decimal("1.05")).quantize(Decimal("0.01")),
        tax_amount=amount - (amount / Decimal("1.05")).quantize(Decimal("0.01")),
        total_amount=amount,
        amount_paid=Decimal("0.00"),
        balance_due=amount,
        status="issued",
        due_date=date.today() + timedelta(days=due_in_days),
    )
    db.add(invoice)
    return invoice


async def queue_payment(db: AsyncSession, customer: Customer, amount: str, method: str, reference: str, memo: str):
    intent = PaymentIntent(
        customer_id=customer.id,
        amount=Decimal(amount),
        payment_method=method,
        reference_number=reference,
    )
    db.add(intent)
    await db.flush()
    db.add(PaymentQueueItem(
        payment_intent_id=intent.id,
        customer_id=customer.id,
        amount=Decimal(amount),
        payment_method=method,
        reference_number=reference,
        customer_memo=memo,
    ))


async def main():
    await ensure_tables_exist()

    async with SessionLocal() as db:
        try:
            await clear_all_data(db)

            print("👤 Creating staff and payment methods...")
            db.add(StaffUser(full_name="Accounts Desk", email="accounts@example.com", role="accountant"))
            for order, (code, name) in enumerate([
                ("etransfer", "Interac e-Transfer"),
                ("cheque", "Cheque"),
                ("cash", "Cash"),
                ("account", "On account"),
            ]):
                db.add(PaymentMethod(code=code, name=name, sort_order=order))

            print("🧾 Creating customers and invoices...")
            alice = Customer(full_name="Alice Martin", email="alice@example.com")
            acme = Customer(
                full_name="Rob Chen", email="ap@acme.example", company_name="Acme Legal",
                is_ar_customer=True, payment_terms="net_30",
            )
            db.add_all([alice, acme])
            await db.flush()

            create_invoice(db, alice, "INV-2026-000001", "105.00", 0)
            create_invoice(db, acme, "INV-2026-000002", "262.50", -10)
            create_invoice(db, acme, "INV-2026-000003", "420.00", 20)
            db.add(AccountsReceivable(
                customer_id=acme.id,
                order_number="ORD-2026-000004",
                original_amount=Decimal("315.00"),
                due_date=date.today() + timedelta(days=30),
            ))

            print("📥 Queueing manual payments...")
            await queue_payment(db, alice, "105.00", "etransfer", "ETR-88412", "Payment for my translation")
            await queue_payment(db, acme, "500.00", "cheque", "CHQ-1042", "INV-2026-000003 and part of the older one")

            await db.commit()

            print("\n" + "=" * 60)
            print("✅ Demo data ready")
            print("=" * 60)
            print("   - 1 staff user, 4 payment methods")
            print("   - 2 customers, 3 invoices, 1 AR balance")
            print("   - 2 queued manual payments")

        except Exception as e:
            await db.rollback()
            print(f"\n❌ Demo data failed: {e}")
            raise


if __name__ == "__main__":
    asyncio.run(main())
