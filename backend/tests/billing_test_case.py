import os
import tempfile
import unittest
from datetime import date, timedelta
from decimal import Decimal

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from billing.core.deps import get_db
from billing.db.base import Base
from billing.main import create_app
from billing.models import (
    AccountsReceivable, Customer, CustomerInvoice, PaymentIntent, PaymentMethod,
    PaymentQueueItem, StaffUser
)


class BillingApiTestCase(unittest.TestCase):
    """
    Drives the app against a throwaway SQLite file. Fixtures are written and
    read back with a synchronous session; the app uses aiosqlite on the same file.
    """

    def setUp(self):
        self._tmpdir = tempfile.TemporaryDirectory()
        db_path = os.path.join(self._tmpdir.name, "billing_test.db")

        self.engine = create_engine(f"sqlite:///{db_path}")
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)

        async_engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
        AsyncSessionLocal = sessionmaker(bind=async_engine, class_=AsyncSession, expire_on_commit=False)

        async def override_get_db():
            async with AsyncSessionLocal() as session:
                yield session

        self.app = create_app()
        self.app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(self.app)

        self.staff = self.add(StaffUser(full_name="Accounts Desk", email="accounts@example.com", role="accountant"))

    def tearDown(self):
        self.client.close()
        self.engine.dispose()
        self._tmpdir.cleanup()

    # Fixture helpers

    def add(self, obj):
        with self.Session() as session:
            session.add(obj)
            session.commit()
        return obj

    def get(self, model, ident):
        with self.Session() as session:
            return session.get(model, ident)

    def all(self, model):
        with self.Session() as session:
            return list(session.scalars(select(model)).all())

    def make_customer(self, **kwargs) -> Customer:
        kwargs.setdefault("full_name", "Alice Martin")
        kwargs.setdefault("email", "alice@example.com")
        return self.add(Customer(**kwargs))

    def make_invoice(self, customer, number, total="100.00", paid="0.00", due_in_days=30, **kwargs) -> CustomerInvoice:
        total = Decimal(total)
        paid = Decimal(paid)
        return self.add(CustomerInvoice(
            invoice_number=number,
            customer_id=customer.id,
            order_number=kwargs.pop("order_number", number.replace("INV", "ORD")),
            subtotal=total,
            total_amount=total,
            amount_paid=paid,
            balance_due=total - paid,
            status=kwargs.pop("status", "issued" if paid == 0 else "partial"),
            due_date=date.today() + timedelta(days=due_in_days),
            **kwargs
        ))

    def make_payment_method(self, code="etransfer", name="Interac e-Transfer") -> PaymentMethod:
        return self.add(PaymentMethod(code=code, name=name))

    def make_queue_item(self, customer, amount="100.00", **kwargs) -> PaymentQueueItem:
        intent = self.add(PaymentIntent(
            customer_id=customer.id,
            amount=Decimal(amount),
            payment_method=kwargs.get("payment_method", "etransfer"),
            reference_number=kwargs.get("reference_number"),
        ))
        kwargs.setdefault("payment_method", "etransfer")
        return self.add(PaymentQueueItem(
            payment_intent_id=intent.id,
            customer_id=customer.id,
            amount=Decimal(amount),
            **kwargs
        ))

    def make_receivable(self, customer, original="300.00", paid="0.00", status="pending") -> AccountsReceivable:
        return self.add(AccountsReceivable(
            customer_id=customer.id,
            order_number="ORD-2026-000900",
            original_amount=Decimal(original),
            amount_paid=Decimal(paid),
            status=status,
        ))
