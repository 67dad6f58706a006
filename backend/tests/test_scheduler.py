import asyncio
import os
import tempfile
import unittest
from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy import create_engine, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import NullPool

from billing.db.base import Base
from billing.models import Customer, PaymentRequest
from billing.services.scheduler import expire_payment_requests, get_scheduler_status, init_scheduler

NOW = datetime(2026, 10, 1, 2, 30)


class ExpirePaymentRequestsTests(unittest.TestCase):
    def setUp(self):
        self._tmpdir = tempfile.TemporaryDirectory()
        db_path = os.path.join(self._tmpdir.name, "scheduler_test.db")
        self.engine = create_engine(f"sqlite:///{db_path}")
        Base.metadata.create_all(self.engine)
        self.async_engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)

        with Session(self.engine) as session:
            customer = Customer(full_name="Dana Roy")
            session.add(customer)
            session.flush()
            session.add_all([
                PaymentRequest(customer_id=customer.id, amount=Decimal("20.00"), reason="shortfall",
                               expires_at=NOW - timedelta(days=1), status="pending"),
                PaymentRequest(customer_id=customer.id, amount=Decimal("30.00"), reason="shortfall",
                               expires_at=NOW + timedelta(days=2), status="pending"),
                PaymentRequest(customer_id=customer.id, amount=Decimal("40.00"), reason="shortfall",
                               expires_at=NOW - timedelta(days=3), status="paid"),
                PaymentRequest(customer_id=customer.id, amount=Decimal("50.00"), reason="shortfall",
                               status="pending"),
            ])
            session.commit()

    def tearDown(self):
        self.engine.dispose()
        self._tmpdir.cleanup()

    def run_expiry(self):
        async def run():
            async_session = sessionmaker(bind=self.async_engine, class_=AsyncSession)
            async with async_session() as db:
                return await expire_payment_requests(db, now=NOW)
        return asyncio.run(run())

    def statuses(self):
        with Session(self.engine) as session:
            rows = session.scalars(select(PaymentRequest).order_by(PaymentRequest.amount)).all()
            return [r.status for r in rows]

    def test_only_overdue_pending_requests_expire(self):
        self.assertEqual(self.run_expiry(), 1)
        self.assertEqual(self.statuses(), ["expired", "pending", "paid", "pending"])

    def test_second_run_is_a_no_op(self):
        self.run_expiry()
        self.assertEqual(self.run_expiry(), 0)


class SchedulerSetupTests(unittest.TestCase):
    def test_disabled_scheduler_reports_not_running(self):
        init_scheduler()
        self.assertEqual(get_scheduler_status(), {"enabled": False, "running": False, "jobs": []})


if __name__ == "__main__":
    unittest.main()
