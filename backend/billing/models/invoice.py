"""
Customer invoice model - one invoice per order
Tracks what was billed, what has been paid and what is still due
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from sqlalchemy import Column, String, Text, Date, DateTime, ForeignKey, DECIMAL
from sqlalchemy.orm import relationship
from billing.core.config import settings
from billing.db.base import Base, new_id, utcnow


class CustomerInvoice(Base):
    """Customer invoice

    Balance rules:
    - balance_due = total_amount - amount_paid, never below zero
    - a remaining balance at or below PAID_THRESHOLD counts as paid
    """
    __tablename__ = "customer_invoices"

    id = Column(String(36), primary_key=True, default=new_id)
    invoice_number = Column(String(50), unique=True, nullable=False, index=True)

    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)
    order_number = Column(String(50), index=True, comment="Order the invoice was raised for")

    # Amounts copied from the order at invoice time
    subtotal = Column(DECIMAL(10, 2), nullable=False, default=Decimal("0.00"))
    tax_amount = Column(DECIMAL(10, 2), default=Decimal("0.00"))
    total_amount = Column(DECIMAL(10, 2), nullable=False, default=Decimal("0.00"))

    # Payment tracking
    amount_paid = Column(DECIMAL(10, 2), default=Decimal("0.00"))
    balance_due = Column(DECIMAL(10, 2), nullable=False, default=Decimal("0.00"))

    # draft, issued, sent, partial, paid, void, cancelled
    status = Column(String(20), nullable=False, default="issued", index=True)

    invoice_date = Column(Date, nullable=False, default=date.today)
    due_date = Column(Date, nullable=False, index=True)
    paid_at = Column(DateTime)

    notes = Column(Text)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    customer = relationship("Customer", back_populates="invoices")
    allocations = relationship("PaymentAllocation", back_populates="invoice")
    adjustments = relationship("InvoiceAdjustment", back_populates="invoice")

    def __repr__(self):
        return f"<CustomerInvoice {self.invoice_number}: {self.status} ${self.balance_due}>"

    def apply_payment(self, amount: Decimal, now: Optional[datetime] = None) -> Decimal:
        """Add an allocated amount and recompute balance and status.

        Returns the raw remaining balance (negative on overpayment).
        """
        self.amount_paid = (self.amount_paid or Decimal("0")) + amount
        return self.recalculate(now)

    def recalculate(self, now: Optional[datetime] = None) -> Decimal:
        """Recompute balance_due, status and paid_at from total and paid"""
        remaining = (self.total_amount or Decimal("0")) - (self.amount_paid or Decimal("0"))
        self.balance_due = max(Decimal("0"), remaining)
        self.settle(remaining, now)
        return remaining

    def settle(self, remaining: Decimal, now: Optional[datetime] = None) -> None:
        """Flip status between partial and paid around the threshold"""
        if remaining <= Decimal(str(settings.PAID_THRESHOLD)):
            self.status = "paid"
            self.paid_at = now or utcnow()
        else:
            self.status = "partial"
            self.paid_at = None

    @property
    def is_paid(self) -> bool:
        return self.status == "paid"
