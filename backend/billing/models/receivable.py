"""
Accounts receivable - balances owed by account customers on terms
"""

from decimal import Decimal
from sqlalchemy import Column, String, Text, Date, DateTime, ForeignKey, DECIMAL
from sqlalchemy.orm import relationship
from billing.db.base import Base, new_id, utcnow


class AccountsReceivable(Base):
    """Amount an account customer owes for an order

    - pending/unpaid: nothing received yet
    - partial: some received
    - paid: settled
    """
    __tablename__ = "accounts_receivable"

    id = Column(String(36), primary_key=True, default=new_id)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)
    order_number = Column(String(50), index=True)

    original_amount = Column(DECIMAL(10, 2), nullable=False)
    amount_paid = Column(DECIMAL(10, 2), default=Decimal("0.00"))
    due_date = Column(Date)

    status = Column(String(20), default="pending", index=True)
    notes = Column(Text)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    customer = relationship("Customer", foreign_keys=[customer_id])
    payments = relationship("ARPayment", back_populates="receivable", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<AccountsReceivable {self.id}: {self.status} ${self.remaining_balance}>"

    @property
    def remaining_balance(self) -> Decimal:
        return (self.original_amount or Decimal("0")) - (self.amount_paid or Decimal("0"))

    def recalculate(self) -> Decimal:
        """Recompute the status; returns the raw remaining balance"""
        remaining = self.remaining_balance
        if remaining <= Decimal("0"):
            self.status = "paid"
        elif (self.amount_paid or Decimal("0")) > Decimal("0"):
            self.status = "partial"
        else:
            self.status = "unpaid"
        return remaining


class ARPayment(Base):
    """Payment recorded by staff against a receivable"""
    __tablename__ = "ar_payments"

    id = Column(String(36), primary_key=True, default=new_id)
    ar_id = Column(String(36), ForeignKey("accounts_receivable.id"), nullable=False, index=True)

    amount = Column(DECIMAL(10, 2), nullable=False)
    payment_method_id = Column(String(36), ForeignKey("payment_methods.id"))
    payment_method_code = Column(String(50))
    payment_method_name = Column(String(100))
    payment_date = Column(Date, nullable=False)
    reference_number = Column(String(255))
    notes = Column(Text)

    recorded_by = Column(String(36), ForeignKey("staff_users.id"))
    recorded_at = Column(DateTime, default=utcnow)

    receivable = relationship("AccountsReceivable", back_populates="payments")

    def __repr__(self):
        return f"<ARPayment {self.id}: ${self.amount}>"
