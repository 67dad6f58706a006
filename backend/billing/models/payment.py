"""
Payment models - money actually received from customers

A customer reports a payment (intent), staff confirm it from the queue,
and the confirmed payment is split across invoices by allocations.
"""

from decimal import Decimal
from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey, DECIMAL, Boolean, JSON
from sqlalchemy.orm import relationship
from billing.db.base import Base, new_id, utcnow


class PaymentMethod(Base):
    """Configured payment channel (e-transfer, cheque, cash, account ...)"""
    __tablename__ = "payment_methods"

    id = Column(String(36), primary_key=True, default=new_id)
    code = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    is_active = Column(Boolean, default=True)
    sort_order = Column(Integer, default=0)

    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<PaymentMethod {self.code}: {self.name}>"


class PaymentIntent(Base):
    """Payment the customer says they made, awaiting confirmation"""
    __tablename__ = "customer_payment_intents"

    id = Column(String(36), primary_key=True, default=new_id)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)

    amount = Column(DECIMAL(10, 2), nullable=False)
    payment_method = Column(String(20), nullable=False, comment="etransfer, cheque, ...")
    reference_number = Column(String(100))

    # pending, completed, cancelled
    status = Column(String(20), default="pending", index=True)
    completed_at = Column(DateTime)

    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<PaymentIntent {self.id}: {self.status} ${self.amount}>"


class PaymentQueueItem(Base):
    """Manual payment waiting for a staff decision

    Holds the suggested allocation (confidence, reasoning, allocations)
    so staff can confirm it in one step.
    """
    __tablename__ = "payment_confirmation_queue"

    id = Column(String(36), primary_key=True, default=new_id)
    payment_intent_id = Column(String(36), ForeignKey("customer_payment_intents.id"), nullable=False)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)

    amount = Column(DECIMAL(10, 2), nullable=False)
    payment_method = Column(String(20), nullable=False)
    reference_number = Column(String(100))
    customer_memo = Column(Text)

    # Allocation suggestion
    ai_confidence = Column(DECIMAL(3, 2))
    ai_reasoning = Column(Text)
    ai_allocations = Column(JSON)

    # pending, confirmed, rejected, cancelled
    status = Column(String(20), default="pending", index=True)

    processed_by_staff_id = Column(String(36), ForeignKey("staff_users.id"))
    processed_at = Column(DateTime)
    staff_notes = Column(Text)

    created_at = Column(DateTime, default=utcnow, index=True)

    customer = relationship("Customer", foreign_keys=[customer_id])
    payment_intent = relationship("PaymentIntent", foreign_keys=[payment_intent_id])

    def __repr__(self):
        return f"<PaymentQueueItem {self.id}: {self.status} ${self.amount}>"


class CustomerPayment(Base):
    """Confirmed customer payment, allocated across one or more invoices"""
    __tablename__ = "customer_payments"

    id = Column(String(36), primary_key=True, default=new_id)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)
    payment_intent_id = Column(String(36), ForeignKey("customer_payment_intents.id"))

    amount = Column(DECIMAL(10, 2), nullable=False)

    # Free-text method from the queue, or a configured method
    payment_method = Column(String(20))
    payment_method_id = Column(String(36), ForeignKey("payment_methods.id"))
    payment_method_code = Column(String(50))
    payment_method_name = Column(String(100))

    payment_date = Column(Date)
    reference_number = Column(String(255))
    notes = Column(Text)

    confirmed_by_staff_id = Column(String(36), ForeignKey("staff_users.id"))
    confirmed_at = Column(DateTime)

    ai_allocated = Column(Boolean, default=False)
    ai_confidence = Column(DECIMAL(3, 2))
    ai_reasoning = Column(Text)
    paystub_filename = Column(Text)

    # pending, completed, cancelled, refunded
    status = Column(String(20), default="completed", index=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    allocations = relationship(
        "PaymentAllocation", back_populates="payment", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<CustomerPayment {self.id}: ${self.amount} {self.status}>"

    @property
    def allocated_total(self) -> Decimal:
        return sum((a.allocated_amount for a in self.allocations), Decimal("0"))


class PaymentAllocation(Base):
    """Portion of a payment applied to one invoice"""
    __tablename__ = "customer_payment_allocations"

    id = Column(String(36), primary_key=True, default=new_id)
    payment_id = Column(String(36), ForeignKey("customer_payments.id"), nullable=False, index=True)
    invoice_id = Column(String(36), ForeignKey("customer_invoices.id"), nullable=False, index=True)
    allocated_amount = Column(DECIMAL(10, 2), nullable=False)
    is_ai_matched = Column(Boolean, default=False)

    created_at = Column(DateTime, default=utcnow)

    payment = relationship("CustomerPayment", back_populates="allocations")
    invoice = relationship("CustomerInvoice", back_populates="allocations")

    def __repr__(self):
        return f"<PaymentAllocation {self.payment_id} -> {self.invoice_id}: ${self.allocated_amount}>"
