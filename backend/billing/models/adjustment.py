"""
Over/under payment handling records

When a bulk payment does not match the allocated total, the difference is
kept as credit, refunded, charged as a surcharge, written off as a discount
or requested from the customer.
"""

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, DECIMAL
from sqlalchemy.orm import relationship
from billing.db.base import Base, new_id, utcnow


class CreditLogEntry(Base):
    """Change of a customer's credit balance"""
    __tablename__ = "customer_credit_log"

    id = Column(String(36), primary_key=True, default=new_id)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)
    amount = Column(DECIMAL(10, 2), nullable=False)

    # credit_added, credit_used, credit_expired, credit_refunded
    type = Column(String(20), nullable=False, index=True)
    # overpayment, refund, promo, manual, order_applied
    source = Column(String(50))

    payment_id = Column(String(36), ForeignKey("customer_payments.id"))
    invoice_id = Column(String(36), ForeignKey("customer_invoices.id"))
    notes = Column(Text)
    created_by_staff_id = Column(String(36), ForeignKey("staff_users.id"))
    created_at = Column(DateTime, default=utcnow, index=True)

    def __repr__(self):
        return f"<CreditLogEntry {self.type} ${self.amount}>"


class InvoiceAdjustment(Base):
    """Discount (negative) or surcharge (positive) on an invoice"""
    __tablename__ = "invoice_adjustments"

    id = Column(String(36), primary_key=True, default=new_id)
    invoice_id = Column(String(36), ForeignKey("customer_invoices.id"), nullable=False, index=True)

    # discount, surcharge, write_off
    adjustment_type = Column(String(20), nullable=False, index=True)
    amount = Column(DECIMAL(10, 2), nullable=False)
    reason = Column(Text)

    payment_id = Column(String(36), ForeignKey("customer_payments.id"))
    created_by_staff_id = Column(String(36), ForeignKey("staff_users.id"))
    created_at = Column(DateTime, default=utcnow)

    invoice = relationship("CustomerInvoice", back_populates="adjustments")

    def __repr__(self):
        return f"<InvoiceAdjustment {self.adjustment_type} ${self.amount}>"


class Refund(Base):
    """Money owed back to the customer"""
    __tablename__ = "refunds"

    id = Column(String(36), primary_key=True, default=new_id)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)
    payment_id = Column(String(36), ForeignKey("customer_payments.id"))
    invoice_id = Column(String(36), ForeignKey("customer_invoices.id"))

    amount = Column(DECIMAL(10, 2), nullable=False)
    # stripe, manual, check, bank_transfer, credit
    refund_method = Column(String(20), default="manual")
    # pending, processing, completed, failed, cancelled
    status = Column(String(20), default="pending", index=True)
    reason = Column(Text)

    created_by_staff_id = Column(String(36), ForeignKey("staff_users.id"))
    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<Refund {self.id}: ${self.amount} {self.status}>"


class PaymentRequest(Base):
    """Request sent to a customer to pay a shortfall"""
    __tablename__ = "payment_requests"

    id = Column(String(36), primary_key=True, default=new_id)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)
    invoice_id = Column(String(36), ForeignKey("customer_invoices.id"))
    original_payment_id = Column(String(36), ForeignKey("customer_payments.id"))

    amount = Column(DECIMAL(10, 2), nullable=False)
    # shortfall, order_edit, balance_due
    reason = Column(String(100))

    payment_link_url = Column(Text)
    expires_at = Column(DateTime, index=True)

    # pending, paid, expired, cancelled
    status = Column(String(20), default="pending", index=True)
    paid_at = Column(DateTime)

    created_by_staff_id = Column(String(36), ForeignKey("staff_users.id"))
    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<PaymentRequest {self.id}: ${self.amount} {self.status}>"
