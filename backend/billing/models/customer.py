"""
Customer and staff models
Customers pay invoices; staff users confirm payments and appear in the activity log
"""

from decimal import Decimal
from sqlalchemy import Column, String, Boolean, DateTime, DECIMAL
from sqlalchemy.orm import relationship
from billing.db.base import Base, new_id, utcnow


class Customer(Base):
    """Customer of the translation service

    Account (AR) customers buy on terms and settle invoices later;
    everyone else pays up front.
    """
    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=new_id)

    full_name = Column(String(255), nullable=False, index=True)
    email = Column(String(255), index=True)
    company_name = Column(String(255))

    # Payment terms: immediate, net_15, net_30, net_60
    is_ar_customer = Column(Boolean, default=False)
    payment_terms = Column(String(20), default="immediate")

    # Overpayments kept on account
    credit_balance = Column(DECIMAL(10, 2), default=Decimal("0.00"), comment="Credit on account")

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    invoices = relationship("CustomerInvoice", back_populates="customer")

    def __repr__(self):
        return f"<Customer {self.id}: {self.full_name}>"

    @property
    def display_name(self) -> str:
        if self.company_name:
            return f"{self.full_name} ({self.company_name})"
        return self.full_name


class StaffUser(Base):
    """Staff member of the back office"""
    __tablename__ = "staff_users"

    id = Column(String(36), primary_key=True, default=new_id)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True)

    # admin, super_admin, reviewer, senior_reviewer, accountant
    role = Column(String(20), nullable=False, default="reviewer")
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<StaffUser {self.email} ({self.role})>"
