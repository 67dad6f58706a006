# Billing data models

from billing.models.customer import Customer, StaffUser
from billing.models.invoice import CustomerInvoice
from billing.models.payment import (
    PaymentMethod, PaymentIntent, PaymentQueueItem, CustomerPayment, PaymentAllocation
)
from billing.models.adjustment import CreditLogEntry, InvoiceAdjustment, Refund, PaymentRequest
from billing.models.receivable import AccountsReceivable, ARPayment
from billing.models.activity_log import StaffActivity

__all__ = [
    "Customer",
    "StaffUser",
    "CustomerInvoice",
    "PaymentMethod",
    "PaymentIntent",
    "PaymentQueueItem",
    "CustomerPayment",
    "PaymentAllocation",
    "CreditLogEntry",
    "InvoiceAdjustment",
    "Refund",
    "PaymentRequest",
    "AccountsReceivable",
    "ARPayment",
    "StaffActivity",
]
