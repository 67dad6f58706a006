"""V1 API router"""
from fastapi import APIRouter

from billing.api.api_v1.endpoints import (
    confirm_payment, bulk_payments, ar_payments, payment_queue,
    invoices, payments, activity_log
)

api_router = APIRouter()

# Payment operations
api_router.include_router(confirm_payment.router, tags=["Payment confirmation"])
api_router.include_router(bulk_payments.router, tags=["Bulk payments"])
api_router.include_router(ar_payments.router, tags=["Accounts receivable"])
api_router.include_router(payment_queue.router, prefix="/payment-queue", tags=["Payment queue"])

# Lookups
api_router.include_router(invoices.router, prefix="/invoices", tags=["Invoices"])
api_router.include_router(payments.router, prefix="/payments", tags=["Payments"])
api_router.include_router(activity_log.router, prefix="/activity-log", tags=["Staff activity"])
