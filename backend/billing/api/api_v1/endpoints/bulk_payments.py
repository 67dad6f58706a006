"""Bulk payment API - one payment allocated across several invoices"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from billing.core.config import settings
from billing.core.deps import get_db
from billing.core.errors import BillingError, NotFoundError
from billing.core.logging_config import get_logger
from billing.db.base import utcnow
from billing.models import (
    CreditLogEntry, Customer, CustomerInvoice, CustomerPayment, InvoiceAdjustment,
    PaymentMethod, PaymentRequest, Refund
)
from billing.schemas.payment import (
    AllocationResult, RecordBulkPaymentRequest, RecordBulkPaymentResponse
)
from billing.services.reconciliation import apply_allocations, log_activity, to_money

router = APIRouter()
logger = get_logger(__name__)


def add_credit(
    db: AsyncSession,
    customer: Customer,
    payment: CustomerPayment,
    amount: Decimal,
    staff_id: str,
    now: datetime) -> None:
    """Keep an overpayment on the customer's account"""
    customer.credit_balance = (customer.credit_balance or Decimal("0")) + amount
    customer.updated_at = now
    db.add(CreditLogEntry(
        customer_id=customer.id,
        amount=amount,
        type="credit_added",
        source="overpayment",
        payment_id=payment.id,
        notes=f"Overpayment from bulk payment {payment.id}",
        created_by_staff_id=staff_id,
        created_at=now,
    ))
    logger.info(f"Added ${amount} credit to customer {customer.id}")


async def add_surcharge(
    db: AsyncSession,
    invoice_id: str,
    payment: CustomerPayment,
    amount: Decimal,
    reason: Optional[str],
    staff_id: str,
    now: datetime) -> None:
    """Charge an overpayment to an invoice, raising its total and balance"""
    invoice = await db.get(CustomerInvoice, invoice_id)
    if not invoice:
        raise BillingError(f"Surcharge invoice {invoice_id} not found")

    db.add(InvoiceAdjustment(
        invoice_id=invoice.id,
        adjustment_type="surcharge",
        amount=amount,
        reason=reason or "Overpayment applied as surcharge",
        payment_id=payment.id,
        created_by_staff_id=staff_id,
        created_at=now,
    ))
    invoice.total_amount = (invoice.total_amount or Decimal("0")) + amount
    invoice.balance_due = (invoice.balance_due or Decimal("0")) + amount
    invoice.updated_at = now
    logger.info(f"Applied ${amount} surcharge to invoice {invoice.invoice_number}")


async def add_discount(
    db: AsyncSession,
    invoice_id: str,
    payment: CustomerPayment,
    amount: Decimal,
    reason: str,
    staff_id: str,
    now: datetime) -> None:
    """Write off a shortfall on an invoice"""
    invoice = await db.get(CustomerInvoice, invoice_id)
    if not invoice:
        raise BillingError(f"Invoice {invoice_id} not found")

    db.add(InvoiceAdjustment(
        invoice_id=invoice.id,
        adjustment_type="discount",
        amount=-amount,
        reason=reason,
        payment_id=payment.id,
        created_by_staff_id=staff_id,
        created_at=now,
    ))
    new_balance = max(Decimal("0"), (invoice.balance_due or Decimal("0")) - amount)
    invoice.balance_due = new_balance
    invoice.settle(new_balance, now)
    invoice.updated_at = now
    logger.info(f"Applied ${amount} discount to invoice {invoice.invoice_number}: {reason}")


def add_refund(
    db: AsyncSession,
    customer: Customer,
    payment: CustomerPayment,
    amount: Decimal,
    refund_method: Optional[str],
    staff_id: str,
    now: datetime) -> Refund:
    refund = Refund(
        customer_id=customer.id,
        payment_id=payment.id,
        amount=amount,
        refund_method="stripe" if refund_method == "original" else "manual",
        status="pending",
        reason="Overpayment refund",
        created_by_staff_id=staff_id,
        created_at=now,
    )
    db.add(refund)
    return refund


def add_payment_request(
    db: AsyncSession,
    customer: Customer,
    payment: CustomerPayment,
    amount: Decimal,
    expiry_days: Optional[int],
    staff_id: str,
    now: datetime) -> PaymentRequest:
    """Ask the customer for the shortfall; the hosted payment link is issued elsewhere"""
    request = PaymentRequest(
        customer_id=customer.id,
        original_payment_id=payment.id,
        amount=amount,
        reason="shortfall",
        expires_at=now + timedelta(days=expiry_days or settings.PAYMENT_REQUEST_EXPIRY_DAYS),
        status="pending",
        created_by_staff_id=staff_id,
        created_at=now,
    )
    db.add(request)
    return request


@router.post("/record-bulk-payment", response_model=RecordBulkPaymentResponse)
async def record_bulk_payment(
    *,
    db: AsyncSession = Depends(get_db),
    payment_in: RecordBulkPaymentRequest) -> Any:
    """Record a payment split across invoices, handling any over/under payment"""
    payment_method = await db.get(PaymentMethod, payment_in.payment_method_id)
    if not payment_method:
        raise BillingError("Invalid payment method")

    customer = await db.get(Customer, payment_in.customer_id)
    if not customer:
        raise NotFoundError("Customer not found")

    logger.info(
        f"Recording bulk payment for customer {customer.id}: "
        f"${payment_in.amount}, {len(payment_in.allocations)} allocation(s)"
    )

    now = utcnow()
    difference = to_money(payment_in.difference_amount) if payment_in.difference_amount else Decimal("0")
    handling = payment_in.difference_handling
    refund = None

    try:
        payment = CustomerPayment(
            customer_id=customer.id,
            amount=to_money(payment_in.amount),
            payment_method_id=payment_method.id,
            payment_method_code=payment_method.code,
            payment_method_name=payment_method.name,
            payment_date=payment_in.payment_date,
            reference_number=payment_in.reference_number,
            notes=payment_in.notes,
            confirmed_by_staff_id=payment_in.staff_id,
            confirmed_at=now,
            ai_allocated=payment_in.ai_extracted,
            ai_confidence=to_money(payment_in.ai_confidence) if payment_in.ai_confidence is not None else None,
            paystub_filename=payment_in.paystub_filename,
            status="completed",
            created_at=now,
            updated_at=now,
        )
        db.add(payment)
        await db.flush()

        allocation_results = await apply_allocations(db, payment, payment_in.allocations, now)

        # Overpayment
        if handling == "credit" and difference > 0:
            add_credit(db, customer, payment, difference, payment_in.staff_id, now)

        if handling == "surcharge" and payment_in.surcharge_invoice_id and difference:
            await add_surcharge(
                db, payment_in.surcharge_invoice_id, payment, difference,
                payment_in.surcharge_reason, payment_in.staff_id, now
            )

        if handling == "refund" and difference > 0:
            refund = add_refund(db, customer, payment, difference, payment_in.refund_method, payment_in.staff_id, now)

        # Underpayment
        if handling == "discount" and payment_in.discount_reason and difference:
            await add_discount(
                db, payment_in.allocations[-1].invoice_id, payment, abs(difference),
                payment_in.discount_reason, payment_in.staff_id, now
            )

        if handling == "stripe_request" and difference > 0:
            add_payment_request(
                db, customer, payment, difference,
                payment_in.stripe_request_expiry_days, payment_in.staff_id, now
            )

        await db.flush()

        log_activity(
            db,
            staff_id=payment_in.staff_id,
            action_type="record_bulk_payment",
            entity_type="customer_payments",
            entity_id=payment.id,
            details={
                "customer_id": customer.id,
                "customer_name": customer.full_name,
                "amount": payment_in.amount,
                "payment_method": payment_method.name,
                "allocations_count": len(payment_in.allocations),
                "total_allocated": float(sum(
                    (to_money(a.allocated_amount) for a in payment_in.allocations), Decimal("0")
                )),
                "difference_handling": handling,
                "difference_amount": payment_in.difference_amount,
                "ai_assisted": payment_in.ai_extracted,
                "ai_confidence": payment_in.ai_confidence,
                "paystub_filename": payment_in.paystub_filename,
                "allocation_results": allocation_results,
            },
            now=now,
        )
        await db.commit()
    except BillingError:
        await db.rollback()
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Bulk payment failed: {e}")
        raise BillingError(f"Failed to create payment: {getattr(e, 'orig', None) or e}", status_code=500)

    logger.info(f"✅ Bulk payment recorded: {payment.id}")
    return RecordBulkPaymentResponse(
        success=True,
        payment_id=payment.id,
        allocations_count=len(payment_in.allocations),
        allocation_results=[AllocationResult(**r) for r in allocation_results],
        difference_handling=handling,
        stripe_payment_link=None,
        refund_id=refund.id if refund else None,
    )
