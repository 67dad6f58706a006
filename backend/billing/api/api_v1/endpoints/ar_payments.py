"""Accounts receivable payment API"""

from decimal import Decimal
from typing import Any
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from billing.core.deps import get_db
from billing.core.errors import BillingError, NotFoundError
from billing.core.logging_config import get_logger
from billing.db.base import utcnow
from billing.models import AccountsReceivable, ARPayment, PaymentMethod
from billing.schemas.payment import RecordARPaymentRequest, RecordARPaymentResponse
from billing.services.reconciliation import log_activity, to_money

router = APIRouter()
logger = get_logger(__name__)


@router.post("/record-ar-payment", response_model=RecordARPaymentResponse)
async def record_ar_payment(
    *,
    db: AsyncSession = Depends(get_db),
    payment_in: RecordARPaymentRequest) -> Any:
    """Record a payment against an AR balance"""
    receivable = await db.get(AccountsReceivable, payment_in.ar_id)
    if not receivable:
        raise NotFoundError("AR record not found")

    if receivable.status == "paid":
        raise BillingError("This AR invoice is already fully paid")

    payment_method = await db.get(PaymentMethod, payment_in.payment_method_id)
    if not payment_method:
        raise BillingError("Invalid payment method")

    amount = to_money(payment_in.amount)
    previous_paid = receivable.amount_paid or Decimal("0")
    receivable.amount_paid = previous_paid + amount
    remaining = receivable.recalculate()
    now = utcnow()
    receivable.updated_at = now

    logger.info(
        f"Recording AR payment {receivable.id}: ${amount}, "
        f"paid ${previous_paid} -> ${receivable.amount_paid}, "
        f"remaining ${remaining}, status {receivable.status}"
    )

    payment = ARPayment(
        ar_id=receivable.id,
        amount=amount,
        payment_method_id=payment_method.id,
        payment_method_code=payment_method.code,
        payment_method_name=payment_method.name,
        payment_date=payment_in.payment_date,
        reference_number=payment_in.reference_number,
        notes=payment_in.notes,
        recorded_by=payment_in.staff_id,
        recorded_at=now,
    )
    db.add(payment)
    await db.flush()

    remaining_balance = max(Decimal("0"), remaining)
    log_activity(
        db,
        staff_id=payment_in.staff_id,
        action_type="record_ar_payment",
        entity_type="accounts_receivable",
        entity_id=receivable.id,
        details={
            "ar_id": receivable.id,
            "order_number": receivable.order_number,
            "payment_id": payment.id,
            "amount": float(amount),
            "payment_method": payment_method.name,
            "reference_number": payment_in.reference_number,
            "previous_amount_paid": float(previous_paid),
            "new_amount_paid": float(receivable.amount_paid),
            "new_status": receivable.status,
            "remaining_balance": float(remaining_balance),
        },
        now=now,
    )
    await db.commit()

    logger.info(f"✅ AR payment recorded: {payment.id}")
    return RecordARPaymentResponse(
        success=True,
        payment_id=payment.id,
        ar_id=receivable.id,
        amount=float(amount),
        new_total_paid=float(receivable.amount_paid),
        remaining_balance=float(remaining_balance),
        new_status=receivable.status,
        is_overpayment=remaining < 0,
        overpayment_amount=float(-remaining) if remaining < 0 else 0.0,
    )
