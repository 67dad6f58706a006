"""Manual payment confirmation API"""

from typing import Any
from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from billing.core.deps import get_db
from billing.core.errors import BillingError
from billing.core.logging_config import get_logger
from billing.db.base import utcnow
from billing.models import Customer, CustomerPayment, PaymentIntent, PaymentQueueItem
from billing.schemas.payment import ConfirmManualPaymentRequest, ConfirmManualPaymentResponse
from billing.services.reconciliation import apply_allocations, log_activity, to_money

router = APIRouter()
logger = get_logger(__name__)


async def confirm_manual_payment(
    db: AsyncSession,
    payment_in: ConfirmManualPaymentRequest) -> CustomerPayment:
    """Record a confirmed manual payment and reconcile it against invoices.

    Runs inside the caller's transaction; nothing is committed here.
    """
    now = utcnow()

    # Suggestion data from the queue, if the item still exists.
    # A missing item means no suggestion was used, so ai_allocated stays False.
    queue_item = await db.get(PaymentQueueItem, payment_in.queue_item_id)
    ai_confidence = queue_item.ai_confidence if queue_item else None
    ai_assisted = ai_confidence is not None

    customer = await db.get(Customer, payment_in.customer_id)
    if not customer:
        raise BillingError("Customer not found")

    payment = CustomerPayment(
        customer_id=customer.id,
        payment_intent_id=payment_in.payment_intent_id,
        amount=to_money(payment_in.amount),
        payment_method=payment_in.payment_method,
        payment_date=now.date(),
        confirmed_by_staff_id=payment_in.confirmed_by_staff_id,
        confirmed_at=now,
        ai_allocated=ai_assisted,
        ai_confidence=ai_confidence,
        ai_reasoning=queue_item.ai_reasoning if queue_item else None,
        status="completed",
        created_at=now,
        updated_at=now,
    )
    db.add(payment)
    await db.flush()

    await apply_allocations(db, payment, payment_in.allocations, now)

    intent = await db.get(PaymentIntent, payment_in.payment_intent_id)
    if intent:
        intent.status = "completed"
        intent.completed_at = now
    else:
        logger.warning(f"Payment intent {payment_in.payment_intent_id} not found, skipping")

    if queue_item:
        queue_item.status = "confirmed"
        queue_item.processed_by_staff_id = payment_in.confirmed_by_staff_id
        queue_item.processed_at = now

    log_activity(
        db,
        staff_id=payment_in.confirmed_by_staff_id,
        action_type="confirm_payment",
        entity_type="customer_payments",
        entity_id=payment.id,
        details={
            "customer_id": payment_in.customer_id,
            "amount": payment_in.amount,
            "payment_method": payment_in.payment_method,
            "allocations": [
                {"invoice_id": a.invoice_id, "allocated_amount": a.allocated_amount}
                for a in payment_in.allocations
            ],
            "ai_assisted": ai_assisted,
            "ai_confidence": float(ai_confidence) if ai_assisted else None,
        },
        now=now,
    )
    return payment


@router.post("/confirm-manual-payment", response_model=ConfirmManualPaymentResponse)
async def confirm_payment(
    *,
    db: AsyncSession = Depends(get_db),
    payment_in: ConfirmManualPaymentRequest) -> Any:
    """Confirm a queued manual payment (e-transfer, cheque)"""
    logger.info(
        f"Confirming payment: queue item {payment_in.queue_item_id}, "
        f"${payment_in.amount} over {len(payment_in.allocations)} invoice(s)"
    )
    try:
        payment = await confirm_manual_payment(db, payment_in)
        await db.commit()
    except BillingError:
        await db.rollback()
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Payment confirmation failed: {e}")
        raise BillingError(str(getattr(e, "orig", None) or e))

    logger.info(f"✅ Payment {payment.id} confirmed")
    return ConfirmManualPaymentResponse(success=True, payment_id=payment.id)
