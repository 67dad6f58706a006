"""Customer payment API"""

from typing import Any
from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from billing.core.deps import get_db
from billing.core.errors import NotFoundError
from billing.models import CustomerPayment, PaymentAllocation
from billing.schemas.payment import AllocationResponse, PaymentResponse

router = APIRouter()


def build_payment_response(payment: CustomerPayment) -> PaymentResponse:
    return PaymentResponse(
        id=payment.id,
        customer_id=payment.customer_id,
        payment_intent_id=payment.payment_intent_id,
        amount=float(payment.amount or 0),
        payment_method=payment.payment_method or payment.payment_method_code,
        payment_method_name=payment.payment_method_name,
        payment_date=payment.payment_date,
        reference_number=payment.reference_number,
        confirmed_by_staff_id=payment.confirmed_by_staff_id,
        confirmed_at=payment.confirmed_at,
        ai_allocated=bool(payment.ai_allocated),
        ai_confidence=float(payment.ai_confidence) if payment.ai_confidence is not None else None,
        status=payment.status,
        allocated_total=float(payment.allocated_total),
        allocations=[
            AllocationResponse(
                id=a.id,
                invoice_id=a.invoice_id,
                invoice_number=a.invoice.invoice_number if a.invoice else "",
                allocated_amount=float(a.allocated_amount),
                is_ai_matched=bool(a.is_ai_matched),
            )
            for a in payment.allocations
        ],
        created_at=payment.created_at,
    )


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    *,
    db: AsyncSession = Depends(get_db),
    payment_id: str) -> Any:
    """Payment with its invoice allocations"""
    result = await db.execute(
        select(CustomerPayment)
        .options(
            selectinload(CustomerPayment.allocations).selectinload(PaymentAllocation.invoice)
        )
        .where(CustomerPayment.id == payment_id)
    )
    payment = result.scalar_one_or_none()

    if not payment:
        raise NotFoundError("Payment not found")

    return build_payment_response(payment)
