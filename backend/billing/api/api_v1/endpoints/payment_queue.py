"""Payment confirmation queue API"""

from decimal import Decimal
from typing import Any, List
from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from billing.core.deps import get_db
from billing.core.errors import BillingError, NotFoundError
from billing.core.logging_config import get_logger
from billing.db.base import utcnow
from billing.models import CustomerInvoice, PaymentQueueItem
from billing.schemas.queue import (
    AllocationSuggestionResponse, OutstandingInvoice, QueueItemResponse, QueueListResponse,
    RejectPaymentRequest, RejectPaymentResponse, SuggestedAllocation
)
from billing.services.allocation import OpenInvoice, suggest_allocations
from billing.services.reconciliation import log_activity, money_float

router = APIRouter()
logger = get_logger(__name__)


async def get_outstanding_invoices(db: AsyncSession, customer_id: str) -> List[CustomerInvoice]:
    """Invoices with a balance, earliest due first"""
    result = await db.execute(
        select(CustomerInvoice)
        .where(
            CustomerInvoice.customer_id == customer_id,
            CustomerInvoice.balance_due > 0,
        )
        .order_by(CustomerInvoice.due_date.asc(), CustomerInvoice.invoice_number.asc())
    )
    return list(result.scalars().all())


def build_queue_response(item: PaymentQueueItem, invoices: List[CustomerInvoice]) -> QueueItemResponse:
    customer = item.customer
    return QueueItemResponse(
        id=item.id,
        payment_intent_id=item.payment_intent_id,
        customer_id=item.customer_id,
        amount=money_float(item.amount),
        payment_method=item.payment_method,
        reference_number=item.reference_number,
        customer_memo=item.customer_memo,
        ai_confidence=float(item.ai_confidence) if item.ai_confidence is not None else None,
        ai_reasoning=item.ai_reasoning,
        ai_allocations=item.ai_allocations,
        status=item.status,
        created_at=item.created_at,
        customer_name=customer.full_name if customer else "",
        customer_email=customer.email if customer else None,
        company_name=customer.company_name if customer else None,
        invoices=[
            OutstandingInvoice(
                id=inv.id,
                invoice_number=inv.invoice_number,
                balance_due=money_float(inv.balance_due),
                due_date=inv.due_date,
                order_number=inv.order_number,
            )
            for inv in invoices
        ],
    )


async def get_queue_item_or_404(db: AsyncSession, queue_item_id: str) -> PaymentQueueItem:
    result = await db.execute(
        select(PaymentQueueItem)
        .options(selectinload(PaymentQueueItem.customer))
        .where(PaymentQueueItem.id == queue_item_id)
    )
    item = result.scalar_one_or_none()
    if not item:
        raise NotFoundError("Queue item not found")
    return item


@router.get("/", response_model=QueueListResponse)
async def list_pending_payments(
    *,
    db: AsyncSession = Depends(get_db)) -> Any:
    """Pending manual payments, oldest first, with each customer's open invoices"""
    result = await db.execute(
        select(PaymentQueueItem)
        .options(selectinload(PaymentQueueItem.customer))
        .where(PaymentQueueItem.status == "pending")
        .order_by(PaymentQueueItem.created_at.asc())
    )
    items = result.scalars().all()

    data = []
    for item in items:
        invoices = await get_outstanding_invoices(db, item.customer_id)
        data.append(build_queue_response(item, invoices))

    return QueueListResponse(data=data, total=len(data))


@router.post("/{queue_item_id}/reject", response_model=RejectPaymentResponse)
async def reject_payment(
    *,
    db: AsyncSession = Depends(get_db),
    queue_item_id: str,
    reject_in: RejectPaymentRequest) -> Any:
    """Reject a queued payment that staff could not match"""
    item = await get_queue_item_or_404(db, queue_item_id)
    if item.status != "pending":
        raise BillingError(f"Queue item is already {item.status}")

    now = utcnow()
    item.status = "rejected"
    item.processed_by_staff_id = reject_in.staff_id
    item.processed_at = now
    if reject_in.staff_notes:
        item.staff_notes = reject_in.staff_notes

    log_activity(
        db,
        staff_id=reject_in.staff_id,
        action_type="reject_payment",
        entity_type="payment_confirmation_queue",
        entity_id=item.id,
        details={
            "customer_id": item.customer_id,
            "amount": money_float(item.amount),
            "payment_method": item.payment_method,
            "staff_notes": reject_in.staff_notes,
        },
        now=now,
    )
    await db.commit()

    logger.info(f"Queue item {item.id} rejected by {reject_in.staff_id}")
    return RejectPaymentResponse(success=True, queue_item_id=item.id, status=item.status)


@router.post("/{queue_item_id}/suggest-allocation", response_model=AllocationSuggestionResponse)
async def suggest_allocation(
    *,
    db: AsyncSession = Depends(get_db),
    queue_item_id: str) -> Any:
    """Suggest how to split a queued payment and store it on the item"""
    item = await get_queue_item_or_404(db, queue_item_id)
    invoices = await get_outstanding_invoices(db, item.customer_id)

    suggestion = suggest_allocations(
        item.amount,
        [
            OpenInvoice(
                id=inv.id,
                invoice_number=inv.invoice_number,
                balance_due=inv.balance_due,
                due_date=inv.due_date,
                order_number=inv.order_number,
            )
            for inv in invoices
        ],
        reference_number=item.reference_number,
        customer_memo=item.customer_memo,
    )

    item.ai_confidence = Decimal(str(suggestion.confidence))
    item.ai_reasoning = suggestion.reasoning
    item.ai_allocations = suggestion.allocations
    await db.commit()

    logger.info(
        f"Allocation suggested for {item.id}: {len(suggestion.allocations)} invoice(s), "
        f"confidence {suggestion.confidence:.2f}"
    )
    return AllocationSuggestionResponse(
        confidence=suggestion.confidence,
        reasoning=suggestion.reasoning,
        allocations=[SuggestedAllocation(**a) for a in suggestion.allocations],
        unallocated_amount=float(suggestion.unallocated_amount),
        warnings=suggestion.warnings,
    )
