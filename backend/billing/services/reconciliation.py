"""
Payment reconciliation helpers
Applies allocations to invoices and writes the staff activity log
"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from billing.core.errors import BillingError
from billing.core.logging_config import get_logger
from billing.models import CustomerInvoice, CustomerPayment, PaymentAllocation, StaffActivity
from billing.schemas.payment import AllocationIn

logger = get_logger(__name__)

CENT = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    """Decimal rounded to cents; floats go through str to avoid binary noise"""
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def money_float(value: Optional[Decimal]) -> float:
    return float(value or 0)


async def apply_allocations(
    db: AsyncSession,
    payment: CustomerPayment,
    allocations: Iterable[AllocationIn],
    now: datetime) -> List[Dict[str, str]]:
    """Insert allocation rows and update each invoice's balance and status.

    Raises BillingError when an allocation names an unknown invoice.
    Returns [{"invoice_id", "status"}] in allocation order.
    """
    results = []
    for alloc in allocations:
        invoice = await db.get(CustomerInvoice, alloc.invoice_id)
        if not invoice:
            raise BillingError(f"Invoice {alloc.invoice_id} not found")

        amount = to_money(alloc.allocated_amount)
        db.add(PaymentAllocation(
            payment_id=payment.id,
            invoice_id=invoice.id,
            allocated_amount=amount,
            is_ai_matched=alloc.is_ai_matched,
            created_at=now,
        ))

        invoice.apply_payment(amount, now)
        invoice.updated_at = now
        results.append({"invoice_id": invoice.id, "status": invoice.status})

        logger.info(
            f"Invoice {invoice.invoice_number}: ${amount} applied, "
            f"balance ${invoice.balance_due} ({invoice.status})"
        )
    return results


def log_activity(
    db: AsyncSession,
    staff_id: Optional[str],
    action_type: str,
    entity_type: str,
    entity_id: Optional[str] = None,
    details: Optional[dict] = None,
    now: Optional[datetime] = None) -> StaffActivity:
    """Add a staff activity row to the session; details must be JSON-serialisable"""
    entry = StaffActivity(
        staff_id=staff_id,
        action_type=action_type,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details,
    )
    if now is not None:
        entry.created_at = now
    db.add(entry)
    return entry
