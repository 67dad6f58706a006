"""Payment confirmation queue schemas"""

from datetime import date, datetime
from typing import Any, Dict, Optional, List
from pydantic import BaseModel


class OutstandingInvoice(BaseModel):
    id: str
    invoice_number: str
    balance_due: float
    due_date: date
    order_number: Optional[str] = None


class QueueItemResponse(BaseModel):
    id: str
    payment_intent_id: str
    customer_id: str
    amount: float
    payment_method: str
    reference_number: Optional[str]
    customer_memo: Optional[str]
    ai_confidence: Optional[float]
    ai_reasoning: Optional[str]
    ai_allocations: Optional[List[Dict[str, Any]]]
    status: str
    created_at: datetime

    # Display fields
    customer_name: str = ""
    customer_email: Optional[str] = None
    company_name: Optional[str] = None
    invoices: List[OutstandingInvoice] = []

    class Config:
        from_attributes = True


class QueueListResponse(BaseModel):
    data: List[QueueItemResponse]
    total: int


class RejectPaymentRequest(BaseModel):
    staff_id: str
    staff_notes: Optional[str] = None


class RejectPaymentResponse(BaseModel):
    success: bool = True
    queue_item_id: str
    status: str


class SuggestedAllocation(BaseModel):
    invoice_id: str
    invoice_number: str
    allocated_amount: float


class AllocationSuggestionResponse(BaseModel):
    """Suggested split of a queued payment"""
    confidence: float
    reasoning: str
    allocations: List[SuggestedAllocation]
    unallocated_amount: float
    warnings: List[str]
