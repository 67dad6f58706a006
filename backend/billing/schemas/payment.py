"""Payment request/response schemas"""

from datetime import date, datetime
from typing import Optional, List
from pydantic import BaseModel, Field


class AllocationIn(BaseModel):
    """Amount of a payment applied to one invoice"""
    invoice_id: str
    allocated_amount: float = Field(..., gt=0)
    is_ai_matched: bool = False
    invoice_number: Optional[str] = None  # echoed back from suggestions, ignored


class ConfirmManualPaymentRequest(BaseModel):
    """Staff confirmation of a queued manual payment"""
    queue_item_id: str
    payment_intent_id: str
    customer_id: str
    amount: float = Field(..., gt=0)
    payment_method: str = Field(..., min_length=1)
    allocations: List[AllocationIn] = Field(default_factory=list)
    confirmed_by_staff_id: str


class ConfirmManualPaymentResponse(BaseModel):
    success: bool = True
    payment_id: str


class RecordBulkPaymentRequest(BaseModel):
    """One payment spread over several invoices"""
    customer_id: str
    amount: float = Field(..., gt=0)
    payment_method_id: str
    payment_date: date
    reference_number: Optional[str] = None
    notes: Optional[str] = None
    allocations: List[AllocationIn] = Field(..., min_length=1)

    # credit, surcharge, refund, discount, stripe_request
    difference_handling: Optional[str] = Field(
        None, pattern="^(credit|surcharge|refund|discount|stripe_request)$"
    )
    difference_amount: Optional[float] = None

    # Overpayment options
    surcharge_invoice_id: Optional[str] = None
    surcharge_reason: Optional[str] = None
    refund_method: Optional[str] = None

    # Underpayment options
    discount_reason: Optional[str] = None
    stripe_request_expiry_days: Optional[int] = Field(None, ge=1)

    ai_extracted: bool = False
    ai_confidence: Optional[float] = Field(None, ge=0, le=1)
    paystub_filename: Optional[str] = None

    staff_id: str


class AllocationResult(BaseModel):
    invoice_id: str
    status: str


class RecordBulkPaymentResponse(BaseModel):
    success: bool = True
    payment_id: str
    allocations_count: int
    allocation_results: List[AllocationResult]
    difference_handling: Optional[str] = None
    stripe_payment_link: Optional[str] = None
    refund_id: Optional[str] = None


class RecordARPaymentRequest(BaseModel):
    """Payment against an accounts-receivable balance"""
    ar_id: str
    amount: float = Field(..., gt=0)
    payment_method_id: str
    payment_date: date
    reference_number: Optional[str] = None
    notes: Optional[str] = None
    staff_id: str


class RecordARPaymentResponse(BaseModel):
    success: bool = True
    payment_id: str
    ar_id: str
    amount: float
    new_total_paid: float
    remaining_balance: float
    new_status: str
    is_overpayment: bool
    overpayment_amount: float


class AllocationResponse(BaseModel):
    id: str
    invoice_id: str
    invoice_number: str = ""
    allocated_amount: float
    is_ai_matched: bool

    class Config:
        from_attributes = True


class PaymentResponse(BaseModel):
    """Confirmed payment with its allocations"""
    id: str
    customer_id: str
    payment_intent_id: Optional[str]
    amount: float
    payment_method: Optional[str]
    payment_method_name: Optional[str]
    payment_date: Optional[date]
    reference_number: Optional[str]
    confirmed_by_staff_id: Optional[str]
    confirmed_at: Optional[datetime]
    ai_allocated: bool
    ai_confidence: Optional[float]
    status: str
    allocated_total: float
    allocations: List[AllocationResponse]
    created_at: datetime

    class Config:
        from_attributes = True
