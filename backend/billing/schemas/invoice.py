"""Invoice schemas"""

from datetime import date, datetime
from typing import Optional, List
from pydantic import BaseModel


class InvoiceResponse(BaseModel):
    id: str
    invoice_number: str
    customer_id: str
    order_number: Optional[str]
    subtotal: float
    tax_amount: float
    total_amount: float
    amount_paid: float
    balance_due: float
    status: str
    invoice_date: date
    due_date: date
    paid_at: Optional[datetime]

    class Config:
        from_attributes = True


class InvoiceListResponse(BaseModel):
    data: List[InvoiceResponse]
    total: int
