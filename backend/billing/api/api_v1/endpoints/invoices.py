"""Invoice API"""

from typing import Any
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from billing.core.deps import get_db
from billing.core.errors import NotFoundError
from billing.models import CustomerInvoice
from billing.schemas.invoice import InvoiceListResponse, InvoiceResponse

router = APIRouter()


def build_invoice_response(invoice: CustomerInvoice) -> InvoiceResponse:
    return InvoiceResponse(
        id=invoice.id,
        invoice_number=invoice.invoice_number,
        customer_id=invoice.customer_id,
        order_number=invoice.order_number,
        subtotal=float(invoice.subtotal or 0),
        tax_amount=float(invoice.tax_amount or 0),
        total_amount=float(invoice.total_amount or 0),
        amount_paid=float(invoice.amount_paid or 0),
        balance_due=float(invoice.balance_due or 0),
        status=invoice.status,
        invoice_date=invoice.invoice_date,
        due_date=invoice.due_date,
        paid_at=invoice.paid_at,
    )


@router.get("/", response_model=InvoiceListResponse)
async def list_invoices(
    *,
    db: AsyncSession = Depends(get_db),
    customer_id: str = Query(...),
    outstanding: bool = Query(False)) -> Any:
    """A customer's invoices, earliest due first"""
    query = select(CustomerInvoice).where(CustomerInvoice.customer_id == customer_id)
    if outstanding:
        query = query.where(CustomerInvoice.balance_due > 0)
    query = query.order_by(CustomerInvoice.due_date.asc(), CustomerInvoice.invoice_number.asc())

    result = await db.execute(query)
    invoices = result.scalars().all()
    return InvoiceListResponse(
        data=[build_invoice_response(inv) for inv in invoices],
        total=len(invoices)
    )


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(
    *,
    db: AsyncSession = Depends(get_db),
    invoice_id: str) -> Any:
    invoice = await db.get(CustomerInvoice, invoice_id)
    if not invoice:
        raise NotFoundError("Invoice not found")
    return build_invoice_response(invoice)
