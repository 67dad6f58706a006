"""
Allocation suggestion for queued manual payments

Rules, in priority order:
1. never allocate more than an invoice's balance due
2. a payment equal to exactly one invoice balance goes to that invoice
3. an invoice or order number quoted in the reference/memo is paid first
4. otherwise invoices are paid oldest due date first
5. whatever cannot be placed is reported as unallocated
"""

import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence

from billing.core.config import settings
from billing.services.reconciliation import to_money

EXACT_MATCH_CONFIDENCE = 0.95
REFERENCE_MATCH_CONFIDENCE = 0.9
AMBIGUOUS_CONFIDENCE = 0.8
OLDEST_FIRST_CONFIDENCE = 0.75
PARTIAL_PAYMENT_CAP = 0.85


@dataclass
class OpenInvoice:
    id: str
    invoice_number: str
    balance_due: Decimal
    due_date: Optional[date] = None
    order_number: Optional[str] = None


@dataclass
class AllocationSuggestion:
    confidence: float
    reasoning: str
    allocations: List[dict] = field(default_factory=list)
    unallocated_amount: Decimal = Decimal("0.00")
    warnings: List[str] = field(default_factory=list)

    @property
    def allocated_total(self) -> Decimal:
        return sum((to_money(a["allocated_amount"]) for a in self.allocations), Decimal("0.00"))


def _oldest_first(invoices: Sequence[OpenInvoice]) -> List[OpenInvoice]:
    return sorted(invoices, key=lambda inv: (inv.due_date or date.max, inv.invoice_number))


def _mentions(number: Optional[str], text: str) -> bool:
    # Whole tokens only; INV-1 must not match inside INV-10
    if not number:
        return False
    pattern = rf"(?<![\w-]){re.escape(number.upper())}(?![\w-])"
    return re.search(pattern, text) is not None


def _is_referenced(invoice: OpenInvoice, text: str) -> bool:
    return _mentions(invoice.invoice_number, text) or _mentions(invoice.order_number, text)


def suggest_allocations(
    amount,
    invoices: Sequence[OpenInvoice],
    reference_number: Optional[str] = None,
    customer_memo: Optional[str] = None,
) -> AllocationSuggestion:
    """Split a payment across a customer's open invoices"""
    amount = to_money(amount)
    tolerance = Decimal(str(settings.PAID_THRESHOLD))
    open_invoices = _oldest_first([inv for inv in invoices if to_money(inv.balance_due) > 0])

    if not open_invoices:
        return AllocationSuggestion(
            confidence=0.0,
            reasoning="Customer has no outstanding invoices",
            unallocated_amount=amount,
            warnings=[f"${amount} could not be allocated"],
        )

    text = " ".join(part for part in (reference_number, customer_memo) if part).upper()
    referenced = [inv for inv in open_invoices if text and _is_referenced(inv, text)]
    exact = [inv for inv in open_invoices if abs(to_money(inv.balance_due) - amount) <= tolerance]
    warnings: List[str] = []

    if len(exact) == 1 and (not referenced or referenced == exact):
        ordered = exact
        confidence = EXACT_MATCH_CONFIDENCE
        reasoning = f"Payment matches the balance of invoice {exact[0].invoice_number}"
    elif referenced:
        ordered = referenced + [inv for inv in open_invoices if inv not in referenced]
        numbers = ", ".join(inv.invoice_number for inv in referenced)
        if len(referenced) > 1:
            confidence = AMBIGUOUS_CONFIDENCE
            warnings.append(f"Reference mentions several invoices: {numbers}")
        else:
            confidence = REFERENCE_MATCH_CONFIDENCE
        reasoning = f"Reference or memo mentions {numbers}"
    else:
        ordered = open_invoices
        confidence = OLDEST_FIRST_CONFIDENCE
        reasoning = "No clear match; allocated to the oldest invoices first"
        if len(exact) > 1:
            warnings.append("Several invoices match the payment amount")

    allocations = []
    remaining = amount
    partial = False
    for inv in ordered:
        if remaining <= 0:
            break
        balance = to_money(inv.balance_due)
        take = min(remaining, balance)
        # A shortfall within the paid threshold settles the invoice
        if balance - take > tolerance:
            partial = True
        allocations.append({
            "invoice_id": inv.id,
            "invoice_number": inv.invoice_number,
            "allocated_amount": float(take),
        })
        remaining -= take

    if partial:
        confidence = min(confidence, PARTIAL_PAYMENT_CAP)
        warnings.append("Payment does not fully cover the last allocated invoice")

    if remaining > 0:
        warnings.append(f"Payment exceeds outstanding balances by ${remaining}")

    return AllocationSuggestion(
        confidence=confidence,
        reasoning=reasoning,
        allocations=allocations,
        unallocated_amount=max(remaining, Decimal("0.00")),
        warnings=warnings,
    )
