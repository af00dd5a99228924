"""Invoicing domain schemas - Pydantic models for reminder previews and runs"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ...models import Invoice


class ReminderCandidateResponse(BaseModel):
    id: int
    invoiceNumber: str
    customerName: Optional[str] = None
    customerEmail: Optional[str] = None
    amount: float
    currency: Optional[str] = None
    dueDate: Optional[datetime] = None
    status: str

    @classmethod
    def from_invoice(cls, invoice: Invoice) -> "ReminderCandidateResponse":
        customer = invoice.customer
        return cls(
            id=invoice.id,
            invoiceNumber=invoice.invoice_number,
            customerName=customer.full_name if customer else None,
            customerEmail=customer.email if customer else None,
            amount=float(invoice.total or 0),
            currency=invoice.currency,
            dueDate=invoice.due_at,
            status=invoice.status,
        )


class ReminderPreviewResponse(BaseModel):
    count: int
    invoices: list[ReminderCandidateResponse]


class ReminderResult(BaseModel):
    invoiceId: int
    success: bool
    to: Optional[str] = None
    error: Optional[str] = None


class ReminderRunResponse(BaseModel):
    processed: int
    sent: int
    failed: int
    results: list[ReminderResult]
