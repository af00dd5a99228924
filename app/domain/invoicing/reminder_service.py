"""Payment reminder service - Picks unpaid invoices on reminder days and sends them"""

import logging
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from ...auth import AuthSession
from ...config import REMINDER_DAYS_AFTER_DUE, REMINDER_DAYS_BEFORE_DUE
from ...models import Invoice
from ...services.notification_service import Notifier
from .repository import InvoiceRepository
from .schemas import ReminderCandidateResponse, ReminderPreviewResponse, ReminderResult, ReminderRunResponse

logger = logging.getLogger(__name__)


class ReminderPolicy(BaseModel):
    """Day offsets from the due date on which a reminder goes out"""

    model_config = ConfigDict(frozen=True)

    days_before_due: tuple[int, ...] = tuple(REMINDER_DAYS_BEFORE_DUE)
    days_after_due: tuple[int, ...] = tuple(REMINDER_DAYS_AFTER_DUE)

    def is_due(self, due: date, today: date) -> bool:
        offset = (due - today).days
        if offset > 0:
            return offset in self.days_before_due
        if offset < 0:
            return -offset in self.days_after_due
        return False


class ReminderService:
    """Service layer for payment reminders"""

    def __init__(self, db: Session, policy: Optional[ReminderPolicy] = None):
        self.db = db
        self.policy = policy or ReminderPolicy()
        self.invoices = InvoiceRepository()

    def get_candidates(self, session: AuthSession, today: Optional[date] = None) -> list[Invoice]:
        """Unpaid invoices whose due date sits on one of the policy's offsets from today"""
        today = today or datetime.utcnow().date()
        return [
            invoice
            for invoice in self.invoices.get_unpaid_with_due_date(self.db, session.company_id)
            if self.policy.is_due(invoice.due_at.date(), today)
        ]

    def preview(self, session: AuthSession, today: Optional[date] = None) -> ReminderPreviewResponse:
        candidates = self.get_candidates(session, today)
        return ReminderPreviewResponse(
            count=len(candidates),
            invoices=[ReminderCandidateResponse.from_invoice(invoice) for invoice in candidates],
        )

    async def process(
        self, session: AuthSession, notifier: Notifier, today: Optional[date] = None
    ) -> ReminderRunResponse:
        """
        Send a reminder for every candidate invoice.

        Each invoice is attempted independently; a missing customer email or
        a notifier error marks only that invoice as failed.
        """
        results: list[ReminderResult] = []

        for invoice in self.get_candidates(session, today):
            customer = invoice.customer
            try:
                if not customer or not customer.email:
                    raise ValueError("Customer email not found")
                await notifier.send_payment_reminder(invoice, customer, invoice.company)
                results.append(ReminderResult(invoiceId=invoice.id, success=True, to=customer.email))
                logger.info(f"📧 Payment reminder sent for invoice {invoice.invoice_number}")
            except Exception as e:
                logger.error(f"❌ Failed to send reminder for invoice {invoice.id}: {e}")
                results.append(ReminderResult(invoiceId=invoice.id, success=False, error=str(e)))

        sent = sum(1 for result in results if result.success)
        logger.info(f"✅ Processed {len(results)} reminder(s) for company {session.company_id}: {sent} sent")
        return ReminderRunResponse(processed=len(results), sent=sent, failed=len(results) - sent, results=results)
