"""
Workforce Notification Service
Delivers notification intents produced by committed scheduling changes.
Delivery is best-effort: failures are logged and reported, never raised,
so a committed state change is never undone by a failed email.
"""

import logging
from datetime import datetime
from typing import Literal, Optional, Protocol

from pydantic import BaseModel
from sqlalchemy.orm import Session, sessionmaker

from ..config import FRONTEND_URL
from ..database import SessionLocal
from ..models import Company, Customer, Employee, Invoice, Job

logger = logging.getLogger(__name__)


class NotificationIntent(BaseModel):
    """A message to deliver once the change that caused it has committed"""

    kind: Literal["assignment", "swap_decision"]
    company_id: int
    employee_id: int
    job_id: Optional[int] = None
    status: Optional[str] = None
    other_employee_id: Optional[int] = None


class Notifier(Protocol):
    async def notify_assignment(self, employee: Employee, job: Job, company: Optional[Company]) -> None: ...

    async def notify_swap_decision(
        self,
        employee: Employee,
        status: str,
        job: Optional[Job],
        other_employee: Employee,
        company: Optional[Company] = None,
    ) -> None: ...

    async def send_payment_reminder(
        self, invoice: Invoice, customer: Customer, company: Optional[Company]
    ) -> None: ...


def format_job_time(job: Optional[Job]) -> str:
    if not job or not job.scheduled_for:
        return "Time TBD"
    return job.scheduled_for.strftime("%d/%m/%Y %H:%M")


def format_job_address(job: Job) -> str:
    return ", ".join(part for part in [job.location, job.city, job.postcode] if part)


class EmailNotifier:
    """Notifier backed by the Resend email service"""

    def __init__(self, company_name_fallback: str = "Your Company"):
        self.company_name_fallback = company_name_fallback

    def _company_name(self, company: Optional[Company]) -> str:
        return company.name if company and company.name else self.company_name_fallback

    async def notify_assignment(self, employee: Employee, job: Job, company: Optional[Company]) -> None:
        from ..email_service import send_job_assignment_email

        if not employee.email:
            raise ValueError(f"Employee {employee.id} has no email address")

        await send_job_assignment_email(
            to=employee.email,
            employee_name=employee.full_name,
            job_title=job.title,
            job_time=format_job_time(job),
            address=format_job_address(job),
            company_name=self._company_name(company),
            job_url=f"{FRONTEND_URL}/employee/jobs/{job.id}",
        )

    async def notify_swap_decision(
        self,
        employee: Employee,
        status: str,
        job: Optional[Job],
        other_employee: Employee,
        company: Optional[Company] = None,
    ) -> None:
        from ..email_service import send_shift_swap_decision_email

        if not employee.email:
            raise ValueError(f"Employee {employee.id} has no email address")

        await send_shift_swap_decision_email(
            to=employee.email,
            employee_name=employee.full_name,
            status=status,
            job_title=job.title if job else "Current assignment",
            job_time=format_job_time(job),
            other_employee_name=other_employee.full_name,
            company_name=self._company_name(company),
        )

    async def send_payment_reminder(
        self, invoice: Invoice, customer: Customer, company: Optional[Company]
    ) -> None:
        from ..email_service import send_payment_reminder_email

        if not customer.email:
            raise ValueError(f"Customer {customer.id} has no email address")

        due_date = invoice.due_at or datetime.utcnow()
        days_overdue = max(0, (datetime.utcnow().date() - due_date.date()).days)

        await send_payment_reminder_email(
            to=customer.email,
            customer_name=customer.full_name,
            invoice_number=invoice.invoice_number,
            amount=f"{invoice.currency} {float(invoice.total or 0):.2f}",
            due_date=due_date.strftime("%d/%m/%Y"),
            days_overdue=days_overdue,
            company_name=self._company_name(company),
            payment_url=f"{FRONTEND_URL}/portal/dashboard",
        )


class NotificationDispatcher:
    """Resolves intents against the store and hands them to a notifier"""

    def __init__(self, db: Session, notifier: Notifier):
        self.db = db
        self.notifier = notifier

    def _employee(self, company_id: int, employee_id: Optional[int]) -> Optional[Employee]:
        if employee_id is None:
            return None
        return (
            self.db.query(Employee)
            .filter(Employee.id == employee_id, Employee.company_id == company_id)
            .first()
        )

    def _job(self, company_id: int, job_id: Optional[int]) -> Optional[Job]:
        if job_id is None:
            return None
        return self.db.query(Job).filter(Job.id == job_id, Job.company_id == company_id).first()

    async def deliver(self, intents: list[NotificationIntent]) -> dict:
        """
        Deliver every intent independently.

        Returns:
            Dict with delivered/failed counts and per-intent errors
        """
        result = {"delivered": 0, "failed": 0, "errors": []}

        for intent in intents:
            try:
                employee = self._employee(intent.company_id, intent.employee_id)
                if employee is None:
                    raise LookupError(f"Employee {intent.employee_id} not found")

                job = self._job(intent.company_id, intent.job_id)
                company = self.db.query(Company).filter(Company.id == intent.company_id).first()

                if intent.kind == "assignment":
                    if job is None:
                        raise LookupError(f"Job {intent.job_id} not found")
                    logger.info(f"📧 Sending assignment notice for job {job.id} to employee {employee.id}")
                    await self.notifier.notify_assignment(employee, job, company)
                else:
                    other = self._employee(intent.company_id, intent.other_employee_id)
                    if other is None:
                        raise LookupError(f"Employee {intent.other_employee_id} not found")
                    logger.info(f"📧 Sending swap {intent.status} notice to employee {employee.id}")
                    await self.notifier.notify_swap_decision(employee, intent.status or "", job, other, company)

                result["delivered"] += 1
            except Exception as e:
                result["failed"] += 1
                result["errors"].append({"kind": intent.kind, "employeeId": intent.employee_id, "error": str(e)})
                logger.error(f"❌ Failed to deliver {intent.kind} notification to employee {intent.employee_id}: {e}")

        return result


async def deliver_notifications(
    intents: list[NotificationIntent],
    notifier: Notifier,
    session_factory: sessionmaker = SessionLocal,
) -> dict:
    """
    Background task entry point: deliver intents with a session of its own,
    since the request session is closed once the response has been sent.
    """
    db = session_factory()
    try:
        outcome = await NotificationDispatcher(db, notifier).deliver(intents)
    finally:
        db.close()

    if outcome["failed"]:
        logger.warning(f"⚠️ {outcome['failed']} of {len(intents)} notification(s) not delivered")
    return outcome
