"""
Email Service using Resend
Compiles MJML templates to HTML and delivers workforce and billing notifications
"""

import asyncio
import logging
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import EMAIL_FROM_ADDRESS, RESEND_API_KEY
from .email_templates import (
    job_assignment_template,
    payment_reminder_template,
    shift_swap_decision_template,
)

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        if result.errors:
            logger.warning(f"MJML compilation warnings: {result.errors}")
        return result.html
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise Exception(f"Failed to compile MJML template: {str(e)}") from e


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email through Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address

    Returns:
        Send response dict
    """
    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise Exception("Email service not configured")

    html_content = compile_mjml_to_html(mjml_content)
    recipients = [to] if isinstance(to, str) else to

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        response = await asyncio.to_thread(
            resend.Emails.send,
            {
                "from": from_address or EMAIL_FROM_ADDRESS,
                "to": recipients,
                "subject": subject,
                "html": html_content,
            }
        )
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise Exception(f"Failed to send email: {str(e)}") from e


async def send_job_assignment_email(
    to: str,
    employee_name: str,
    job_title: str,
    job_time: str,
    address: str,
    company_name: str,
    job_url: Optional[str] = None,
) -> dict:
    """Tell an employee about a job that is now theirs"""
    mjml_content = job_assignment_template(employee_name, job_title, job_time, address, company_name, job_url)
    return await send_email(to=to, subject=f"New job assigned: {job_title}", mjml_content=mjml_content)


async def send_shift_swap_decision_email(
    to: str,
    employee_name: str,
    status: str,
    job_title: str,
    job_time: str,
    other_employee_name: str,
    company_name: str,
) -> dict:
    """Tell an employee whether their shift swap was approved or rejected"""
    mjml_content = shift_swap_decision_template(
        employee_name, status, job_title, job_time, other_employee_name, company_name
    )
    return await send_email(to=to, subject=f"Shift swap {status}", mjml_content=mjml_content)


async def send_payment_reminder_email(
    to: str,
    customer_name: str,
    invoice_number: str,
    amount: str,
    due_date: str,
    days_overdue: int,
    company_name: str,
    payment_url: Optional[str] = None,
) -> dict:
    """Nudge a customer about an unpaid invoice"""
    mjml_content = payment_reminder_template(
        customer_name, invoice_number, amount, due_date, days_overdue, company_name, payment_url
    )
    return await send_email(
        to=to, subject=f"Payment Reminder: Invoice {invoice_number}", mjml_content=mjml_content
    )
