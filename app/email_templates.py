"""
MJML Email Templates
Workforce and billing notifications rendered as responsive MJML
"""

from html import escape
from typing import Optional

THEME = {
    "primary": "#14b8a6",
    "background": "#f8fafc",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
    "success": "#10B981",
    "danger": "#EF4444",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    company_name: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="#ffffff" padding="40px 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>
            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              Sent by {escape(company_name)}
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def job_assignment_template(
    employee_name: str,
    job_title: str,
    job_time: str,
    address: str,
    company_name: str,
    job_url: Optional[str] = None,
) -> str:
    """New job assignment MJML template"""
    content = f"""
    <mj-text>
      Hi {escape(employee_name)},
    </mj-text>

    <mj-text>
      You have been assigned a new job.
    </mj-text>

    <mj-text padding="0 0 0 20px">
      • <strong>Job:</strong> {escape(job_title)}<br/>
      • <strong>When:</strong> {escape(job_time)}<br/>
      • <strong>Where:</strong> {escape(address or "Address TBD")}
    </mj-text>

    <mj-text color="{THEME['text_muted']}">
      Please open the job and confirm that you accept it.
    </mj-text>
    """

    return get_base_template(
        title="New job assigned",
        preview_text=f"{job_title} on {job_time}",
        content_sections=content,
        company_name=company_name,
        cta_url=job_url,
        cta_label="View Job",
    )


def shift_swap_decision_template(
    employee_name: str,
    status: str,
    job_title: str,
    job_time: str,
    other_employee_name: str,
    company_name: str,
) -> str:
    """Shift swap approved/rejected MJML template"""
    approved = status == "approved"
    color = THEME["success"] if approved else THEME["danger"]
    if approved:
        outcome = f"Your shift swap with {escape(other_employee_name)} has been approved. Your job is now:"
    else:
        outcome = f"Your shift swap with {escape(other_employee_name)} has been rejected. You keep your current job:"

    content = f"""
    <mj-text>
      Hi {escape(employee_name)},
    </mj-text>

    <mj-text color="{color}" font-weight="600">
      Swap {status}
    </mj-text>

    <mj-text>
      {outcome}
    </mj-text>

    <mj-text padding="0 0 0 20px">
      • <strong>Job:</strong> {escape(job_title)}<br/>
      • <strong>When:</strong> {escape(job_time)}
    </mj-text>
    """

    return get_base_template(
        title=f"Shift swap {status}",
        preview_text=f"Your shift swap was {status}",
        content_sections=content,
        company_name=company_name,
    )


def payment_reminder_template(
    customer_name: str,
    invoice_number: str,
    amount: str,
    due_date: str,
    days_overdue: int,
    company_name: str,
    payment_url: Optional[str] = None,
) -> str:
    """Invoice payment reminder MJML template"""
    if days_overdue > 0:
        timing = f"was due on {escape(due_date)} and is now {days_overdue} day(s) overdue"
    else:
        timing = f"is due on {escape(due_date)}"

    content = f"""
    <mj-text>
      Dear {escape(customer_name)},
    </mj-text>

    <mj-text>
      This is a friendly reminder that invoice <strong>{escape(invoice_number)}</strong> for
      <strong>{escape(amount)}</strong> {timing}.
    </mj-text>

    <mj-text color="{THEME['text_muted']}">
      If you have already made this payment, please disregard this message.
    </mj-text>
    """

    return get_base_template(
        title=f"Payment Reminder: Invoice {invoice_number}",
        preview_text=f"Invoice {invoice_number} - {amount}",
        content_sections=content,
        company_name=company_name,
        cta_url=payment_url,
        cta_label="Pay Invoice",
    )
