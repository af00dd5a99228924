"""Invoicing repository - Database operations for invoices"""

from sqlalchemy.orm import Session, joinedload

from ...models import Invoice

UNPAID_STATUSES = ("sent", "overdue")


class InvoiceRepository:
    """Repository for invoice database operations"""

    @staticmethod
    def get_unpaid_with_due_date(db: Session, company_id: int) -> list[Invoice]:
        """Get sent or overdue invoices that carry a due date, with customer and company"""
        return (
            db.query(Invoice)
            .options(joinedload(Invoice.customer), joinedload(Invoice.company))
            .filter(
                Invoice.company_id == company_id,
                Invoice.status.in_(UNPAID_STATUSES),
                Invoice.due_at.isnot(None),
            )
            .order_by(Invoice.due_at.asc(), Invoice.id.asc())
            .all()
        )
