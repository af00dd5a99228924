"""Invoicing router - FastAPI endpoints for payment reminders"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import AuthSession, get_current_session
from ...database import get_db
from ...services.notification_service import EmailNotifier, Notifier
from .reminder_service import ReminderService
from .schemas import ReminderPreviewResponse, ReminderRunResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reminders", tags=["Reminders"])


def get_reminder_service(db: Session = Depends(get_db)) -> ReminderService:
    """Dependency injection for ReminderService"""
    return ReminderService(db)


def get_reminder_notifier() -> Notifier:
    return EmailNotifier()


@router.get("/process", response_model=ReminderPreviewResponse)
async def preview_reminders(
    session: AuthSession = Depends(get_current_session),
    service: ReminderService = Depends(get_reminder_service),
):
    """Preview invoices that are due a reminder today"""
    return service.preview(session)


@router.post("/process", response_model=ReminderRunResponse)
async def process_reminders(
    session: AuthSession = Depends(get_current_session),
    service: ReminderService = Depends(get_reminder_service),
    notifier: Notifier = Depends(get_reminder_notifier),
):
    """Send payment reminders for today's candidates"""
    return await service.process(session, notifier)
