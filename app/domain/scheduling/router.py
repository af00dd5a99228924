"""Scheduling router - FastAPI endpoints for recurring series, calendar and shift swaps"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session, sessionmaker

from ...auth import AuthSession, get_current_session
from ...database import SessionLocal, get_db
from ...services.notification_service import EmailNotifier, Notifier, deliver_notifications
from .bulk_service import BulkScheduleService
from .calendar_service import CalendarService, parse_calendar_range
from .holidays import HolidayCache, holiday_cache
from .schemas import (
    BulkMutationRequest,
    BulkMutationResponse,
    CalendarResponse,
    CreateSeriesRequest,
    CreateSeriesResponse,
    ResolveSwapRequest,
    SeriesDetail,
    SeriesSummary,
    ShiftSwapResponse,
    SwapResolutionResponse,
)
from .series_service import SeriesService
from .swap_service import ShiftSwapService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Scheduling"])


def get_holiday_cache() -> HolidayCache:
    return holiday_cache


def get_notifier() -> Notifier:
    return EmailNotifier()


def get_notification_session_factory() -> sessionmaker:
    return SessionLocal


def get_series_service(db: Session = Depends(get_db)) -> SeriesService:
    """Dependency injection for SeriesService"""
    return SeriesService(db)


def get_calendar_service(
    db: Session = Depends(get_db), holidays: HolidayCache = Depends(get_holiday_cache)
) -> CalendarService:
    """Dependency injection for CalendarService"""
    return CalendarService(db, holidays)


def get_bulk_service(db: Session = Depends(get_db)) -> BulkScheduleService:
    """Dependency injection for BulkScheduleService"""
    return BulkScheduleService(db)


def get_swap_service(db: Session = Depends(get_db)) -> ShiftSwapService:
    """Dependency injection for ShiftSwapService"""
    return ShiftSwapService(db)


# ============================================================================
# RECURRING SERIES
# ============================================================================


@router.post("/jobs/recurring", response_model=CreateSeriesResponse)
async def create_recurring_series(
    body: CreateSeriesRequest,
    session: AuthSession = Depends(get_current_session),
    service: SeriesService = Depends(get_series_service),
):
    """Generate the occurrences of a recurring job"""
    return service.create_series(body, session)


@router.get("/jobs/recurring", response_model=list[SeriesSummary])
async def list_recurring_series(
    session: AuthSession = Depends(get_current_session),
    service: SeriesService = Depends(get_series_service),
):
    """List recurring templates with occurrence counts"""
    return service.list_series(session)


@router.get("/jobs/recurring/{template_id}", response_model=SeriesDetail)
async def get_recurring_series(
    template_id: int,
    session: AuthSession = Depends(get_current_session),
    service: SeriesService = Depends(get_series_service),
):
    """Get a recurring template with its occurrences"""
    return service.get_series(template_id, session)


# ============================================================================
# CALENDAR
# ============================================================================


@router.get("/jobs/calendar", response_model=CalendarResponse)
async def get_calendar(
    start: str = Query(...),
    end: str = Query(...),
    resourceId: Optional[int] = Query(None),
    view: str = Query("month"),
    session: AuthSession = Depends(get_current_session),
    service: CalendarService = Depends(get_calendar_service),
):
    """Jobs, time-off and holidays for a date range"""
    range_start, range_end = parse_calendar_range(start, end)
    return await service.get_calendar(range_start, range_end, session, resource_id=resourceId, view=view)


@router.post("/jobs/calendar/bulk", response_model=BulkMutationResponse)
async def bulk_update_calendar(
    body: BulkMutationRequest,
    session: AuthSession = Depends(get_current_session),
    service: BulkScheduleService = Depends(get_bulk_service),
):
    """Reschedule, assign or change status for many jobs at once"""
    return service.apply(body, session)


# ============================================================================
# SHIFT SWAPS
# ============================================================================


@router.get("/shift-swaps", response_model=list[ShiftSwapResponse])
async def list_shift_swaps(
    status: Optional[str] = Query(None),
    session: AuthSession = Depends(get_current_session),
    service: ShiftSwapService = Depends(get_swap_service),
):
    """List shift swap requests, newest first"""
    return service.list_swaps(session, status)


@router.patch("/shift-swaps/{swap_id}", response_model=SwapResolutionResponse)
async def resolve_shift_swap(
    swap_id: int,
    body: ResolveSwapRequest,
    background_tasks: BackgroundTasks,
    session: AuthSession = Depends(get_current_session),
    service: ShiftSwapService = Depends(get_swap_service),
    notifier: Notifier = Depends(get_notifier),
    session_factory: sessionmaker = Depends(get_notification_session_factory),
):
    """Approve or reject a pending shift swap"""
    resolution = service.resolve(swap_id, body.status, session)

    # Emails go out after the response; the decision is already committed
    background_tasks.add_task(deliver_notifications, resolution.notifications, notifier, session_factory)

    return SwapResolutionResponse(swapId=resolution.swapId, status=resolution.status)
