"""Calendar service - Combines jobs, approved time-off and public holidays into calendar views"""

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import AuthSession
from ...models import Employee, Job, TimeOffRequest
from ...shared.errors import ValidationError
from ...shared.validators import parse_iso_datetime, to_date_key
from .holidays import HolidayCache, PublicHoliday
from .repository import EmployeeRepository, JobRepository, TimeOffRepository
from .schemas import (
    AssigneeSummary,
    CalendarEvent,
    CalendarEventProps,
    CalendarMeta,
    CalendarResource,
    CalendarResponse,
    CustomerSummary,
    DailyStats,
    DateRange,
    HolidayEntry,
    TimeOffDay,
    TimeOffEntry,
)

logger = logging.getLogger(__name__)

DEFAULT_EVENT_MINUTES = 60
UNASSIGNED_KEY = "unassigned"

STATUS_COLORS = {
    "scheduled": "#3B82F6",  # blue
    "in-progress": "#F59E0B",  # amber
    "completed": "#10B981",  # green
    "cancelled": "#EF4444",  # red
    "pending": "#6B7280",  # gray
}
DEFAULT_STATUS_COLOR = "#6B7280"

EMPLOYEE_COLORS = [
    "#3B82F6",
    "#10B981",
    "#F59E0B",
    "#EF4444",
    "#8B5CF6",
    "#EC4899",
    "#06B6D4",
    "#84CC16",
]


def get_status_color(status: Optional[str]) -> str:
    return STATUS_COLORS.get(status or "", DEFAULT_STATUS_COLOR)


def get_employee_color(employee_id: int) -> str:
    return EMPLOYEE_COLORS[employee_id % len(EMPLOYEE_COLORS)]


def parse_calendar_range(start: str, end: str) -> tuple[datetime, datetime]:
    """
    Parse query range bounds. A date-only end covers that whole day.

    Raises:
        ValidationError: If a bound is missing, malformed, or the range is inverted
    """
    if not start or not end:
        raise ValidationError("Start and end dates are required")
    try:
        range_start = parse_iso_datetime(start)
        range_end = parse_iso_datetime(end)
    except ValueError as e:
        raise ValidationError(f"Invalid date range: {e}") from e

    if len(end.strip()) == 10:
        range_end = range_end + timedelta(days=1) - timedelta(microseconds=1)

    if range_end < range_start:
        raise ValidationError("End date must not be before start date")
    return range_start, range_end


def build_event(job: Job) -> CalendarEvent:
    """Turn a job into a calendar event with a resolved end time"""
    start = job.scheduled_for
    end = job.scheduled_end or start + timedelta(minutes=job.duration_minutes or DEFAULT_EVENT_MINUTES)

    customer = None
    if job.customer:
        customer = CustomerSummary(id=job.customer.id, name=job.customer.full_name, email=job.customer.email)

    assignee = None
    if job.assignee:
        assignee = AssigneeSummary(id=job.assignee.id, name=job.assignee.full_name)

    return CalendarEvent(
        id=job.id,
        title=job.title,
        start=start,
        end=end,
        status=job.status,
        priority=job.priority,
        color=get_status_color(job.status),
        resourceId=job.assigned_to,
        parentJobId=job.parent_job_id,
        extendedProps=CalendarEventProps(
            customer=customer,
            assignee=assignee,
            location=job.location,
            city=job.city,
            postcode=job.postcode,
            estimatedPrice=float(job.estimated_price) if job.estimated_price is not None else None,
            currency=job.currency,
            durationMinutes=job.duration_minutes,
        ),
    )


def build_time_off_by_date(
    requests: list[TimeOffRequest], range_start: datetime, range_end: datetime
) -> dict[str, TimeOffDay]:
    """
    Clip each approved request to the range and list each employee once per
    day, however many of their requests overlap that day.
    """
    by_date: dict[str, TimeOffDay] = {}

    for request in requests:
        employee = request.employee
        if employee is None:
            continue

        day = max(request.start_date.date(), range_start.date())
        last_day = min(request.end_date.date(), range_end.date())

        while day <= last_day:
            entry = by_date.setdefault(to_date_key(day), TimeOffDay())
            if not any(existing.id == employee.id for existing in entry.employees):
                entry.employees.append(TimeOffEntry(id=employee.id, name=employee.full_name, type=request.type))
            day += timedelta(days=1)

    return dict(sorted(by_date.items()))


def build_holidays_by_date(holidays: list[PublicHoliday]) -> dict[str, list[HolidayEntry]]:
    by_date: dict[str, list[HolidayEntry]] = defaultdict(list)
    for holiday in holidays:
        by_date[to_date_key(holiday.date)].append(HolidayEntry(title=holiday.title))
    return dict(sorted(by_date.items()))


def build_daily_stats(by_day: dict[str, list[CalendarEvent]]) -> list[DailyStats]:
    stats = []
    for day, events in sorted(by_day.items()):

        def count(status: str) -> int:
            return sum(1 for event in events if event.status == status)

        stats.append(
            DailyStats(
                date=day,
                total=len(events),
                pending=count("pending"),
                scheduled=count("scheduled"),
                inProgress=count("in-progress"),
                completed=count("completed"),
                cancelled=count("cancelled"),
                totalRevenue=round(sum(event.extendedProps.estimatedPrice or 0 for event in events), 2),
            )
        )
    return stats


def build_resources(employees: list[Employee]) -> list[CalendarResource]:
    return [
        CalendarResource(
            id=employee.id,
            title=employee.full_name,
            role=employee.role,
            color=employee.color or get_employee_color(employee.id),
        )
        for employee in employees
    ]


class CalendarService:
    """Service layer for calendar aggregation"""

    def __init__(self, db: Session, holidays: HolidayCache):
        self.db = db
        self.holidays = holidays

    async def get_calendar(
        self,
        range_start: datetime,
        range_end: datetime,
        session: AuthSession,
        resource_id: Optional[int] = None,
        view: str = "month",
    ) -> CalendarResponse:
        if range_end < range_start:
            raise ValidationError("End date must not be before start date")

        jobs = JobRepository.get_jobs_in_range(self.db, session.company_id, range_start, range_end, resource_id)
        employees = EmployeeRepository.get_employees(self.db, session.company_id)
        time_off = TimeOffRepository.get_approved_overlapping(self.db, session.company_id, range_start, range_end)
        holidays = await self.holidays.get_holidays_between(range_start.date(), range_end.date())

        events = [build_event(job) for job in jobs]

        by_day: dict[str, list[CalendarEvent]] = defaultdict(list)
        by_resource: dict[str, list[CalendarEvent]] = defaultdict(list)
        for event in events:
            by_day[to_date_key(event.start)].append(event)
            key = str(event.resourceId) if event.resourceId is not None else UNASSIGNED_KEY
            by_resource[key].append(event)

        logger.info(
            f"📅 Calendar for company {session.company_id}: {len(events)} jobs, "
            f"{len(time_off)} time-off requests, {len(holidays)} holidays"
        )

        return CalendarResponse(
            events=events,
            resources=build_resources(employees),
            byDay=dict(by_day),
            byResource=dict(by_resource),
            dailyStats=build_daily_stats(by_day),
            timeOffByDate=build_time_off_by_date(time_off, range_start, range_end),
            holidaysByDate=build_holidays_by_date(holidays),
            meta=CalendarMeta(
                totalJobs=len(jobs),
                dateRange=DateRange(start=range_start.date(), end=range_end.date()),
                view=view,
            ),
        )
