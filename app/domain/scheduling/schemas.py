"""Scheduling domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...config import RECURRENCE_MAX_OCCURRENCES
from ...models import Job
from ...shared.validators import parse_iso_datetime, validate_days_of_week

# ============================================================================
# JOBS & RECURRING SERIES
# ============================================================================


class JobResponse(BaseModel):
    """Schema for a job row"""

    id: int
    title: str
    status: str
    recurrence: Optional[str] = None
    recurrenceEndDate: Optional[datetime] = None
    parentJobId: Optional[int] = None
    customerId: Optional[int] = None
    assignedTo: Optional[int] = None
    scheduledFor: Optional[datetime] = None
    scheduledEnd: Optional[datetime] = None
    durationMinutes: Optional[int] = None
    employeeAccepted: bool = False
    estimatedPrice: Optional[float] = None
    currency: Optional[str] = None
    planId: Optional[int] = None

    @classmethod
    def from_job(cls, job: Job) -> "JobResponse":
        return cls(
            id=job.id,
            title=job.title,
            status=job.status,
            recurrence=job.recurrence,
            recurrenceEndDate=job.recurrence_end_date,
            parentJobId=job.parent_job_id,
            customerId=job.customer_id,
            assignedTo=job.assigned_to,
            scheduledFor=job.scheduled_for,
            scheduledEnd=job.scheduled_end,
            durationMinutes=job.duration_minutes,
            employeeAccepted=bool(job.employee_accepted),
            estimatedPrice=float(job.estimated_price) if job.estimated_price is not None else None,
            currency=job.currency,
            planId=job.plan_id,
        )


class CreateSeriesRequest(BaseModel):
    """Schema for expanding a template into a recurring series"""

    templateId: int
    pattern: str
    startDate: Optional[date] = None
    endDate: Optional[date] = None
    daysOfWeek: Optional[list[int]] = None  # 0 = Sunday ... 6 = Saturday, weekly only
    maxOccurrences: int = Field(RECURRENCE_MAX_OCCURRENCES, ge=1, le=366)

    @field_validator("startDate", "endDate", mode="before")
    @classmethod
    def parse_date(cls, v):
        if isinstance(v, str):
            parsed = parse_iso_datetime(v)
            return parsed.date() if parsed else None
        return v

    @field_validator("daysOfWeek")
    @classmethod
    def validate_days(cls, v):
        return validate_days_of_week(v)


class DateRange(BaseModel):
    start: date
    end: date


class CreateSeriesResponse(BaseModel):
    occurrenceCount: int
    occurrences: list[JobResponse]
    pattern: str
    dateRange: DateRange


class SeriesSummary(JobResponse):
    """A recurring template with occurrence counts"""

    childJobCount: int = 0
    completedCount: int = 0
    upcomingCount: int = 0


class SeriesStats(BaseModel):
    total: int
    completed: int
    scheduled: int
    cancelled: int


class SeriesDetail(BaseModel):
    parent: JobResponse
    children: list[JobResponse]
    stats: SeriesStats


# ============================================================================
# CALENDAR
# ============================================================================


class CustomerSummary(BaseModel):
    id: int
    name: str
    email: Optional[str] = None


class AssigneeSummary(BaseModel):
    id: int
    name: str


class CalendarEventProps(BaseModel):
    customer: Optional[CustomerSummary] = None
    assignee: Optional[AssigneeSummary] = None
    location: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    estimatedPrice: Optional[float] = None
    currency: Optional[str] = None
    durationMinutes: Optional[int] = None


class CalendarEvent(BaseModel):
    id: int
    title: str
    start: datetime
    end: datetime
    allDay: bool = False
    status: str
    priority: Optional[str] = None
    color: str
    resourceId: Optional[int] = None
    parentJobId: Optional[int] = None
    extendedProps: CalendarEventProps


class CalendarResource(BaseModel):
    id: int
    title: str
    role: Optional[str] = None
    color: str


class TimeOffEntry(BaseModel):
    id: int
    name: str
    type: str


class TimeOffDay(BaseModel):
    employees: list[TimeOffEntry] = []


class HolidayEntry(BaseModel):
    title: str


class DailyStats(BaseModel):
    date: str
    total: int
    pending: int
    scheduled: int
    inProgress: int
    completed: int
    cancelled: int
    totalRevenue: float


class CalendarMeta(BaseModel):
    totalJobs: int
    dateRange: DateRange
    view: str


class CalendarResponse(BaseModel):
    events: list[CalendarEvent]
    resources: list[CalendarResource]
    byDay: dict[str, list[CalendarEvent]]
    byResource: dict[str, list[CalendarEvent]]
    dailyStats: list[DailyStats]
    timeOffByDate: dict[str, TimeOffDay]
    holidaysByDate: dict[str, list[HolidayEntry]]
    meta: CalendarMeta


# ============================================================================
# BULK MUTATION
# ============================================================================


class BulkChanges(BaseModel):
    """One change applied uniformly to every job in the batch"""

    scheduledFor: Optional[str] = None
    scheduledEnd: Optional[str] = None
    assignedTo: Optional[int] = None
    status: Optional[str] = None


class BulkMutationRequest(BaseModel):
    action: str  # reschedule, assign, updateStatus
    jobIds: list[int]
    changes: BulkChanges = Field(default_factory=BulkChanges)


class BulkMutationResponse(BaseModel):
    success: list[int]
    failed: list[int]
    message: str


# ============================================================================
# SHIFT SWAPS
# ============================================================================


class ResolveSwapRequest(BaseModel):
    status: str  # approved or rejected


class SwapResolutionResponse(BaseModel):
    ok: bool = True
    swapId: int
    status: str


class ShiftSwapResponse(BaseModel):
    id: int
    status: str
    fromJobId: int
    toJobId: int
    fromEmployeeId: int
    toEmployeeId: int
    fromEmployeeName: Optional[str] = None
    toEmployeeName: Optional[str] = None
    fromJobTitle: Optional[str] = None
    toJobTitle: Optional[str] = None
    reason: Optional[str] = None
    requestedByRole: Optional[str] = None
    createdAt: Optional[datetime] = None
