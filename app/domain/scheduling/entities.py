"""
Scheduling domain value objects

Templates and occurrences share the jobs table but not a shape: a
JobTemplate owns the recurrence rule, a JobOccurrence owns the parent
reference. Neither carries the other's field, so an occurrence with a
recurrence rule cannot be built.
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

from ...models import Job

RecurrencePattern = Literal["daily", "weekly", "biweekly", "monthly"]
JobStatus = Literal["pending", "scheduled", "in-progress", "completed", "cancelled"]

RECURRENCE_PATTERNS = ("daily", "weekly", "biweekly", "monthly")
JOB_STATUSES = ("pending", "scheduled", "in-progress", "completed", "cancelled")

# Columns copied from a template onto each generated occurrence
CORE_FIELDS = (
    "company_id",
    "title",
    "description",
    "customer_id",
    "assigned_to",
    "location",
    "city",
    "postcode",
    "access_instructions",
    "parking_instructions",
    "special_instructions",
    "duration_minutes",
    "priority",
    "estimated_price",
    "currency",
    "internal_notes",
    "plan_id",
)


class JobCore(BaseModel):
    model_config = ConfigDict(frozen=True)

    company_id: int
    title: str
    description: Optional[str] = None
    customer_id: Optional[int] = None
    assigned_to: Optional[int] = None
    location: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    access_instructions: Optional[str] = None
    parking_instructions: Optional[str] = None
    special_instructions: Optional[str] = None
    duration_minutes: Optional[int] = 60
    priority: Optional[str] = "normal"
    estimated_price: Optional[Decimal] = None
    currency: Optional[str] = "GBP"
    internal_notes: Optional[str] = None
    plan_id: Optional[int] = None


class JobTemplate(BaseModel):
    """A job that owns a recurrence rule and spawns occurrences"""

    model_config = ConfigDict(frozen=True)

    id: int
    core: JobCore
    scheduled_for: Optional[datetime] = None
    scheduled_end: Optional[datetime] = None
    recurrence: Optional[RecurrencePattern] = None
    recurrence_end_date: Optional[datetime] = None

    @classmethod
    def from_row(cls, job: Job) -> "JobTemplate":
        recurrence = job.recurrence if job.recurrence in RECURRENCE_PATTERNS else None
        return cls(
            id=job.id,
            core=JobCore(**{field: getattr(job, field) for field in CORE_FIELDS}),
            scheduled_for=job.scheduled_for,
            scheduled_end=job.scheduled_end,
            recurrence=recurrence,
            recurrence_end_date=job.recurrence_end_date,
        )

    @property
    def duration(self):
        """Original start→end offset, or None when the template has no explicit end"""
        if self.scheduled_for and self.scheduled_end:
            return self.scheduled_end - self.scheduled_for
        return None


class JobOccurrence(BaseModel):
    """One dated job generated from a template"""

    model_config = ConfigDict(frozen=True)

    parent_job_id: int
    core: JobCore
    scheduled_for: datetime
    scheduled_end: Optional[datetime] = None
    status: JobStatus = "scheduled"

    def to_row(self) -> Job:
        return Job(
            **self.core.model_dump(),
            scheduled_for=self.scheduled_for,
            scheduled_end=self.scheduled_end,
            status=self.status,
            recurrence="none",
            parent_job_id=self.parent_job_id,
        )
