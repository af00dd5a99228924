"""Recurring series service - Expands templates into dated occurrence jobs"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import AuthSession
from ...models import Job
from ...services.audit_service import record_event
from ...shared.errors import NotFoundError, ValidationError
from .entities import JobOccurrence, JobTemplate
from .recurrence import default_end_date, expand_recurrence
from .repository import ChecklistRepository, JobRepository
from .schemas import (
    CreateSeriesRequest,
    CreateSeriesResponse,
    DateRange,
    JobResponse,
    SeriesDetail,
    SeriesStats,
    SeriesSummary,
)

logger = logging.getLogger(__name__)


def build_occurrences(template: JobTemplate, starts: list[datetime]) -> list[JobOccurrence]:
    """Materialize occurrence values for each start, keeping the template's start→end offset"""
    duration = template.duration
    return [
        JobOccurrence(
            parent_job_id=template.id,
            core=template.core,
            scheduled_for=start,
            scheduled_end=start + duration if duration is not None else None,
        )
        for start in starts
    ]


class SeriesService:
    """Service layer for recurring job series"""

    def __init__(self, db: Session):
        self.db = db
        self.jobs = JobRepository()
        self.checklists = ChecklistRepository()

    def _get_template_row(self, template_id: int, session: AuthSession) -> Job:
        job = self.jobs.get_job(self.db, template_id, session.company_id)
        if not job:
            raise NotFoundError("Parent job not found")
        if job.parent_job_id is not None:
            raise ValidationError("An occurrence cannot be used as a recurrence template")
        return job

    def _clone_checklist(self, occurrence: Job) -> None:
        """Copy the plan's tasks onto an occurrence; a failure only loses the checklist"""
        try:
            with self.db.begin_nested():
                plan_tasks = self.checklists.get_plan_tasks(self.db, occurrence.plan_id)
                if plan_tasks:
                    self.checklists.clone_plan_tasks(self.db, occurrence, plan_tasks)
        except Exception as e:
            logger.error(f"❌ Failed to create job tasks from plan {occurrence.plan_id} for job {occurrence.id}: {e}")

    def create_series(self, data: CreateSeriesRequest, session: AuthSession) -> CreateSeriesResponse:
        """Generate occurrences for a template and mark it as recurring"""
        if not data.pattern or data.pattern == "none":
            raise ValidationError("Recurrence pattern is required")

        row = self._get_template_row(data.templateId, session)
        template = JobTemplate.from_row(row)

        anchor = template.scheduled_for or datetime.combine(
            data.startDate or datetime.utcnow().date(), datetime.min.time()
        )
        start = data.startDate or anchor.date()
        end = data.endDate or default_end_date(start)

        starts = expand_recurrence(
            anchor,
            data.pattern,
            start_date=start,
            end_date=end,
            days_of_week=data.daysOfWeek,
            max_occurrences=data.maxOccurrences,
        )
        logger.info(
            f"🔁 Expanding job {template.id} ({data.pattern}) {start} → {end}: {len(starts)} occurrence(s)"
        )

        try:
            created: list[Job] = []
            for occurrence in build_occurrences(template, starts):
                job = occurrence.to_row()
                self.db.add(job)
                self.db.flush()
                if job.plan_id:
                    self._clone_checklist(job)
                created.append(job)

            row.recurrence = data.pattern
            row.recurrence_end_date = datetime.combine(end, datetime.min.time())
            row.updated_at = datetime.utcnow()

            record_event(
                self.db,
                company_id=session.company_id,
                event_type="recurring_jobs_created",
                entity_type="job",
                entity_id=template.id,
                description=f'{len(created)} recurring jobs created for "{template.core.title}"',
                metadata={
                    "parentJobId": template.id,
                    "recurrence": data.pattern,
                    "startDate": start,
                    "endDate": end,
                    "jobsCreated": len(created),
                    "createdBy": session.user_id,
                },
                user_id=session.user_id,
            )

            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create recurring series for job {template.id}: {e}")
            raise

        logger.info(f"✅ Created {len(created)} occurrence(s) for job {template.id}")
        return CreateSeriesResponse(
            occurrenceCount=len(created),
            occurrences=[JobResponse.from_job(job) for job in created],
            pattern=data.pattern,
            dateRange=DateRange(start=start, end=end),
        )

    def list_series(self, session: AuthSession) -> list[SeriesSummary]:
        """All recurring templates with occurrence counts"""
        summaries = []
        for template in self.jobs.get_recurring_templates(self.db, session.company_id):
            counts = self.jobs.count_occurrences_by_status(self.db, template.id, session.company_id)
            summaries.append(
                SeriesSummary(
                    **JobResponse.from_job(template).model_dump(),
                    childJobCount=sum(counts.values()),
                    completedCount=counts.get("completed", 0),
                    upcomingCount=counts.get("scheduled", 0),
                )
            )
        return summaries

    def get_series(self, template_id: int, session: AuthSession) -> SeriesDetail:
        """A template with its occurrences and status tallies"""
        template = self._get_template_row(template_id, session)
        children = self.jobs.get_occurrences(self.db, template.id, session.company_id)

        def count(status: Optional[str]) -> int:
            return sum(1 for child in children if child.status == status)

        return SeriesDetail(
            parent=JobResponse.from_job(template),
            children=[JobResponse.from_job(child) for child in children],
            stats=SeriesStats(
                total=len(children),
                completed=count("completed"),
                scheduled=count("scheduled"),
                cancelled=count("cancelled"),
            ),
        )
