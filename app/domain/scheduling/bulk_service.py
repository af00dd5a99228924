"""Bulk schedule service - Applies one change to many jobs with per-job isolation"""

import logging

from sqlalchemy.orm import Session

from ...auth import AuthSession
from ...models import Job
from ...services.audit_service import log_event
from ...shared.errors import ConflictError, NotFoundError, SchedulingError, ValidationError
from ...shared.validators import parse_iso_datetime
from .entities import JOB_STATUSES
from .repository import EmployeeRepository, JobRepository
from .schemas import BulkChanges, BulkMutationRequest, BulkMutationResponse

logger = logging.getLogger(__name__)

BULK_ACTIONS = ("reschedule", "assign", "updateStatus")
LOCKED_STATUSES = ("completed", "cancelled")


class BulkScheduleService:
    """Service layer for calendar bulk edits"""

    def __init__(self, db: Session):
        self.db = db
        self.jobs = JobRepository()
        self.employees = EmployeeRepository()

    def _build_values(self, action: str, job: Job, changes: BulkChanges, session: AuthSession) -> dict:
        """Column values for one job, or a domain error explaining why it is skipped"""
        if action == "reschedule":
            if not changes.scheduledFor:
                raise ValidationError("scheduledFor is required to reschedule")
            if job.status in LOCKED_STATUSES:
                raise ConflictError(f"Cannot reschedule a {job.status} job")
            try:
                scheduled_for = parse_iso_datetime(changes.scheduledFor)
                scheduled_end = parse_iso_datetime(changes.scheduledEnd) if changes.scheduledEnd else None
            except ValueError as e:
                raise ValidationError(f"Invalid date: {e}") from e
            return {"scheduled_for": scheduled_for, "scheduled_end": scheduled_end}

        if action == "assign":
            if changes.assignedTo is None:
                raise ValidationError("assignedTo is required to assign")
            if not self.employees.get_employee(self.db, changes.assignedTo, session.company_id):
                raise NotFoundError(f"Employee {changes.assignedTo} not found")
            return {"assigned_to": changes.assignedTo}

        if changes.status not in JOB_STATUSES:
            raise ValidationError(f"Invalid status: {changes.status}")
        return {"status": changes.status}

    def apply(self, request: BulkMutationRequest, session: AuthSession) -> BulkMutationResponse:
        """
        Apply the request's change to each job independently.

        Each job commits on its own, so a failure only affects that job.
        The outcome is always written to the audit log.

        Raises:
            ValidationError: If the action is unknown or no job ids were given
        """
        if request.action not in BULK_ACTIONS:
            raise ValidationError(f"Unknown bulk action: {request.action}")
        if not request.jobIds:
            raise ValidationError("Action and job IDs are required")

        success: list[int] = []
        failed: list[int] = []

        for job_id in request.jobIds:
            try:
                job = self.jobs.get_job(self.db, job_id, session.company_id)
                if not job:
                    raise NotFoundError(f"Job {job_id} not found")

                values = self._build_values(request.action, job, request.changes, session)
                self.jobs.update_job(self.db, job_id, session.company_id, **values)
                self.db.commit()
                success.append(job_id)
            except SchedulingError as e:
                self.db.rollback()
                logger.warning(f"⚠️ Bulk {request.action} skipped job {job_id}: {e.detail}")
                failed.append(job_id)
            except Exception as e:
                self.db.rollback()
                logger.error(f"❌ Bulk {request.action} failed for job {job_id}: {e}")
                failed.append(job_id)

        results = {"success": success, "failed": failed}
        log_event(
            self.db,
            company_id=session.company_id,
            event_type=f"bulk_{request.action}",
            entity_type="job",
            entity_id="multiple",
            description=f"Bulk {request.action}: {len(success)} succeeded, {len(failed)} failed",
            metadata={
                "action": request.action,
                "jobIds": request.jobIds,
                "changes": request.changes.model_dump(exclude_none=True),
                "results": results,
                "performedBy": session.user_id,
            },
            user_id=session.user_id,
        )

        logger.info(f"✅ Bulk {request.action}: {len(success)} updated, {len(failed)} failed")
        return BulkMutationResponse(
            success=success,
            failed=failed,
            message=f"{len(success)} jobs updated, {len(failed)} failed",
        )
