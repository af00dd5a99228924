"""Scheduling repository - Database operations for jobs, time-off and shift swaps"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ...models import Employee, Job, JobTask, PlanTask, ShiftSwapRequest, TimeOffRequest


class JobRepository:
    """Repository for job database operations"""

    @staticmethod
    def get_job(db: Session, job_id: int, company_id: int) -> Optional[Job]:
        """Get a job by ID, scoped to the tenant"""
        return db.query(Job).filter(Job.id == job_id, Job.company_id == company_id).first()

    @staticmethod
    def get_jobs_in_range(
        db: Session,
        company_id: int,
        range_start: datetime,
        range_end: datetime,
        assigned_to: Optional[int] = None,
    ) -> list[Job]:
        """Get jobs whose scheduled start falls inside the range, with customer and assignee"""
        query = (
            db.query(Job)
            .options(joinedload(Job.customer), joinedload(Job.assignee))
            .filter(
                Job.company_id == company_id,
                Job.scheduled_for >= range_start,
                Job.scheduled_for <= range_end,
            )
        )

        if assigned_to is not None:
            query = query.filter(Job.assigned_to == assigned_to)

        return query.order_by(Job.scheduled_for.asc(), Job.id.asc()).all()

    @staticmethod
    def get_recurring_templates(db: Session, company_id: int) -> list[Job]:
        """Get all jobs that own a recurrence rule"""
        return (
            db.query(Job)
            .options(joinedload(Job.customer), joinedload(Job.assignee))
            .filter(
                Job.company_id == company_id,
                Job.parent_job_id.is_(None),
                Job.recurrence.isnot(None),
                Job.recurrence != "none",
            )
            .order_by(Job.id.asc())
            .all()
        )

    @staticmethod
    def get_occurrences(db: Session, template_id: int, company_id: int) -> list[Job]:
        """Get a template's generated occurrences ordered by date"""
        return (
            db.query(Job)
            .options(joinedload(Job.customer), joinedload(Job.assignee))
            .filter(Job.parent_job_id == template_id, Job.company_id == company_id)
            .order_by(Job.scheduled_for.asc(), Job.id.asc())
            .all()
        )

    @staticmethod
    def count_occurrences_by_status(db: Session, template_id: int, company_id: int) -> dict[str, int]:
        """Count a template's occurrences grouped by status"""
        rows = (
            db.query(Job.status, func.count(Job.id))
            .filter(Job.parent_job_id == template_id, Job.company_id == company_id)
            .group_by(Job.status)
            .all()
        )
        return {status: count for status, count in rows}

    @staticmethod
    def update_job(db: Session, job_id: int, company_id: int, **values) -> int:
        """Single-statement update of one job; returns the matched row count"""
        values["updated_at"] = datetime.utcnow()
        return (
            db.query(Job)
            .filter(Job.id == job_id, Job.company_id == company_id)
            .update(values, synchronize_session=False)
        )


class ChecklistRepository:
    """Repository for cleaning plan tasks and their per-job copies"""

    @staticmethod
    def get_plan_tasks(db: Session, plan_id: int) -> list[PlanTask]:
        return db.query(PlanTask).filter(PlanTask.plan_id == plan_id).order_by(PlanTask.order.asc()).all()

    @staticmethod
    def clone_plan_tasks(db: Session, job: Job, plan_tasks: list[PlanTask]) -> list[JobTask]:
        """Copy plan tasks onto a job, preserving their order"""
        tasks = [
            JobTask(
                job_id=job.id,
                title=task.title,
                description=task.description,
                order=task.order if task.order is not None else 0,
            )
            for task in plan_tasks
        ]
        db.add_all(tasks)
        db.flush()
        return tasks


class EmployeeRepository:
    """Repository for employee lookups"""

    @staticmethod
    def get_employee(db: Session, employee_id: int, company_id: int) -> Optional[Employee]:
        return (
            db.query(Employee)
            .filter(Employee.id == employee_id, Employee.company_id == company_id)
            .first()
        )

    @staticmethod
    def get_employees(db: Session, company_id: int) -> list[Employee]:
        return db.query(Employee).filter(Employee.company_id == company_id).order_by(Employee.id.asc()).all()


class TimeOffRepository:
    """Repository for time-off requests (read-only here; HR owns the workflow)"""

    @staticmethod
    def get_approved_overlapping(
        db: Session, company_id: int, range_start: datetime, range_end: datetime
    ) -> list[TimeOffRequest]:
        """Get approved requests that overlap the range"""
        return (
            db.query(TimeOffRequest)
            .options(joinedload(TimeOffRequest.employee))
            .filter(
                TimeOffRequest.company_id == company_id,
                TimeOffRequest.status == "approved",
                TimeOffRequest.start_date <= range_end,
                TimeOffRequest.end_date >= range_start,
            )
            .order_by(TimeOffRequest.start_date.asc(), TimeOffRequest.id.asc())
            .all()
        )


class ShiftSwapRepository:
    """Repository for shift swap requests"""

    @staticmethod
    def get_swap(db: Session, swap_id: int, company_id: int, for_update: bool = False) -> Optional[ShiftSwapRequest]:
        query = db.query(ShiftSwapRequest).filter(
            ShiftSwapRequest.id == swap_id, ShiftSwapRequest.company_id == company_id
        )
        if for_update:
            query = query.with_for_update()
        return query.first()

    @staticmethod
    def get_swaps(db: Session, company_id: int, status: Optional[str] = None) -> list[ShiftSwapRequest]:
        query = (
            db.query(ShiftSwapRequest)
            .options(
                joinedload(ShiftSwapRequest.from_employee),
                joinedload(ShiftSwapRequest.to_employee),
                joinedload(ShiftSwapRequest.from_job),
                joinedload(ShiftSwapRequest.to_job),
            )
            .filter(ShiftSwapRequest.company_id == company_id)
        )
        if status:
            query = query.filter(ShiftSwapRequest.status == status)
        return query.order_by(ShiftSwapRequest.created_at.desc(), ShiftSwapRequest.id.desc()).all()

    @staticmethod
    def transition_status(db: Session, swap_id: int, company_id: int, from_status: str, to_status: str) -> int:
        """
        Conditional status change. Returns 1 only if the row was still in
        from_status, so a concurrent resolution makes this return 0.
        """
        return (
            db.query(ShiftSwapRequest)
            .filter(
                ShiftSwapRequest.id == swap_id,
                ShiftSwapRequest.company_id == company_id,
                ShiftSwapRequest.status == from_status,
            )
            .update({"status": to_status, "updated_at": datetime.utcnow()}, synchronize_session=False)
        )
