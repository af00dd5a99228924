"""Shift swap service - Resolves swap requests and exchanges job assignments"""

import logging
from typing import Optional

from pydantic import BaseModel
from sqlalchemy.orm import Session

from ...auth import AuthSession
from ...models import ShiftSwapRequest
from ...services.audit_service import record_event
from ...services.notification_service import NotificationIntent
from ...shared.errors import ConflictError, NotFoundError, ValidationError
from .repository import JobRepository, ShiftSwapRepository
from .schemas import ShiftSwapResponse

logger = logging.getLogger(__name__)


class SwapStateMachine:
    """pending → approved | rejected; both outcomes are terminal"""

    TRANSITIONS = {
        "pending": ("approved", "rejected"),
        "approved": (),
        "rejected": (),
    }
    DECISIONS = ("approved", "rejected")

    @classmethod
    def validate_decision(cls, decision: Optional[str]) -> str:
        if decision not in cls.DECISIONS:
            raise ValidationError("Status must be 'approved' or 'rejected'")
        return decision

    @classmethod
    def can_transition(cls, current: str, target: str) -> bool:
        return target in cls.TRANSITIONS.get(current, ())

    @classmethod
    def ensure_transition(cls, current: str, target: str) -> None:
        if not cls.can_transition(current, target):
            raise ConflictError("Swap request already processed", context={"status": current})


class SwapResolution(BaseModel):
    ok: bool = True
    swapId: int
    status: str
    notifications: list[NotificationIntent] = []


def build_notifications(swap: ShiftSwapRequest, decision: str) -> list[NotificationIntent]:
    """Messages owed to both employees once the decision has committed"""
    company_id = swap.company_id
    intents: list[NotificationIntent] = []

    if decision == "approved":
        # Each employee now holds the other's job
        intents.append(
            NotificationIntent(
                kind="assignment", company_id=company_id, employee_id=swap.to_employee_id, job_id=swap.from_job_id
            )
        )
        intents.append(
            NotificationIntent(
                kind="assignment", company_id=company_id, employee_id=swap.from_employee_id, job_id=swap.to_job_id
            )
        )
        from_employee_job, to_employee_job = swap.to_job_id, swap.from_job_id
    else:
        from_employee_job, to_employee_job = swap.from_job_id, swap.to_job_id

    intents.append(
        NotificationIntent(
            kind="swap_decision",
            company_id=company_id,
            employee_id=swap.from_employee_id,
            job_id=from_employee_job,
            status=decision,
            other_employee_id=swap.to_employee_id,
        )
    )
    intents.append(
        NotificationIntent(
            kind="swap_decision",
            company_id=company_id,
            employee_id=swap.to_employee_id,
            job_id=to_employee_job,
            status=decision,
            other_employee_id=swap.from_employee_id,
        )
    )
    return intents


class ShiftSwapService:
    """Service layer for shift swap requests"""

    def __init__(self, db: Session):
        self.db = db
        self.swaps = ShiftSwapRepository()
        self.jobs = JobRepository()

    def list_swaps(self, session: AuthSession, status: Optional[str] = None) -> list[ShiftSwapResponse]:
        """Swap requests for the tenant, newest first"""
        return [
            ShiftSwapResponse(
                id=swap.id,
                status=swap.status,
                fromJobId=swap.from_job_id,
                toJobId=swap.to_job_id,
                fromEmployeeId=swap.from_employee_id,
                toEmployeeId=swap.to_employee_id,
                fromEmployeeName=swap.from_employee.full_name if swap.from_employee else None,
                toEmployeeName=swap.to_employee.full_name if swap.to_employee else None,
                fromJobTitle=swap.from_job.title if swap.from_job else None,
                toJobTitle=swap.to_job.title if swap.to_job else None,
                reason=swap.reason,
                requestedByRole=swap.requested_by_role,
                createdAt=swap.created_at,
            )
            for swap in self.swaps.get_swaps(self.db, session.company_id, status)
        ]

    def _reassign(self, job_id: int, employee_id: int, company_id: int) -> None:
        rows = self.jobs.update_job(
            self.db,
            job_id,
            company_id,
            assigned_to=employee_id,
            employee_accepted=0,
            employee_accepted_at=None,
        )
        if rows != 1:
            raise NotFoundError(f"Job {job_id} not found")

    def resolve(self, swap_id: int, decision: Optional[str], session: AuthSession) -> SwapResolution:
        """
        Approve or reject a pending swap.

        Approval exchanges the two assignees and resets both acceptance flags
        in one transaction. The pending check is repeated as a conditional
        update inside that transaction, so of two concurrent resolutions
        only one can win.

        Raises:
            ValidationError: If the decision is not approved/rejected
            NotFoundError: If the swap does not exist for this tenant
            ConflictError: If the swap is no longer pending
        """
        decision = SwapStateMachine.validate_decision(decision)

        swap = self.swaps.get_swap(self.db, swap_id, session.company_id, for_update=decision == "approved")
        if not swap:
            raise NotFoundError("Swap request not found")
        SwapStateMachine.ensure_transition(swap.status, decision)

        try:
            rows = self.swaps.transition_status(self.db, swap.id, session.company_id, "pending", decision)
            if rows != 1:
                raise ConflictError("Swap request already processed")

            if decision == "approved":
                self._reassign(swap.from_job_id, swap.to_employee_id, session.company_id)
                self._reassign(swap.to_job_id, swap.from_employee_id, session.company_id)

            record_event(
                self.db,
                company_id=session.company_id,
                event_type=f"shift_swap_{decision}",
                entity_type="shift_swap",
                entity_id=swap.id,
                description=f"Shift swap {swap.id} {decision}",
                metadata={
                    "fromJobId": swap.from_job_id,
                    "toJobId": swap.to_job_id,
                    "fromEmployeeId": swap.from_employee_id,
                    "toEmployeeId": swap.to_employee_id,
                    "resolvedBy": session.user_id,
                },
                user_id=session.user_id,
            )

            notifications = build_notifications(swap, decision)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to resolve shift swap {swap_id} as {decision}: {e}")
            raise

        logger.info(f"✅ Shift swap {swap_id} {decision}")
        return SwapResolution(swapId=swap_id, status=decision, notifications=notifications)
