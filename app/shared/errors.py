"""Domain error taxonomy, mapped to HTTP responses in app.main"""

from typing import Optional


class SchedulingError(Exception):
    """Base class for errors surfaced to API callers"""

    status_code = 500

    def __init__(self, detail: str, *, context: Optional[dict] = None):
        super().__init__(detail)
        self.detail = detail
        self.context = context or {}


class ValidationError(SchedulingError):
    """Missing or malformed input"""

    status_code = 400


class NotFoundError(SchedulingError):
    """Unknown id, or an id owned by another tenant"""

    status_code = 404


class ConflictError(SchedulingError):
    """Operation not allowed in the entity's current state"""

    status_code = 409


class DependencyFailure(SchedulingError):
    """An external collaborator (holiday feed, notifier) failed"""

    status_code = 502
