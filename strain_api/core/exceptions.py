"""Custom exception types for domain and API layers."""
from __future__ import annotations


class AppError(Exception):
    """Base app exception."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class AuthError(AppError):
    """Missing, invalid or expired identity token or stored credential."""


class NotFoundError(AppError):
    """No such user, workflow, resource or remote object."""


class ConflictError(AppError):
    """Duplicate user or workflow id."""


class SubmissionConflictError(ConflictError):
    """The engine accepted a submission but its workflow id is already recorded locally."""

    def __init__(self, workflow_id: str, message: str = ""):
        super().__init__(message or f"Workflow {workflow_id} was submitted but could not be recorded")
        self.workflow_id = workflow_id


class InvalidInputError(AppError):
    """Request values that cannot be recorded as a workflow."""


class UpstreamError(AppError):
    """Execution engine or object storage returned an unexpected failure."""

    def __init__(self, message: str = "", status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ServiceUnavailable(AppError):
    """Persistence layer unreachable or failed."""
