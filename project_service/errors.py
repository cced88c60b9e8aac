"""
project_service/errors.py

Domain errors raised by ProjectService.

Every error is terminal: the service never catches its own errors, and the
app's exception handler renders them with the status_code carried here.
"""

from __future__ import annotations


class ProjectServiceError(Exception):
    """Base class for project domain errors."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ProjectAlreadyExistsError(ProjectServiceError):
    """Raised when a live project already uses the requested code."""
    status_code = 409


class ProjectNotFoundError(ProjectServiceError):
    status_code = 404


class ProjectAccessDeniedError(ProjectServiceError):
    """Raised when the caller may not touch the project (employees, other managers)."""
    status_code = 403


class ProjectIsCompletedError(ProjectServiceError):
    status_code = 409


class ProjectDetailsNotRetrievedError(ProjectServiceError):
    """Raised when the task service cannot report counts for a project."""
    status_code = 502


class RelatedTasksNotCompletedError(ProjectServiceError):
    """Raised after a project was completed but its tasks could not be."""
    status_code = 502


class RelatedTasksNotDeletedError(ProjectServiceError):
    """Raised when task deletion fails; the project itself is left untouched."""
    status_code = 502
