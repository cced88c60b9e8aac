"""
project_service/service.py

ProjectService: project lifecycle, ownership checks and task-service consistency.

Every operation resolves the caller through the identity oracle, loads the
project (failing fast when it is absent), checks access, then mutates or
projects. complete() and delete() also call the task service, and a failed
call is fatal to the operation:

- complete() persists the new status BEFORE calling the task service, so a
  failure leaves the project Completed while its tasks are not.
- delete() calls the task service BEFORE persisting, so a failure leaves the
  stored project untouched.
"""

from __future__ import annotations

from datetime import datetime
from typing import List

from project_service.authz import check_access
from project_service.config import IS_DEV
from project_service.db import INTEGRITY_ERRORS
from project_service.errors import (
    ProjectAccessDeniedError,
    ProjectAlreadyExistsError,
    ProjectDetailsNotRetrievedError,
    ProjectIsCompletedError,
    ProjectNotFoundError,
    RelatedTasksNotCompletedError,
    RelatedTasksNotDeletedError,
)
from project_service.models import Project, ProjectStatus
from project_service.schemas import ProjectDTO
from project_service.store import ProjectStore
from project_service.task_client import TaskClient


def merge_for_update(incoming: ProjectDTO, existing: Project) -> Project:
    """
    Build the updated entity from a submitted projection and the stored record.

    Only descriptive fields come from the submission. Identity, code, status,
    manager, deletion flag and the insert audit trail are forced from the
    existing record, whatever the client sent for them.
    """
    return Project(
        id=existing.id,
        project_code=existing.project_code,
        assigned_manager=existing.assigned_manager,
        project_status=existing.project_status,
        is_deleted=existing.is_deleted,
        inserted_at=existing.inserted_at,
        inserted_by=existing.inserted_by,
        project_name=incoming.project_name,
        start_date=incoming.start_date,
        end_date=incoming.end_date,
        project_detail=incoming.project_detail,
    )


class ProjectService:
    """
    Args:
        store: ProjectStore for persistence
        identity: Identity oracle exposing current_username(),
            has_role(username, role) and current_access_token()
        task_client: TaskClient for the remote task service
    """

    def __init__(self, store: ProjectStore, identity, task_client: TaskClient):
        self.store = store
        self.identity = identity
        self.task_client = task_client

    # ------------------------------------------------------------------
    # Create / read
    # ------------------------------------------------------------------
    def create(self, project_dto: ProjectDTO) -> ProjectDTO:
        if self.store.find_by_code(project_dto.project_code) is not None:
            raise ProjectAlreadyExistsError("Project already exists.")

        username = self.identity.current_username()
        now = datetime.utcnow()

        project = Project(
            project_code=project_dto.project_code,
            project_name=project_dto.project_name,
            start_date=project_dto.start_date,
            end_date=project_dto.end_date,
            project_detail=project_dto.project_detail,
            assigned_manager=username,
            project_status=ProjectStatus.OPEN,
            inserted_at=now,
            inserted_by=username,
            last_updated_at=now,
            last_updated_by=username,
        )

        try:
            saved = self.store.save(project)
        except INTEGRITY_ERRORS:
            # A concurrent create won the unique live-code index
            raise ProjectAlreadyExistsError("Project already exists.")

        print(f"[PROJECTS] Created project code={saved.project_code!r}, id={saved.id}, manager={username}")

        return ProjectDTO.from_project(saved)

    def read_by_code(self, project_code: str) -> ProjectDTO:
        project = self._find_or_raise(project_code)
        self._check_access(project)
        return ProjectDTO.from_project(project)

    def read_manager_by_code(self, project_code: str) -> str:
        project = self._find_or_raise(project_code)
        self._check_access(project)
        return project.assigned_manager

    def read_all_with_details(self) -> List[ProjectDTO]:
        """Caller's own projects, each with live task counts. All or nothing."""
        username = self.identity.current_username()
        projects = self.store.find_all_by_manager(username)
        return [self._retrieve_project_details(project) for project in projects]

    def admin_read_all(self) -> List[ProjectDTO]:
        # Admin role is enforced by the HTTP layer (require_role)
        return [ProjectDTO.from_project(project) for project in self.store.find_all()]

    def manager_read_all(self) -> List[ProjectDTO]:
        username = self.identity.current_username()
        return [ProjectDTO.from_project(project) for project in self.store.find_all_by_manager(username)]

    def count_non_completed(self, assigned_manager: str) -> int:
        return self.store.count_non_completed_by_manager(assigned_manager)

    def check_by_code(self, project_code: str) -> bool:
        """
        Confirm a project can still take work (used before creating tasks).

        Completion is checked before ownership, so a completed project is
        reported as such even to a caller who would be denied.
        """
        project = self._find_or_raise(project_code)

        if project.is_completed:
            raise ProjectIsCompletedError("Project is already completed.")

        self._check_access(project)

        return True

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def update(self, project_code: str, project_dto: ProjectDTO) -> ProjectDTO:
        existing = self._find_or_raise(project_code)
        self._check_access(existing)

        project = merge_for_update(project_dto, existing)
        project.last_updated_at = datetime.utcnow()
        project.last_updated_by = self.identity.current_username()

        updated = self.store.save(project)

        if IS_DEV:
            print(f"[PROJECTS] Updated project code={project_code!r}, id={updated.id}")

        return ProjectDTO.from_project(updated)

    def complete(self, project_code: str) -> ProjectDTO:
        project = self._find_or_raise(project_code)
        self._check_access(project)

        project.project_status = ProjectStatus.COMPLETED
        project.last_updated_at = datetime.utcnow()
        project.last_updated_by = self.identity.current_username()

        completed = self.store.save(project)

        print(f"[PROJECTS] Completed project code={project_code!r}, id={completed.id}")

        # Not rolled back on failure: the project stays Completed
        self._complete_related_tasks(project_code)

        return ProjectDTO.from_project(completed)

    def delete(self, project_code: str) -> None:
        project = self._find_or_raise(project_code)
        self._check_access(project)

        project.is_deleted = True
        project.project_code = f"{project_code}-{project.id}"
        project.last_updated_at = datetime.utcnow()
        project.last_updated_by = self.identity.current_username()

        # Must run before save: a failure here leaves the stored row untouched
        self._delete_related_tasks(project_code)

        self.store.save(project)

        print(f"[PROJECTS] Deleted project code={project_code!r}, id={project.id}, "
              f"renamed to {project.project_code!r}")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _find_or_raise(self, project_code: str) -> Project:
        project = self.store.find_by_code(project_code)
        if project is None:
            raise ProjectNotFoundError("Project does not exist.")
        return project

    def _check_access(self, project: Project) -> None:
        username = self.identity.current_username()

        if not check_access(username, self.identity.has_role, project.assigned_manager):
            if IS_DEV:
                print(f"[AUTHZ] Project access denied: username={username}, "
                      f"code={project.project_code!r}, manager={project.assigned_manager}")
            raise ProjectAccessDeniedError(
                "Access denied, make sure that you are working on your own project."
            )

    def _retrieve_project_details(self, project: Project) -> ProjectDTO:
        project_dto = ProjectDTO.from_project(project)
        access_token = self.identity.current_access_token()

        response = self.task_client.get_counts_by_project(access_token, project.project_code)

        if not response.success:
            raise ProjectDetailsNotRetrievedError("Project details cannot be retrieved.")

        task_counts = response.data or {}
        if not isinstance(task_counts, dict):
            print(f"[TASK_CLIENT] Unexpected count payload for code={project.project_code!r}: "
                  f"{type(task_counts).__name__}")
            raise ProjectDetailsNotRetrievedError("Project details cannot be retrieved.")

        project_dto.completed_task_count = task_counts.get("completedTaskCount")
        project_dto.non_completed_task_count = task_counts.get("nonCompletedTaskCount")

        return project_dto

    def _complete_related_tasks(self, project_code: str) -> None:
        access_token = self.identity.current_access_token()

        response = self.task_client.complete_by_project(access_token, project_code)

        if not response.success:
            raise RelatedTasksNotCompletedError(
                f"Related tasks cannot be completed. (Project: {project_code})"
            )

    def _delete_related_tasks(self, project_code: str) -> None:
        access_token = self.identity.current_access_token()

        response = self.task_client.delete_by_project(access_token, project_code)

        if not response.success:
            raise RelatedTasksNotDeletedError(
                f"Related tasks cannot be deleted. (Project: {project_code})"
            )
