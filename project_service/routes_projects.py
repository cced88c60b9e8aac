"""
project_service/routes_projects.py

Project endpoints with role gating and ownership enforcement.

Security guarantees:
- All endpoints require authentication (require_auth_context)
- Role gating per endpoint via require_role()
- Ownership checks (managers see only their own projects) live in ProjectService
- assigned_manager and project_status are never taken from the client
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path

from project_service.dependencies import get_project_service, require_role
from project_service.models import UserRole
from project_service.schemas import ProjectDTO, ResponseWrapper
from project_service.service import ProjectService

ADMIN = UserRole.ADMIN.value
MANAGER = UserRole.MANAGER.value

router = APIRouter(
    prefix="/api/v1/project",
    tags=["project"],
)


@router.post("/create", status_code=201, response_model=ResponseWrapper,
             dependencies=[Depends(require_role(MANAGER))])
def create_project(
    project_dto: ProjectDTO,
    service: ProjectService = Depends(get_project_service),
) -> ResponseWrapper:
    """
    Create a project owned by the caller.

    Raises:
        409: A live project already uses the code
    """
    created = service.create(project_dto)
    return ResponseWrapper.ok("Project is successfully created.", created, code=201)


@router.get("/read/{project_code}", response_model=ResponseWrapper,
            dependencies=[Depends(require_role(ADMIN, MANAGER))])
def read_project(
    project_code: str = Path(..., description="Project code"),
    service: ProjectService = Depends(get_project_service),
) -> ResponseWrapper:
    project = service.read_by_code(project_code)
    return ResponseWrapper.ok("Project is successfully retrieved.", project)


@router.get("/read/manager/{project_code}", response_model=ResponseWrapper,
            dependencies=[Depends(require_role(ADMIN, MANAGER))])
def read_project_manager(
    project_code: str = Path(..., description="Project code"),
    service: ProjectService = Depends(get_project_service),
) -> ResponseWrapper:
    manager = service.read_manager_by_code(project_code)
    return ResponseWrapper.ok("Project manager is successfully retrieved.", manager)


@router.get("/read/all/details", response_model=ResponseWrapper,
            dependencies=[Depends(require_role(MANAGER))])
def read_all_projects_with_details(
    service: ProjectService = Depends(get_project_service),
) -> ResponseWrapper:
    """
    List the caller's projects with task counts from the task service.

    Raises:
        502: Task counts could not be retrieved for one of the projects
    """
    projects = service.read_all_with_details()
    return ResponseWrapper.ok("Projects are successfully retrieved.", projects)


@router.get("/read/all/admin", response_model=ResponseWrapper,
            dependencies=[Depends(require_role(ADMIN))])
def admin_read_all_projects(
    service: ProjectService = Depends(get_project_service),
) -> ResponseWrapper:
    projects = service.admin_read_all()
    return ResponseWrapper.ok("Projects are successfully retrieved.", projects)


@router.get("/read/all/manager", response_model=ResponseWrapper,
            dependencies=[Depends(require_role(MANAGER))])
def manager_read_all_projects(
    service: ProjectService = Depends(get_project_service),
) -> ResponseWrapper:
    projects = service.manager_read_all()
    return ResponseWrapper.ok("Projects are successfully retrieved.", projects)


@router.get("/count/manager/{assigned_manager}", response_model=ResponseWrapper,
            dependencies=[Depends(require_role(ADMIN))])
def count_non_completed_projects(
    assigned_manager: str = Path(..., description="Manager username"),
    service: ProjectService = Depends(get_project_service),
) -> ResponseWrapper:
    count = service.count_non_completed(assigned_manager)
    return ResponseWrapper.ok("Non-completed projects are successfully counted.", count)


@router.get("/check/{project_code}", response_model=ResponseWrapper,
            dependencies=[Depends(require_role(MANAGER))])
def check_project(
    project_code: str = Path(..., description="Project code"),
    service: ProjectService = Depends(get_project_service),
) -> ResponseWrapper:
    """
    Confirm the project exists, is not completed and belongs to the caller.

    Raises:
        404: Unknown project
        409: Project already completed
        403: Not the caller's project
    """
    result = service.check_by_code(project_code)
    return ResponseWrapper.ok("Project check is successfully completed.", result)


@router.put("/update/{project_code}", response_model=ResponseWrapper,
            dependencies=[Depends(require_role(MANAGER))])
def update_project(
    project_dto: ProjectDTO,
    project_code: str = Path(..., description="Project code"),
    service: ProjectService = Depends(get_project_service),
) -> ResponseWrapper:
    updated = service.update(project_code, project_dto)
    return ResponseWrapper.ok("Project is successfully updated.", updated)


@router.put("/complete/{project_code}", response_model=ResponseWrapper,
            dependencies=[Depends(require_role(MANAGER))])
def complete_project(
    project_code: str = Path(..., description="Project code"),
    service: ProjectService = Depends(get_project_service),
) -> ResponseWrapper:
    """
    Complete the project, then its tasks.

    Raises:
        502: Tasks could not be completed (the project stays Completed)
    """
    completed = service.complete(project_code)
    return ResponseWrapper.ok("Project is successfully completed.", completed)


@router.delete("/delete/{project_code}", response_model=ResponseWrapper,
               dependencies=[Depends(require_role(ADMIN, MANAGER))])
def delete_project(
    project_code: str = Path(..., description="Project code"),
    service: ProjectService = Depends(get_project_service),
) -> ResponseWrapper:
    """
    Soft-delete the project after deleting its tasks.

    Raises:
        502: Tasks could not be deleted (the project is left unchanged)
    """
    service.delete(project_code)
    return ResponseWrapper.ok("Project is successfully deleted.")
