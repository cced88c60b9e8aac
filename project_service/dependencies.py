"""
project_service/dependencies.py

Reusable FastAPI dependencies for role enforcement and service wiring.
"""

from __future__ import annotations

from typing import Callable

from fastapi import Depends, HTTPException

from project_service.auth_context import AuthContext, RequestIdentity, require_auth_context
from project_service.authz import has_any_role
from project_service.config import IS_DEV
from project_service.service import ProjectService
from project_service.store import ProjectStore
from project_service.task_client import TaskClient

_task_client = None


def require_role(*roles: str) -> Callable:
    """
    FastAPI dependency factory for role-gated endpoints.

    Usage in routes:
        @router.get("/read/all/admin", dependencies=[Depends(require_role("Admin"))])
        def admin_read_all(...):
            ...

    Args:
        roles: Role names; holding any one of them is enough

    Raises:
        HTTPException(403): If the caller holds none of the roles
    """
    def _check_role(ctx: AuthContext = Depends(require_auth_context)) -> AuthContext:
        if not has_any_role(ctx.roles, roles):
            if IS_DEV:
                print(f"[AUTHZ] Role denied: username={ctx.username}, "
                      f"required={list(roles)}, held={sorted(ctx.roles)}")
            raise HTTPException(
                status_code=403,
                detail="Insufficient permissions - your role cannot perform this action",
            )
        return ctx

    return _check_role


def get_project_store() -> ProjectStore:
    return ProjectStore()


def get_task_client() -> TaskClient:
    """Shared TaskClient so requests reuse one connection pool."""
    global _task_client
    if _task_client is None:
        _task_client = TaskClient()
    return _task_client


def get_project_service(
    ctx: AuthContext = Depends(require_auth_context),
    store: ProjectStore = Depends(get_project_store),
    task_client: TaskClient = Depends(get_task_client),
) -> ProjectService:
    """Build a ProjectService bound to the current request's identity."""
    return ProjectService(store, RequestIdentity(ctx), task_client)
