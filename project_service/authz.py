"""
project_service/authz.py

Ownership-based access policy for project records.

Rules:
- Employees have no access to the project service at all
- Managers may only touch projects assigned to them
- Everyone else (administrators) is allowed

Pure Python logic - no FastAPI imports, no database access.
"""

from __future__ import annotations

from typing import Callable, Iterable

from project_service.models import UserRole

# (username, role_name) -> bool
RoleQuery = Callable[[str, str], bool]


def check_access(username: str, has_role: RoleQuery, assigned_manager: str) -> bool:
    """
    Decide whether the caller may work on a project.

    Args:
        username: Caller's username
        has_role: Role-membership query, evaluated fresh on every call
        assigned_manager: Username of the project's owning manager

    Returns:
        False for employees and for managers other than the assigned one,
        True otherwise.

    Example:
        check_access("alice", roles, "alice") -> True   (alice is Manager)
        check_access("bob", roles, "alice") -> False    (bob is Manager)
        check_access("root", roles, "alice") -> True    (root is Admin)
    """
    if has_role(username, UserRole.EMPLOYEE.value):
        return False

    if has_role(username, UserRole.MANAGER.value) and username != assigned_manager:
        return False

    return True


def has_any_role(held_roles: Iterable[str], required_roles: Iterable[str]) -> bool:
    """
    Check whether at least one required role is held.

    Example:
        has_any_role({"Manager"}, ["Admin", "Manager"]) -> True
        has_any_role({"Employee"}, ["Admin"]) -> False
    """
    held = set(held_roles)
    return any(role in held for role in required_roles)
