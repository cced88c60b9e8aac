from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


# Enums
class ProjectStatus(str, Enum):
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class UserRole(str, Enum):
    ADMIN = "Admin"
    MANAGER = "Manager"
    EMPLOYEE = "Employee"


# Models
class Project(BaseModel):
    id: Optional[int] = None
    project_code: str
    project_name: str
    assigned_manager: str
    start_date: date
    end_date: date
    project_detail: Optional[str] = None
    project_status: ProjectStatus = ProjectStatus.OPEN
    is_deleted: bool = False

    # Audit trail
    inserted_at: Optional[datetime] = None
    inserted_by: Optional[str] = None
    last_updated_at: Optional[datetime] = None
    last_updated_by: Optional[str] = None

    @property
    def is_completed(self) -> bool:
        return self.project_status == ProjectStatus.COMPLETED
