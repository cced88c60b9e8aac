"""
project_service/schemas.py

Pydantic schemas for the project HTTP surface and the task service wire format.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from project_service.models import Project, ProjectStatus


# ========================================================================
# PROJECT SCHEMAS
# ========================================================================

class ProjectDTO(BaseModel):
    """Project projection used for requests and responses.

    Notes:
    - project_name and project_code are required and trimmed
    - assigned_manager, project_status and id are read-only: the service
      ignores whatever the client submits for them
    - completed_task_count / non_completed_task_count are never persisted;
      only the detail read path fills them from the task service
    """
    id: Optional[int] = Field(None, description="Project ID (assigned by the store)")
    project_name: str = Field(..., min_length=1, max_length=200, description="Project name")
    project_code: str = Field(..., min_length=1, max_length=100, description="Unique project code")
    assigned_manager: Optional[str] = Field(None, description="Owning manager's username")
    start_date: date = Field(..., description="Start date (ISO)")
    end_date: date = Field(..., description="End date (ISO)")
    project_detail: Optional[str] = Field(None, max_length=2000, description="Free-form details")
    project_status: Optional[ProjectStatus] = Field(None, description="Lifecycle status")
    is_deleted: bool = Field(False, description="Soft-delete flag")
    completed_task_count: Optional[int] = Field(None, description="Completed tasks (detail reads only)")
    non_completed_task_count: Optional[int] = Field(None, description="Open tasks (detail reads only)")

    # Allows instantiation from Project.model_dump() with audit fields present
    model_config = ConfigDict(extra="ignore")

    @field_validator("project_name", "project_code", mode="before")
    @classmethod
    def trim_text(cls, v):
        """Trim whitespace from name and code."""
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("project_name", "project_code")
    @classmethod
    def validate_non_blank(cls, v):
        """Ensure name and code are not empty after trimming."""
        if not v or not v.strip():
            raise ValueError("must not be blank")
        return v

    @classmethod
    def from_project(cls, project: Project) -> "ProjectDTO":
        return cls(**project.model_dump())


# ========================================================================
# TASK SERVICE WIRE FORMAT
# ========================================================================

class TaskResponse(BaseModel):
    """Envelope returned by the task service for every call."""
    success: bool = False
    message: Optional[str] = None
    code: Optional[int] = None
    data: Any = None

    model_config = ConfigDict(extra="ignore")


# ========================================================================
# RESPONSE ENVELOPES
# ========================================================================

class ResponseWrapper(BaseModel):
    """Uniform success envelope for every project endpoint."""
    success: bool = True
    message: str
    code: int = 200
    data: Any = None

    @classmethod
    def ok(cls, message: str, data: Any = None, code: int = 200) -> "ResponseWrapper":
        return cls(success=True, message=message, code=code, data=data)


class FieldViolation(BaseModel):
    field: str
    rejected_value: Any = None
    reason: str


class ExceptionWrapper(BaseModel):
    """Uniform failure envelope rendered by the app's exception handlers."""
    success: bool = False
    message: str
    http_status: int
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    error_count: Optional[int] = None
    validation_errors: Optional[List[FieldViolation]] = None
