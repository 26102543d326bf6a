"""
Project Pydantic Schemas.

WHAT: Request/Response models for project endpoints and the shared project
validation rules.

WHY: Dates are validated as a group: an end or due date before the start
date is rejected, equal dates are accepted.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import Field, field_validator, model_validator

from solodesk.models.project import ProjectPriority, ProjectStatus
from solodesk.schemas.client import AttachmentSchema
from solodesk.schemas.common import CamelModel


NAME_MAX_LENGTH = 100

PROJECT_ERRORS = {
    "name_required": "Project name is required",
    "name_too_long": "Project name must be 100 characters or less",
    "client_required": "Please select a client",
    "due_required": "Due date is required",
    "priority_required": "Priority is required",
    "budget_negative": "Budget cannot be negative",
    "end_before_start": "End date cannot be before start date",
    "due_before_start": "Due date cannot be before start date",
}

TASK_NAME_REQUIRED = "Task name is required"


def date_order_errors(
    start_date: Optional[date],
    end_date: Optional[date],
    due_date: Optional[date],
) -> Dict[str, str]:
    """
    Check planning dates against the start date.

    Returns:
        {"endDate"|"dueDate": message} for each date before the start date
    """
    errors: Dict[str, str] = {}
    if start_date is None:
        return errors
    if end_date is not None and end_date < start_date:
        errors["endDate"] = PROJECT_ERRORS["end_before_start"]
    if due_date is not None and due_date < start_date:
        errors["dueDate"] = PROJECT_ERRORS["due_before_start"]
    return errors


def check_project_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError(PROJECT_ERRORS["name_required"])
    if len(v) > NAME_MAX_LENGTH:
        raise ValueError(PROJECT_ERRORS["name_too_long"])
    return v


def check_budget(v: Optional[Decimal]) -> Optional[Decimal]:
    if v is not None and v < 0:
        raise ValueError(PROJECT_ERRORS["budget_negative"])
    return v


class TaskCreate(CamelModel):
    name: str
    due_date: Optional[date] = None
    completed: bool = False

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError(TASK_NAME_REQUIRED)
        return v


class TaskResponse(CamelModel):
    id: int
    name: str
    due_date: Optional[date] = None
    completed: bool
    created_at: datetime


class ProjectCreateRequest(CamelModel):
    """Request schema for creating a project with its quick tasks."""

    name: str
    client_id: int = Field(..., gt=0)
    status: ProjectStatus = ProjectStatus.NOT_STARTED
    priority: ProjectPriority = ProjectPriority.MEDIUM
    budget: Optional[Decimal] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    due_date: date
    description: Optional[str] = None
    tasks: List[TaskCreate] = Field(default_factory=list)
    attachments: List[AttachmentSchema] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return check_project_name(v)

    @field_validator("budget")
    @classmethod
    def validate_budget(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return check_budget(v)

    @model_validator(mode="after")
    def validate_dates(self) -> "ProjectCreateRequest":
        errors = date_order_errors(self.start_date, self.end_date, self.due_date)
        if errors:
            raise ValueError("; ".join(errors.values()))
        return self


class ProjectUpdateRequest(CamelModel):
    """
    Request schema for updating a project.

    WHAT: Every field optional; only fields present in the body change.
    Null on a required column (name, client, status, priority, due date)
    leaves it unchanged. Tasks are not edited here.

    WHY: Date order depends on stored dates the body may not send, so
    ProjectService checks it against the merged record.
    """

    name: Optional[str] = None
    client_id: Optional[int] = Field(None, gt=0)
    status: Optional[ProjectStatus] = None
    priority: Optional[ProjectPriority] = None
    budget: Optional[Decimal] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    due_date: Optional[date] = None
    description: Optional[str] = None
    attachments: Optional[List[AttachmentSchema]] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return check_project_name(v)

    @field_validator("budget")
    @classmethod
    def validate_budget(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return check_budget(v)


class ProjectResponse(CamelModel):
    id: int
    client_id: int
    name: str
    description: Optional[str] = None
    status: str
    priority: str
    budget: Optional[Decimal] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    due_date: date
    tasks: List[TaskResponse] = Field(default_factory=list)
    attachments: List[AttachmentSchema] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @field_validator("attachments", mode="before")
    @classmethod
    def none_to_list(cls, v):
        return v or []
