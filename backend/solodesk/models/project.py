"""
Project and task models.

WHAT: SQLAlchemy models for a client project and its quick tasks.

WHY: Projects tie a client to a deadline, a budget and a task list. Tasks
are created together with the project from the intake form and can be
ticked off later.

HOW: Uses SQLAlchemy 2.0 with:
- User-scoped queries
- Status/priority stored as their display values
- Tasks eagerly loaded (selectin) so async code never lazy-loads
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, TYPE_CHECKING
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship, Mapped

from solodesk.models.base import Base, JSONType, utcnow

if TYPE_CHECKING:
    from solodesk.models.client import Client


class ProjectStatus(str, Enum):
    """Project lifecycle status."""

    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    ON_HOLD = "On Hold"
    COMPLETED = "Completed"


class ProjectPriority(str, Enum):
    """
    Project priority level.

    WHY: Helps with scheduling:
    - LOW: Nice to have, can be delayed
    - MEDIUM: Standard priority, normal timeline
    - HIGH: Important, prioritize over medium
    - URGENT: Critical, needs immediate attention
    """

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    URGENT = "Urgent"


class Project(Base):
    """
    Client project.

    Attributes:
        id: Primary key
        user_id: Owning freelancer
        client_id: Client the work is for
        name: Project name (max 100 characters)
        status: Current project status
        priority: Project priority level
        budget: Non-negative budget amount
        start_date/end_date/due_date: Planning dates (due date required)
        attachments: Uploaded file metadata
    """

    __tablename__ = "projects"

    id: Mapped[int] = Column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    client_id: Mapped[int] = Column(
        Integer,
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = Column(String(100), nullable=False)
    description: Mapped[Optional[str]] = Column(Text, nullable=True)

    status: Mapped[str] = Column(
        String(20), nullable=False, default=ProjectStatus.NOT_STARTED.value
    )
    priority: Mapped[str] = Column(
        String(10), nullable=False, default=ProjectPriority.MEDIUM.value
    )
    budget: Mapped[Optional[Decimal]] = Column(Numeric(12, 2), nullable=True)

    start_date: Mapped[Optional[date]] = Column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = Column(Date, nullable=True)
    due_date: Mapped[date] = Column(Date, nullable=False)

    attachments = Column(JSONType, nullable=True)

    created_at: Mapped[datetime] = Column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = Column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    # Relationships
    client: Mapped["Client"] = relationship("Client")
    tasks: Mapped[list["Task"]] = relationship(
        "Task",
        back_populates="project",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Task.id",
    )

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, name={self.name}, status={self.status})>"

    @property
    def is_overdue(self) -> bool:
        """True if the due date has passed and the project is not completed."""
        if self.status == ProjectStatus.COMPLETED.value:
            return False
        return date.today() > self.due_date


class Task(Base):
    """Quick task attached to a project."""

    __tablename__ = "tasks"

    id: Mapped[int] = Column(Integer, primary_key=True, index=True)
    project_id: Mapped[int] = Column(
        Integer,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = Column(String(200), nullable=False)
    due_date: Mapped[Optional[date]] = Column(Date, nullable=True)
    completed: Mapped[bool] = Column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = Column(DateTime, nullable=False, default=utcnow)

    project: Mapped["Project"] = relationship("Project", back_populates="tasks")

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, name={self.name}, completed={self.completed})>"
