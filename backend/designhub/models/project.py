"""Project, task template and task models for design project tracking."""

from datetime import date, datetime
from uuid import UUID

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import ARRAY, UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from designhub.db.base import BaseModel


class Project(BaseModel):
    """Design/construction project."""

    __tablename__ = "projects"

    # Basic info
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    designer: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    project_type: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Timeline
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Lifecycle
    status: Mapped[str] = mapped_column(
        String(50), nullable=False, default="active", index=True
    )  # active, completed, abandoned
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completion_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    abandoned_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    abandon_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    tasks: Mapped[list["Task"]] = relationship(
        "Task", back_populates="project", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        try:
            return f"<Project {self.name}>"
        except Exception:
            return "<Project detached>"


class TaskTemplate(BaseModel):
    """Shared, ordered task definition that projects materialize tasks from."""

    __tablename__ = "task_templates"
    __table_args__ = (
        UniqueConstraint("position", name="uq_task_template_position"),
    )

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    role: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Explicit stable order within the library
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    # Scheduling
    schedule_kind: Mapped[str] = mapped_column(
        String(20), nullable=False, default="none"
    )  # none, offset
    anchor_template_id: Mapped[UUID | None] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("task_templates.id", ondelete="SET NULL"),
        nullable=True,
    )
    offset_days: Mapped[int | None] = mapped_column(Integer, nullable=True)

    def __repr__(self) -> str:
        try:
            return f"<TaskTemplate {self.position}: {self.title[:30]}>"
        except Exception:
            return "<TaskTemplate detached>"


class Task(BaseModel):
    """Task within a project, usually materialized from a template."""

    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_project_position", "project_id", "position"),
    )

    project_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Null for manually added tasks
    template_id: Mapped[UUID | None] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("task_templates.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Basic info
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    role: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Assignment: ordered, unique; `assignee` mirrors the first entry
    assignees: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, server_default="{}", default=list
    )
    assignee: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Status
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="todo"
    )  # todo, done
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Timeline
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Ordering within the project (inherited from the template or appended)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Relationships
    project: Mapped["Project"] = relationship("Project", back_populates="tasks")
    dependencies: Mapped[list["TaskDependency"]] = relationship(
        "TaskDependency",
        foreign_keys="TaskDependency.task_id",
        back_populates="task",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        try:
            return f"<Task {self.title[:30]}>"
        except Exception:
            try:
                return f"<Task id={self.id}>"
            except Exception:
                return "<Task detached>"


class TaskDependency(BaseModel):
    """Explicit offset edge: the task's due date follows its anchor's."""

    __tablename__ = "task_dependencies"
    __table_args__ = (
        UniqueConstraint("task_id", "anchor_task_id", name="uq_task_dependency"),
    )

    task_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    anchor_task_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    offset_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    task: Mapped["Task"] = relationship(
        "Task", foreign_keys=[task_id], back_populates="dependencies"
    )

    def __repr__(self) -> str:
        return f"<TaskDependency task={self.task_id} anchor={self.anchor_task_id}>"
