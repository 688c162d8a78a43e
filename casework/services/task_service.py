"""Task service - business logic for client tasks and portal task alerts."""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import case, or_, select
from sqlalchemy.orm import Session

from casework.db.enums import STAFF_ROLES, AlertType, TaskPriority, TaskStatus
from casework.db.models import Alert, Client, Profile, Task
from casework.schemas.task import TaskCreate


logger = logging.getLogger(__name__)


class TaskServiceError(Exception):
    """Base exception for task service errors."""

    pass


class TaskNotFoundError(TaskServiceError):
    """Task not found."""

    pass


class AssigneeNotFoundError(TaskServiceError):
    """Assignee is not an active staff profile."""

    pass


OPEN_STATUSES = (TaskStatus.PENDING.value, TaskStatus.IN_PROGRESS.value)

# Most urgent first
_PRIORITY_RANK = case(
    {
        TaskPriority.URGENT.value: 0,
        TaskPriority.HIGH.value: 1,
        TaskPriority.MEDIUM.value: 2,
        TaskPriority.LOW.value: 3,
    },
    value=Task.priority,
    else_=4,
)


def create_task(
    db: Session,
    actor_id: UUID | None,
    data: TaskCreate,
    commit: bool = True,
) -> Task:
    """
    Create a new task.

    When the task is linked to a client with portal access, the portal user
    also gets a "New Task Assigned" alert. A failed alert never fails the
    task.

    Args:
        commit: If False, uses flush instead of commit (for batch operations).
                Caller is responsible for committing the transaction.
    """
    task = Task(
        title=data.title,
        description=data.description,
        client_id=data.client_id,
        assigned_to=data.assigned_to,
        assigned_by=actor_id,
        status=TaskStatus.PENDING.value,
        priority=(data.priority or TaskPriority.MEDIUM).value,
        due_date=data.due_date,
        category=data.category,
    )
    db.add(task)
    db.flush()

    if data.client_id:
        _notify_portal_user(db, task)

    if commit:
        db.commit()
        db.refresh(task)
    return task


def _notify_portal_user(db: Session, task: Task) -> None:
    client = db.query(Client).filter(Client.id == task.client_id).first()
    if not client or not client.has_portal_access or not client.portal_user_id:
        return

    try:
        with db.begin_nested():
            db.add(
                Alert(
                    user_id=client.portal_user_id,
                    client_id=client.id,
                    task_id=task.id,
                    title="New Task Assigned",
                    message=f"You have a new task: {task.title}",
                    alert_type=AlertType.CUSTOM.value,
                    trigger_at=datetime.now(timezone.utc),
                )
            )
    except Exception:
        logger.exception(
            "Failed to create task alert",
            extra={"task_id": str(task.id), "client_id": str(client.id)},
        )


def complete_task_by_title(
    db: Session,
    client_id: UUID,
    title: str,
    completed_by: UUID | None = None,
) -> int:
    """
    Mark every pending task with this title for the client as completed.

    Flushes only; the caller owns the transaction.

    Returns:
        Number of tasks completed
    """
    tasks = (
        db.query(Task)
        .filter(
            Task.client_id == client_id,
            Task.title == title,
            Task.status == TaskStatus.PENDING.value,
        )
        .all()
    )
    now = datetime.now(timezone.utc)
    for task in tasks:
        task.status = TaskStatus.COMPLETED.value
        task.completed_at = now
        task.completed_by = completed_by
    db.flush()
    return len(tasks)


def get_task(db: Session, task_id: UUID) -> Task | None:
    """Get task by ID."""
    return db.query(Task).filter(Task.id == task_id).first()


def update_task_status(
    db: Session,
    task_id: UUID,
    status: TaskStatus,
    actor_id: UUID | None,
) -> Task:
    """
    Change task status.

    Completing stamps completed_at/completed_by; any other status clears them.

    Raises:
        TaskNotFoundError: If the task does not exist
    """
    task = get_task(db, task_id)
    if not task:
        raise TaskNotFoundError(f"Task {task_id} not found")

    task.status = status.value
    if status == TaskStatus.COMPLETED:
        task.completed_at = datetime.now(timezone.utc)
        task.completed_by = actor_id
    else:
        task.completed_at = None
        task.completed_by = None

    db.commit()
    db.refresh(task)
    return task


def list_tasks(
    db: Session,
    client_id: UUID | None = None,
    status: TaskStatus | None = None,
    assigned_to: UUID | None = None,
) -> list[Task]:
    """List tasks, soonest due first (undated last), then newest."""
    query = db.query(Task)
    if client_id:
        query = query.filter(Task.client_id == client_id)
    if status:
        query = query.filter(Task.status == status.value)
    if assigned_to:
        query = query.filter(Task.assigned_to == assigned_to)
    return query.order_by(Task.due_date.asc().nulls_last(), Task.created_at.desc()).all()


def _take_task(db: Session, task_id: UUID, assignee_id: UUID) -> Task:
    task = get_task(db, task_id)
    if not task:
        raise TaskNotFoundError(f"Task {task_id} not found")

    task.assigned_to = assignee_id
    task.status = TaskStatus.IN_PROGRESS.value
    task.completed_at = None
    task.completed_by = None
    return task


def claim_task(db: Session, task_id: UUID, actor_id: UUID) -> Task:
    """
    Assign a task to the acting profile and start it.

    Raises:
        TaskNotFoundError: If the task does not exist
    """
    task = _take_task(db, task_id, actor_id)
    db.commit()
    db.refresh(task)
    return task


def assign_task(db: Session, task_id: UUID, assignee_id: UUID, actor_id: UUID) -> Task:
    """
    Hand a task to another staff member and start it.

    Raises:
        TaskNotFoundError: If the task does not exist
        AssigneeNotFoundError: If the assignee is not an active staff profile
    """
    assignee = (
        db.query(Profile)
        .filter(
            Profile.id == assignee_id,
            Profile.is_active.is_(True),
            Profile.role.in_([role.value for role in STAFF_ROLES]),
        )
        .first()
    )
    if not assignee:
        raise AssigneeNotFoundError(f"No active staff member {assignee_id}")

    task = _take_task(db, task_id, assignee_id)
    task.assigned_by = actor_id
    db.commit()
    db.refresh(task)
    return task


def get_open_tasks_for_user(db: Session, user_id: UUID) -> list[Task]:
    """
    Pending and in-progress tasks for a profile, most urgent first.

    Covers tasks assigned to the profile and, for a portal user, tasks
    on the client record linked to their login.
    """
    own_client_ids = select(Client.id).where(Client.portal_user_id == user_id)
    return (
        db.query(Task)
        .filter(
            Task.status.in_(OPEN_STATUSES),
            or_(Task.assigned_to == user_id, Task.client_id.in_(own_client_ids)),
        )
        .order_by(_PRIORITY_RANK, Task.due_date.asc().nulls_last(), Task.created_at.desc())
        .all()
    )
