"""Tasks router - API endpoints for client tasks."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from casework.core.deps import get_current_session, get_db, require_csrf_header, require_roles
from casework.db.enums import STAFF_ROLES, TaskStatus
from casework.schemas.auth import UserSession
from casework.schemas.task import TaskAssign, TaskCreate, TaskRead, TaskStatusUpdate
from casework.services import task_service

router = APIRouter()


@router.get("", response_model=list[TaskRead])
def list_tasks(
    session: UserSession = Depends(require_roles(STAFF_ROLES)),
    db: Session = Depends(get_db),
    client_id: UUID | None = None,
    status: TaskStatus | None = None,
    assigned_to: UUID | None = None,
):
    """List tasks with optional filters."""
    return task_service.list_tasks(db, client_id=client_id, status=status, assigned_to=assigned_to)


@router.get("/mine", response_model=list[TaskRead])
def list_my_tasks(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Open tasks for the current user (portal users see their own client's tasks too)."""
    return task_service.get_open_tasks_for_user(db, session.user_id)


@router.post(
    "",
    response_model=TaskRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_task(
    data: TaskCreate,
    session: UserSession = Depends(require_roles(STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    """Create a new task."""
    return task_service.create_task(db, session.user_id, data)


@router.patch(
    "/{task_id}/status",
    response_model=TaskRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_task_status(
    task_id: UUID,
    data: TaskStatusUpdate,
    session: UserSession = Depends(require_roles(STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    """Change a task's status."""
    try:
        return task_service.update_task_status(db, task_id, data.status, session.user_id)
    except task_service.TaskNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post(
    "/{task_id}/claim",
    response_model=TaskRead,
    dependencies=[Depends(require_csrf_header)],
)
def claim_task(
    task_id: UUID,
    session: UserSession = Depends(require_roles(STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    """Take a task and start it."""
    try:
        return task_service.claim_task(db, task_id, session.user_id)
    except task_service.TaskNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post(
    "/{task_id}/assign",
    response_model=TaskRead,
    dependencies=[Depends(require_csrf_header)],
)
def assign_task(
    task_id: UUID,
    data: TaskAssign,
    session: UserSession = Depends(require_roles(STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    """Hand a task to another staff member."""
    try:
        return task_service.assign_task(db, task_id, data.assigned_to, session.user_id)
    except task_service.TaskNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except task_service.AssigneeNotFoundError as e:
        raise HTTPException(status_code=422, detail=str(e))
