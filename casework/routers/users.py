"""Users router - profile listing, archiving and admin account deletion."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from casework.core.deps import get_db, require_csrf_header, require_roles
from casework.db.enums import ROLES_CAN_DELETE, STAFF_ROLES
from casework.schemas.auth import UserSession
from casework.schemas.user import UserRead
from casework.services import user_deletion_service, user_service

router = APIRouter()


@router.get("", response_model=list[UserRead])
def list_users(
    session: UserSession = Depends(require_roles(STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    """All profiles, newest first."""
    return user_service.get_all_users(db)


@router.post(
    "/{user_id}/archive",
    response_model=UserRead,
    dependencies=[Depends(require_csrf_header)],
)
def archive_user(
    user_id: UUID,
    request: Request,
    session: UserSession = Depends(require_roles(ROLES_CAN_DELETE)),
    db: Session = Depends(get_db),
):
    """Deactivate an account and revoke its sessions (admin only)."""
    try:
        return user_service.archive_user(db, session, user_id, request=request)
    except user_service.UserNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except user_service.ForbiddenError as e:
        raise HTTPException(status_code=403, detail=str(e))


@router.delete("/{user_id}", dependencies=[Depends(require_csrf_header)])
def delete_user(
    user_id: UUID,
    request: Request,
    session: UserSession = Depends(require_roles(ROLES_CAN_DELETE)),
    db: Session = Depends(get_db),
):
    """Permanently delete a user and their data (admin only)."""
    try:
        message = user_deletion_service.delete_user_and_data(db, session, user_id, request=request)
    except user_deletion_service.UserNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except user_deletion_service.ForbiddenError as e:
        raise HTTPException(status_code=403, detail=str(e))
    return {"success": True, "message": message}
