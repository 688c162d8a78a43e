"""User service - profile listing and account archiving."""

import logging
from uuid import UUID

from fastapi import Request
from sqlalchemy.orm import Session

from casework.core.structured_logging import build_log_context
from casework.db.enums import ROLES_CAN_DELETE, AuditAction
from casework.db.models import Profile
from casework.schemas.auth import UserSession
from casework.services import audit_service


logger = logging.getLogger(__name__)


class UserServiceError(Exception):
    """Base exception for user service errors."""

    pass


class ForbiddenError(UserServiceError):
    """Actor may not manage this account."""

    pass


class UserNotFoundError(UserServiceError):
    """Profile not found."""

    pass


def get_all_users(db: Session) -> list[Profile]:
    """Every profile, archived ones included, newest first."""
    return db.query(Profile).order_by(Profile.created_at.desc()).all()


def archive_user(
    db: Session,
    session: UserSession,
    user_id: UUID,
    request: Request | None = None,
) -> Profile:
    """
    Deactivate an account without deleting any of its data (admin only).

    Also revokes all sessions by bumping token_version.

    Raises:
        ForbiddenError: Actor is not an admin, or is archiving themselves
        UserNotFoundError: Profile does not exist
    """
    if session.role not in ROLES_CAN_DELETE:
        raise ForbiddenError("Only admins can archive users")
    if session.user_id == user_id:
        raise ForbiddenError("Cannot archive your own admin account")

    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if not profile:
        raise UserNotFoundError("User not found")

    profile.is_active = False
    profile.token_version += 1

    audit_service.log_event(
        db=db,
        action=AuditAction.USER_ARCHIVED,
        actor_user_id=session.user_id,
        table_name="profiles",
        record_id=user_id,
        new_values={"email": profile.email, "role": profile.role},
        request=request,
    )
    db.commit()
    db.refresh(profile)

    logger.info(
        "User archived",
        extra={**build_log_context(user_id=session.user_id), "archived_user_id": str(user_id)},
    )
    return profile
