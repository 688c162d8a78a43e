"""Admin deletion of a profile and everything that belongs to it."""

import logging
from datetime import datetime, timezone
from uuid import UUID

from fastapi import Request
from sqlalchemy import or_
from sqlalchemy.orm import Session

from casework.core.structured_logging import build_log_context
from casework.db.enums import ROLES_CAN_DELETE, AuditAction, Role
from casework.db.models import Alert, AuditLog, Client, Profile, Task
from casework.schemas.auth import UserSession
from casework.services import audit_service, cache_service, client_service


logger = logging.getLogger(__name__)


class UserDeletionError(Exception):
    """Base exception for user deletion errors."""

    pass


class ForbiddenError(UserDeletionError):
    """Actor may not delete this user."""

    pass


class UserNotFoundError(UserDeletionError):
    """Profile not found."""

    pass


def _detach_profile_references(db: Session, user_id: UUID) -> None:
    """Null out nullable references to the profile that do not own data."""
    db.query(Client).filter(Client.created_by == user_id).update(
        {Client.created_by: None}, synchronize_session=False
    )
    db.query(Client).filter(Client.assigned_case_manager == user_id).update(
        {Client.assigned_case_manager: None}, synchronize_session=False
    )
    db.query(Client).filter(Client.portal_user_id == user_id).update(
        {Client.portal_user_id: None, Client.has_portal_access: False},
        synchronize_session=False,
    )
    db.query(Task).filter(Task.completed_by == user_id).update(
        {Task.completed_by: None}, synchronize_session=False
    )


def delete_user_and_data(
    db: Session,
    session: UserSession,
    user_id: UUID,
    request: Request | None = None,
) -> str:
    """
    Permanently delete a profile and its data (admin only).

    - client role: the linked client record and all its dependents
    - staff roles: tasks the user created or was assigned

    Audit rows by or about the user are removed, then a user_deleted
    entry is appended.

    Returns:
        Confirmation message

    Raises:
        ForbiddenError: Actor is not an admin, or is deleting themselves
        UserNotFoundError: Profile does not exist
    """
    if session.role not in ROLES_CAN_DELETE:
        raise ForbiddenError("Only admins can delete users")
    if session.user_id == user_id:
        raise ForbiddenError("Cannot delete your own admin account")

    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if not profile:
        raise UserNotFoundError("User not found")

    snapshot = {
        "email": profile.email,
        "role": profile.role,
        "first_name": profile.first_name,
        "last_name": profile.last_name,
    }

    if profile.role == Role.CLIENT.value:
        client = client_service.get_client_by_portal_user(db, user_id)
        if client:
            client_service.purge_client_records(db, client)
    else:
        task_ids = [
            task_id
            for (task_id,) in db.query(Task.id).filter(
                or_(Task.assigned_by == user_id, Task.assigned_to == user_id)
            )
        ]
        if task_ids:
            db.query(Alert).filter(Alert.task_id.in_(task_ids)).delete(
                synchronize_session=False
            )
            db.query(Task).filter(Task.id.in_(task_ids)).delete(synchronize_session=False)

    db.query(Alert).filter(Alert.user_id == user_id).delete(synchronize_session=False)
    _detach_profile_references(db, user_id)
    db.query(AuditLog).filter(
        or_(AuditLog.user_id == user_id, AuditLog.record_id == user_id)
    ).delete(synchronize_session=False)

    db.delete(profile)
    db.flush()

    audit_service.log_event(
        db=db,
        action=AuditAction.USER_DELETED,
        actor_user_id=session.user_id,
        table_name="profiles",
        record_id=user_id,
        new_values={**snapshot, "deleted_at": datetime.now(timezone.utc).isoformat()},
        request=request,
    )
    db.commit()
    cache_service.invalidate_clients()

    logger.info(
        "User deleted",
        extra={**build_log_context(user_id=session.user_id), "deleted_user_id": str(user_id)},
    )
    return (
        f"User {snapshot['first_name']} {snapshot['last_name']} ({snapshot['role']}) "
        "and all associated data have been permanently deleted."
    )
