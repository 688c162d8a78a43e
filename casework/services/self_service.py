"""Portal self-service registration.

Creates the client's portal profile, the linked client record, a starter
case-management row and the onboarding tasks in one transaction. Password
and signature storage belong to the external auth/storage providers.
"""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import func
from sqlalchemy.orm import Session

from casework.core.config import settings
from casework.core.structured_logging import build_log_context
from casework.db.enums import (
    DEFAULT_CLIENT_STATUS,
    DEFAULT_HOUSING_STATUS,
    AuditAction,
    Role,
    TaskPriority,
)
from casework.db.models import CaseManagement, Client, Profile
from casework.schemas.self_service import SelfServiceApplication, SelfServiceResult
from casework.schemas.task import TaskCreate
from casework.services import audit_service, cache_service, intake_service, task_service
from casework.utils.normalization import normalize_email


logger = logging.getLogger(__name__)

PROFILE_TASK_TITLE = "Complete Profile Information"


class SelfServiceError(Exception):
    """Base exception for self-service registration errors."""

    pass


class DuplicateAccountError(SelfServiceError):
    """An account with this email already exists."""

    pass


def submit_self_service_application(
    db: Session,
    data: SelfServiceApplication,
) -> SelfServiceResult:
    """
    Register a new portal client.

    Raises:
        intake_service.StaffEmailConflictError: Email belongs to staff
        DuplicateAccountError: Email already has a profile
    """
    email = normalize_email(data.email)
    intake_service.guard_staff_email(db, email)

    existing = db.query(Profile).filter(func.lower(Profile.email) == email).first()
    if existing:
        raise DuplicateAccountError("An account with this email already exists")

    profile = Profile(
        email=email,
        first_name=data.first_name,
        last_name=data.last_name,
        role=Role.CLIENT.value,
        phone=data.phone,
        is_active=True,
    )
    db.add(profile)
    db.flush()

    client = Client(
        first_name=data.first_name,
        last_name=data.last_name,
        email=email,
        phone=data.phone,
        date_of_birth=data.date_of_birth,
        street_address=data.street,
        city=data.city,
        state=data.state,
        zip_code=data.zip_code,
        status=DEFAULT_CLIENT_STATUS.value,
        has_portal_access=True,
        portal_user_id=profile.id,
        created_by=profile.id,
    )
    db.add(client)
    db.flush()

    db.add(
        CaseManagement(
            client_id=client.id,
            primary_language=data.preferred_language or "English",
            housing_status=DEFAULT_HOUSING_STATUS.value,
        )
    )

    task_service.create_task(
        db,
        profile.id,
        TaskCreate(
            title=intake_service.INTAKE_TASK_TITLE,
            description="Fill out the full intake form so your case manager can get started.",
            client_id=client.id,
            priority=TaskPriority.HIGH,
            category="onboarding",
        ),
        commit=False,
    )
    task_service.create_task(
        db,
        profile.id,
        TaskCreate(
            title=PROFILE_TASK_TITLE,
            description=(
                f"New client {data.first_name} {data.last_name} registered via self-service. "
                "Please review their profile and ensure all required information is collected."
            ),
            client_id=client.id,
            priority=TaskPriority.MEDIUM,
            due_date=datetime.now(timezone.utc) + timedelta(days=settings.PROFILE_TASK_DUE_DAYS),
            category="onboarding",
        ),
        commit=False,
    )

    audit_service.log_event(
        db=db,
        action=AuditAction.CLIENT_SELF_REGISTRATION,
        actor_user_id=profile.id,
        table_name="clients",
        record_id=client.id,
        new_values={
            "email": email,
            "first_name": data.first_name,
            "last_name": data.last_name,
        },
    )
    db.commit()
    cache_service.invalidate_clients()

    logger.info(
        "Self-service registration completed",
        extra=build_log_context(user_id=profile.id, client_id=client.id),
    )
    return SelfServiceResult(client_id=client.id, user_id=profile.id)
