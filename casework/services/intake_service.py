"""Client intake service - validate, persist and reconcile a full intake form.

One save runs, in order:
    validate -> staff email guard -> authorize + write client row
    -> case management / demographics / emergency contacts / household
    -> completion tracking -> commit -> invalidate client list cache

The client row is the anchor: nothing else is written until it has an id.
Each satellite write runs in its own SAVEPOINT so a failing satellite is
rolled back alone and reported in ``satellite_errors`` while the rest of the
save commits.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, TypeVar
from uuid import UUID

from fastapi import Request
from pydantic import ValidationError
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from casework.core.structured_logging import build_log_context
from casework.db.enums import (
    DEFAULT_CLIENT_STATUS,
    DEFAULT_HOUSING_STATUS,
    ROLES_CAN_CREATE_CLIENTS,
    ROLES_CAN_EDIT_ANY_CLIENT,
    STAFF_ROLES,
    AuditAction,
    ClientStatus,
    HousingStatus,
    Role,
)
from casework.db.models import (
    CaseManagement,
    Client,
    Demographics,
    EmergencyContact,
    HouseholdMember,
    Profile,
)
from casework.schemas.auth import UserSession
from casework.schemas.client import IntakeSaveResult, SatelliteError
from casework.schemas.intake import ClientIntakeForm
from casework.services import audit_service, cache_service, task_service
from casework.services.reconcile import ListSyncPolicy, plan_list_sync
from casework.utils.normalization import (
    blank_to_none,
    extract_ssn_last_four,
    normalize_email,
    normalize_name,
    split_full_name,
)


logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

INTAKE_TASK_TITLE = "Complete Full Intake Form"
COMPLETION_STEP = "completion"

# Columns a portal client may change on their own record
CLIENT_EDITABLE_COLUMNS = (
    "first_name",
    "middle_name",
    "last_name",
    "date_of_birth",
    "email",
    "phone",
    "alternate_phone",
    "street_address",
    "city",
    "state",
    "zip_code",
    "ssn_last_four",
)
# Administrative columns only staff may change
STAFF_EDITABLE_COLUMNS = CLIENT_EDITABLE_COLUMNS + ("status", "assigned_case_manager")

EMERGENCY_CONTACT_COLUMNS = ("name", "relationship", "phone", "email")
HOUSEHOLD_MEMBER_COLUMNS = ("first_name", "last_name", "relationship", "date_of_birth")


# =============================================================================
# Exceptions
# =============================================================================


class IntakeError(Exception):
    """Base exception for intake save errors."""

    error_kind = "unexpected"


class IntakeValidationError(IntakeError):
    """Payload failed schema validation."""

    error_kind = "validation"


class UnauthenticatedError(IntakeError):
    """No acting identity."""

    error_kind = "unauthenticated"


class ForbiddenError(IntakeError):
    """Actor may not create or edit this client."""

    error_kind = "forbidden"


class StaffEmailConflictError(IntakeError):
    """Participant email belongs to a staff account."""

    error_kind = "conflict"


class ClientNotFoundError(IntakeError):
    """Client id supplied for an update does not exist."""

    error_kind = "not_found"


class ClientWriteError(IntakeError):
    """The client row could not be written."""

    error_kind = "write_failed"


# =============================================================================
# Validation and guards
# =============================================================================


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        path = ".".join(str(p) for p in err.get("loc", ()))
        message = err.get("msg", "Invalid value")
        parts.append(f"{path}: {message}" if path else message)
    return "; ".join(parts)


def validate_intake(payload: ClientIntakeForm | dict[str, Any]) -> ClientIntakeForm:
    """
    Validate a raw intake payload.

    Pure: no database access.

    Raises:
        IntakeValidationError: If the payload does not match the intake schema
    """
    if isinstance(payload, ClientIntakeForm):
        return payload
    try:
        return ClientIntakeForm.model_validate(payload)
    except ValidationError as exc:
        raise IntakeValidationError(_format_validation_error(exc)) from exc


def coerce_enum(enum_cls: type[E], value: str | None, default: E) -> E:
    """Map a free-text value onto an enum, falling back to default instead of failing."""
    if value is None:
        return default
    try:
        return enum_cls(value.strip().lower())
    except ValueError:
        return default


def find_staff_profile_by_email(db: Session, email: str | None) -> Profile | None:
    """Case-insensitive lookup of a staff-role profile."""
    normalized = normalize_email(email)
    if not normalized:
        return None
    return (
        db.query(Profile)
        .filter(
            func.lower(Profile.email) == normalized,
            Profile.role.in_([role.value for role in STAFF_ROLES]),
        )
        .first()
    )


def guard_staff_email(db: Session, email: str | None) -> None:
    """
    Reject a participant email that belongs to a staff account.

    Raises:
        StaffEmailConflictError: Naming the staff member that owns the email
    """
    staff = find_staff_profile_by_email(db, email)
    if staff is None:
        return
    raise StaffEmailConflictError(
        f'This email address ({email}) belongs to staff member "{staff.full_name}". '
        "Clients cannot use staff email addresses. "
        "Please enter a different email for the client."
    )


# =============================================================================
# Client record
# =============================================================================


def _client_values(form: ClientIntakeForm) -> dict[str, Any]:
    """Column values for the client row derived from the form."""
    details = form.participant_details
    cm = form.case_management
    return {
        "first_name": normalize_name(details.first_name),
        "middle_name": normalize_name(details.middle_name),
        "last_name": normalize_name(details.last_name),
        "date_of_birth": details.date_of_birth,
        "email": normalize_email(details.email),
        "phone": details.primary_phone,
        "alternate_phone": details.secondary_phone,
        "street_address": details.street_address,
        "city": details.city,
        "state": details.state,
        "zip_code": details.zip_code,
        "ssn_last_four": cm.ssn_last_four or extract_ssn_last_four(details.ssn),
        "status": coerce_enum(ClientStatus, cm.client_status, DEFAULT_CLIENT_STATUS).value,
        "assigned_case_manager": cm.client_manager,
    }


def _omitted_admin_columns(form: ClientIntakeForm) -> set[str]:
    """Administrative columns the form left out; an update keeps their stored value."""
    cm = form.case_management
    omitted = set()
    if cm.client_status is None:
        omitted.add("status")
    if "client_manager" not in cm.model_fields_set:
        omitted.add("assigned_case_manager")
    return omitted


def _authorize_update(session: UserSession, client: Client) -> tuple[str, ...]:
    """Return the columns this actor may change on the client, or raise."""
    if session.role in ROLES_CAN_EDIT_ANY_CLIENT:
        return STAFF_EDITABLE_COLUMNS
    if session.role == Role.CLIENT and client.portal_user_id == session.user_id:
        return CLIENT_EDITABLE_COLUMNS
    raise ForbiddenError("You do not have permission to edit this client")


def write_client(
    db: Session,
    session: UserSession,
    form: ClientIntakeForm,
    client_id: UUID | None = None,
    request: Request | None = None,
) -> UUID:
    """
    Insert or update the client row and audit the change.

    Authorization is checked here, before any write.

    Returns:
        The resolved client id

    Raises:
        ForbiddenError: Actor may not create / edit this client
        ClientNotFoundError: client_id does not exist
        ClientWriteError: The row could not be written
    """
    values = _client_values(form)
    ssn = blank_to_none(form.participant_details.ssn)

    if client_id is not None:
        client = db.query(Client).filter(Client.id == client_id).first()
        if client is None:
            raise ClientNotFoundError(f"Client {client_id} not found")

        omitted = _omitted_admin_columns(form)
        columns = tuple(c for c in _authorize_update(session, client) if c not in omitted)
        before = audit_service.snapshot(client, columns)
        for column in columns:
            setattr(client, column, values[column])
        if ssn:
            client.ssn_encrypted = ssn

        try:
            db.flush()
        except SQLAlchemyError as exc:
            raise ClientWriteError(f"Failed to update client: {exc}") from exc

        audit_service.record_change(
            db=db,
            action=AuditAction.UPDATE,
            actor_user_id=session.user_id,
            table_name="clients",
            record_id=client.id,
            previous=before,
            current=audit_service.snapshot(client, columns),
            request=request,
        )
        return client.id

    if session.role not in ROLES_CAN_CREATE_CLIENTS:
        raise ForbiddenError("You do not have permission to create clients")

    client = Client(
        **values,
        ssn_encrypted=ssn,
        mailing_same_as_physical=True,
        has_portal_access=False,
        created_by=session.user_id,
    )
    db.add(client)
    try:
        db.flush()
    except SQLAlchemyError as exc:
        raise ClientWriteError(f"Failed to create client: {exc}") from exc

    if client.id is None:
        raise ClientWriteError("Failed to create client")

    audit_service.record_change(
        db=db,
        action=AuditAction.INSERT,
        actor_user_id=session.user_id,
        table_name="clients",
        record_id=client.id,
        previous=None,
        current=audit_service.snapshot(client),
        request=request,
    )
    return client.id


# =============================================================================
# Satellites
# =============================================================================


def _upsert_one_to_one(
    db: Session,
    model: type[CaseManagement] | type[Demographics],
    client_id: UUID,
    values: dict[str, Any],
    actor_id: UUID,
    request: Request | None,
) -> None:
    """Update the client's row in place (auditing the diff) or insert it."""
    table_name = model.__tablename__
    row = db.query(model).filter(model.client_id == client_id).first()

    if row is not None:
        before = audit_service.snapshot(row, values.keys())
        for column, value in values.items():
            setattr(row, column, value)
        db.flush()
        audit_service.record_change(
            db=db,
            action=AuditAction.UPDATE,
            actor_user_id=actor_id,
            table_name=table_name,
            record_id=row.id,
            previous=before,
            current=audit_service.snapshot(row, values.keys()),
            request=request,
        )
        return

    row = model(client_id=client_id, **values)
    db.add(row)
    db.flush()
    audit_service.record_change(
        db=db,
        action=AuditAction.INSERT,
        actor_user_id=actor_id,
        table_name=table_name,
        record_id=row.id,
        previous=None,
        current=audit_service.snapshot(row),
        request=request,
    )


def sync_case_management(
    db: Session,
    client_id: UUID,
    form: ClientIntakeForm,
    session: UserSession,
    request: Request | None = None,
) -> None:
    cm = form.case_management
    values = {
        "client_id_number": cm.hmis_unique_id,
        "housing_status": coerce_enum(
            HousingStatus, cm.housing_status, DEFAULT_HOUSING_STATUS
        ).value,
        "primary_language": cm.primary_language or "English",
        "secondary_language": cm.secondary_language,
        "vi_spdat_score": cm.vi_spdat_score,
        "health_insurance": cm.has_health_insurance,
        "health_insurance_type": cm.health_insurance_type,
        "non_cash_benefits": list(cm.non_cash_benefits),
        "health_status": cm.health_status,
    }
    _upsert_one_to_one(db, CaseManagement, client_id, values, session.user_id, request)


def sync_demographics(
    db: Session,
    client_id: UUID,
    form: ClientIntakeForm,
    session: UserSession,
    request: Request | None = None,
) -> None:
    demo = form.demographics
    values = {
        "gender": demo.gender_identity,
        "ethnicity": demo.ethnicity,
        "race": list(demo.race),
        "marital_status": demo.marital_status,
        "employment_status": demo.employment_status,
        "monthly_income": demo.monthly_income,
        "income_source": demo.income_source,
        "veteran_status": demo.veteran_status,
        "disability_status": demo.disability_status,
    }
    _upsert_one_to_one(db, Demographics, client_id, values, session.user_id, request)


def _replace_list(
    db: Session,
    model: type[EmergencyContact] | type[HouseholdMember],
    columns: tuple[str, ...],
    client_id: UUID,
    incoming: list[dict[str, Any]],
    actor_id: UUID,
    request: Request | None,
) -> None:
    """
    Replace a client's list satellite wholesale.

    Every stored row is deleted and the submitted rows inserted, so row ids
    change on every save even when the content is identical.
    """
    existing = (
        db.query(model)
        .filter(model.client_id == client_id)
        .order_by(model.created_at.asc())
        .all()
    )
    previous = [audit_service.snapshot(row, columns) for row in existing]

    plan = plan_list_sync(existing, incoming, ListSyncPolicy.REPLACE_ALL)
    for row in plan.to_remove:
        db.delete(row)
    db.flush()
    for values in plan.to_add:
        db.add(model(client_id=client_id, **values))
    db.flush()

    audit_service.record_list_change(
        db=db,
        actor_user_id=actor_id,
        table_name=model.__tablename__,
        client_id=client_id,
        previous=previous,
        current=[{k: audit_service.to_audit_value(v) for k, v in item.items()} for item in incoming],
        request=request,
    )


def sync_emergency_contacts(
    db: Session,
    client_id: UUID,
    form: ClientIntakeForm,
    session: UserSession,
    request: Request | None = None,
) -> None:
    incoming = [
        {
            "name": contact.name,
            "relationship": contact.relationship,
            "phone": contact.phone,
            "email": normalize_email(contact.email),
        }
        for contact in form.emergency_contacts
    ]
    _replace_list(
        db, EmergencyContact, EMERGENCY_CONTACT_COLUMNS, client_id, incoming,
        session.user_id, request,
    )


def sync_household_members(
    db: Session,
    client_id: UUID,
    form: ClientIntakeForm,
    session: UserSession,
    request: Request | None = None,
) -> None:
    incoming = []
    for member in form.household.members:
        first_name, last_name = split_full_name(member.name)
        incoming.append(
            {
                "first_name": first_name,
                "last_name": last_name,
                "relationship": member.relationship,
                "date_of_birth": member.date_of_birth,
            }
        )
    _replace_list(
        db, HouseholdMember, HOUSEHOLD_MEMBER_COLUMNS, client_id, incoming,
        session.user_id, request,
    )


def _run_in_savepoint(
    db: Session,
    step_name: str,
    step: Callable[[], Any],
    errors: list[SatelliteError],
    log_context: dict[str, Any],
) -> None:
    """Run one best-effort step; on failure roll back just that step and record it."""
    try:
        with db.begin_nested():
            step()
    except Exception as exc:
        logger.exception(
            "Intake step failed",
            extra={**log_context, "step": step_name},
        )
        errors.append(SatelliteError(table=step_name, error=str(exc)))


def reconcile_satellites(
    db: Session,
    client_id: UUID,
    form: ClientIntakeForm,
    session: UserSession,
    request: Request | None = None,
) -> list[SatelliteError]:
    """Write all four satellites independently. Returns the failures."""
    errors: list[SatelliteError] = []
    log_context = build_log_context(user_id=session.user_id, client_id=client_id)
    steps = (
        ("case_management", sync_case_management),
        ("demographics", sync_demographics),
        ("emergency_contacts", sync_emergency_contacts),
        ("household_members", sync_household_members),
    )
    for table_name, sync in steps:
        _run_in_savepoint(
            db,
            table_name,
            lambda sync=sync: sync(db, client_id, form, session, request),
            errors,
            log_context,
        )
    return errors


# =============================================================================
# Completion tracking
# =============================================================================


def track_completion(db: Session, client_id: UUID, session: UserSession) -> bool:
    """
    Stamp intake completion the first time the client or staff saves it.

    Also completes the client's "Complete Full Intake Form" task. Does
    nothing once intake_completed_at is set.

    Returns:
        True if completion was stamped by this call
    """
    client = db.query(Client).filter(Client.id == client_id).first()
    if client is None or client.intake_completed_at is not None:
        return False

    is_own_profile = client.portal_user_id == session.user_id
    if not (is_own_profile or session.role in STAFF_ROLES):
        return False

    client.intake_completed_at = datetime.now(timezone.utc)
    task_service.complete_task_by_title(
        db, client_id, INTAKE_TASK_TITLE, completed_by=session.user_id
    )
    db.flush()
    return True


# =============================================================================
# Pipeline
# =============================================================================


def save_client_intake(
    db: Session,
    session: UserSession | None,
    payload: ClientIntakeForm | dict[str, Any],
    client_id: UUID | None = None,
    request: Request | None = None,
) -> IntakeSaveResult:
    """
    Save a complete intake form (create when client_id is None, else update).

    Never raises: every failure is rolled back and returned as
    ``IntakeSaveResult(success=False, error=..., error_kind=...)``. Satellite
    failures leave success=True and are listed in ``satellite_errors``.
    """
    log_context = build_log_context(
        user_id=session.user_id if session else None, client_id=client_id
    )
    try:
        form = validate_intake(payload)
        if session is None:
            raise UnauthenticatedError("User not authenticated")

        guard_staff_email(db, form.participant_details.email)
        saved_id = write_client(db, session, form, client_id, request)

        errors = reconcile_satellites(db, saved_id, form, session, request)
        _run_in_savepoint(
            db,
            COMPLETION_STEP,
            lambda: track_completion(db, saved_id, session),
            errors,
            log_context,
        )

        db.commit()
    except IntakeError as exc:
        db.rollback()
        logger.info(
            "Client intake rejected",
            extra={**log_context, "error_kind": exc.error_kind},
        )
        return IntakeSaveResult(success=False, error=str(exc), error_kind=exc.error_kind)
    except Exception as exc:
        db.rollback()
        logger.exception("Client intake save failed", extra=log_context)
        return IntakeSaveResult(
            success=False,
            error=str(exc) or "Failed to save client",
            error_kind=IntakeError.error_kind,
        )

    cache_service.invalidate_clients()
    logger.info(
        "Client intake saved",
        extra={
            **build_log_context(user_id=session.user_id, client_id=saved_id),
            "is_new_client": client_id is None,
            "satellite_errors": len(errors),
        },
    )
    return IntakeSaveResult(success=True, client_id=saved_id, satellite_errors=errors)
