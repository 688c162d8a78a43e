"""Client service - reads, cursor listing and admin deletion of client records."""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from fastapi import Request
from sqlalchemy.orm import Session

from casework.core.structured_logging import build_log_context
from casework.db.enums import ROLES_CAN_DELETE, AuditAction, ClientStatus
from casework.db.models import (
    Alert,
    AuditLog,
    CaseManagement,
    Client,
    Demographics,
    EmergencyContact,
    HouseholdMember,
    Task,
)
from casework.schemas.auth import UserSession
from casework.schemas.client import ClientSummary
from casework.services import audit_service, cache_service
from casework.utils.pagination import CursorPage, paginate_by_created_at


logger = logging.getLogger(__name__)


class ClientServiceError(Exception):
    """Base exception for client service errors."""

    pass


class ClientNotFoundError(ClientServiceError):
    """Client not found."""

    pass


class ForbiddenError(ClientServiceError):
    """Actor may not perform this client operation."""

    pass


# =============================================================================
# Reads
# =============================================================================


def get_client(db: Session, client_id: UUID) -> Client | None:
    """Get client by ID."""
    return db.query(Client).filter(Client.id == client_id).first()


def get_client_by_portal_user(db: Session, user_id: UUID) -> Client | None:
    """Get the client record linked to a portal profile."""
    return db.query(Client).filter(Client.portal_user_id == user_id).first()


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def get_client_full_data(db: Session, client_id: UUID) -> dict[str, Any]:
    """
    Load a client and its satellites in the intake-form shape.

    Missing satellites yield empty defaults, so the result can be fed
    straight back into save_client_intake. The SSN is never returned.

    Raises:
        ClientNotFoundError: If the client does not exist
    """
    client = get_client(db, client_id)
    if client is None:
        raise ClientNotFoundError(f"Client {client_id} not found")

    cm = db.query(CaseManagement).filter(CaseManagement.client_id == client_id).first()
    demo = db.query(Demographics).filter(Demographics.client_id == client_id).first()
    contacts = (
        db.query(EmergencyContact)
        .filter(EmergencyContact.client_id == client_id)
        .order_by(EmergencyContact.created_at.asc())
        .all()
    )
    members = (
        db.query(HouseholdMember)
        .filter(HouseholdMember.client_id == client_id)
        .order_by(HouseholdMember.created_at.asc())
        .all()
    )

    return {
        "participant_details": {
            "first_name": client.first_name,
            "middle_name": _text(client.middle_name),
            "last_name": client.last_name,
            "date_of_birth": client.date_of_birth.isoformat() if client.date_of_birth else "",
            "ssn": "",
            "email": _text(client.email),
            "primary_phone": _text(client.phone),
            "secondary_phone": _text(client.alternate_phone),
            "street_address": _text(client.street_address),
            "city": _text(client.city),
            "state": _text(client.state),
            "county": "",
            "zip_code": _text(client.zip_code),
        },
        "emergency_contacts": [
            {
                "name": contact.name,
                "relationship": _text(contact.relationship),
                "phone": contact.phone,
                "email": _text(contact.email),
            }
            for contact in contacts
        ],
        "case_management": {
            "client_manager": _text(client.assigned_case_manager),
            "client_status": client.status,
            "engagement_letter_signed": False,
            "hmis_unique_id": _text(cm.client_id_number) if cm else "",
            "ssn_last_four": _text(client.ssn_last_four),
            "housing_status": cm.housing_status if cm else "",
            "primary_language": cm.primary_language if cm else "",
            "secondary_language": _text(cm.secondary_language) if cm else "",
            "additional_address_info": _text(cm.notes) if cm else "",
            "vi_spdat_score": cm.vi_spdat_score if cm else None,
            "preferred_id": "",
            "cal_fresh_medi_cal_id": "",
            "cal_fresh_medi_cal_partner_month": "",
            "race": list(demo.race) if demo else [],
            "health_insurance": cm.health_insurance if cm else False,
            "health_insurance_type": _text(cm.health_insurance_type) if cm else "",
            "non_cash_benefits": list(cm.non_cash_benefits) if cm else [],
            "health_status": _text(cm.health_status) if cm else "",
        },
        "demographics": {
            "race": list(demo.race) if demo else [],
            "gender_identity": _text(demo.gender) if demo else "",
            "ethnicity": _text(demo.ethnicity) if demo else "",
            "marital_status": _text(demo.marital_status) if demo else "",
            "language": cm.primary_language if cm else "",
            "employment_status": _text(demo.employment_status) if demo else "",
            "monthly_income": (
                str(demo.monthly_income) if demo and demo.monthly_income is not None else None
            ),
            "income_source": _text(demo.income_source) if demo else "",
            "veteran_status": demo.veteran_status if demo else False,
            "disability_status": demo.disability_status if demo else False,
        },
        "household": {
            "members": [
                {
                    "id": str(member.id),
                    "name": f"{member.first_name} {member.last_name}".strip(),
                    "relationship": member.relationship,
                    "date_of_birth": member.date_of_birth.isoformat() if member.date_of_birth else "",
                    "gender": "",
                    "race": [],
                }
                for member in members
            ],
        },
    }


def list_clients(
    db: Session,
    limit: int = 50,
    cursor: str | None = None,
    status_filter: str | None = None,
) -> CursorPage[Client]:
    """
    Newest-first cursor page of clients.

    An unknown status_filter is ignored rather than rejected.

    Raises:
        ValueError: If the cursor is not a valid timestamp
    """
    query = db.query(Client)
    if status_filter and status_filter in ClientStatus._value2member_map_:
        query = query.filter(Client.status == status_filter)
    return paginate_by_created_at(query, Client.created_at, limit, cursor)


def to_summary(client: Client) -> ClientSummary:
    return ClientSummary(
        id=client.id,
        name=client.full_name,
        email=client.email or "",
        phone=client.phone or "",
        status=client.status or ClientStatus.PENDING.value,
        created_at=client.created_at,
        updated_at=client.updated_at,
    )


def get_all_clients(db: Session) -> list[ClientSummary]:
    """All clients as summaries, newest first. Served from the client list cache."""

    def _load() -> list[ClientSummary]:
        clients = db.query(Client).order_by(Client.created_at.desc()).all()
        return [to_summary(client) for client in clients]

    # Callers get their own list; the cached one is shared
    return list(
        cache_service.client_list_cache.get_or_compute(
            cache_service.CLIENTS_ENTITY, cache_service.ALL_SCOPE, _load
        )
    )


# =============================================================================
# Deletion
# =============================================================================


def purge_client_records(db: Session, client: Client) -> None:
    """
    Delete a client and every dependent row, children first.

    Audit rows about the client or its satellites are removed too. Flushes
    only; the caller commits.
    """
    client_id = client.id
    satellite_ids: list[UUID] = []
    for model in (CaseManagement, Demographics, EmergencyContact, HouseholdMember):
        satellite_ids.extend(
            row_id for (row_id,) in db.query(model.id).filter(model.client_id == client_id)
        )

    db.query(Alert).filter(Alert.client_id == client_id).delete(synchronize_session=False)
    db.query(Task).filter(Task.client_id == client_id).delete(synchronize_session=False)
    for model in (CaseManagement, HouseholdMember, EmergencyContact, Demographics):
        db.query(model).filter(model.client_id == client_id).delete(synchronize_session=False)
    db.delete(client)
    db.flush()

    db.query(AuditLog).filter(
        AuditLog.record_id.in_([client_id, *satellite_ids])
    ).delete(synchronize_session=False)
    db.flush()


def delete_client(
    db: Session,
    session: UserSession,
    client_id: UUID,
    request: Request | None = None,
) -> str:
    """
    Permanently delete a client and all associated data (admin only).

    Returns:
        Confirmation message

    Raises:
        ForbiddenError: Actor is not an admin
        ClientNotFoundError: Client does not exist
    """
    if session.role not in ROLES_CAN_DELETE:
        raise ForbiddenError("Only admins can delete clients")

    client = get_client(db, client_id)
    if client is None:
        raise ClientNotFoundError("Client not found")

    first_name, last_name, email = client.first_name, client.last_name, client.email
    purge_client_records(db, client)

    audit_service.log_event(
        db=db,
        action=AuditAction.CLIENT_DELETED,
        actor_user_id=session.user_id,
        table_name="clients",
        record_id=client_id,
        new_values={
            "email": email,
            "first_name": first_name,
            "last_name": last_name,
            "deleted_at": datetime.now(timezone.utc).isoformat(),
        },
        request=request,
    )
    db.commit()
    cache_service.invalidate_clients()

    logger.info(
        "Client deleted",
        extra=build_log_context(user_id=session.user_id, client_id=client_id),
    )
    return f"Client {first_name} {last_name} and all associated data have been permanently deleted."
