"""Clients router - intake save, reads, listing, history and deletion."""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from casework.core.config import settings
from casework.core.deps import (
    get_current_session,
    get_db,
    require_csrf_header,
    require_roles,
)
from casework.db.enums import ROLES_CAN_DELETE, STAFF_ROLES, Role
from casework.db.models import Profile
from casework.schemas.auth import UserSession
from casework.schemas.client import (
    ClientPageResponse,
    ClientRead,
    ClientSummary,
    IntakeSaveResult,
    PortalClientResponse,
)
from casework.schemas.history import ClientHistoryEntry, InteractionCreate
from casework.schemas.intake import ClientIntakeForm
from casework.services import audit_service, client_service, intake_service

router = APIRouter()

# IntakeSaveResult.error_kind -> HTTP status
ERROR_KIND_STATUS = {
    "validation": 422,
    "unauthenticated": 401,
    "forbidden": 403,
    "conflict": 409,
    "not_found": 404,
    "write_failed": 500,
    "unexpected": 500,
}


def _raise_for_result(result: IntakeSaveResult) -> IntakeSaveResult:
    if result.success:
        return result
    status_code = ERROR_KIND_STATUS.get(result.error_kind or "unexpected", 500)
    raise HTTPException(status_code=status_code, detail=result.error)


def _ensure_can_read(session: UserSession, client_id: UUID, db: Session) -> None:
    """Staff read any client; portal clients only their own record."""
    if session.is_staff:
        return
    own = client_service.get_client_by_portal_user(db, session.user_id)
    if session.role != Role.CLIENT or own is None or own.id != client_id:
        raise HTTPException(status_code=403, detail="Not authorized to view this client")


# =============================================================================
# Intake
# =============================================================================


@router.post(
    "/intake",
    response_model=IntakeSaveResult,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_client_intake(
    data: ClientIntakeForm,
    request: Request,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Create a client from a full intake form."""
    result = intake_service.save_client_intake(db, session, data, request=request)
    return _raise_for_result(result)


@router.put(
    "/{client_id}/intake",
    response_model=IntakeSaveResult,
    dependencies=[Depends(require_csrf_header)],
)
def update_client_intake(
    client_id: UUID,
    data: ClientIntakeForm,
    request: Request,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Update an existing client's intake (staff, or the client's own portal account)."""
    result = intake_service.save_client_intake(db, session, data, client_id, request=request)
    return _raise_for_result(result)


# =============================================================================
# Reads
# =============================================================================


@router.get("", response_model=ClientPageResponse)
def list_clients(
    session: UserSession = Depends(require_roles(STAFF_ROLES)),
    db: Session = Depends(get_db),
    limit: int = Query(settings.DEFAULT_CLIENT_PAGE_SIZE, ge=1, le=settings.MAX_CLIENT_PAGE_SIZE),
    cursor: str | None = None,
    status: str | None = None,
):
    """Newest-first cursor page of clients."""
    try:
        page = client_service.list_clients(db, limit=limit, cursor=cursor, status_filter=status)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return ClientPageResponse(
        items=[client_service.to_summary(client) for client in page.items],
        has_more=page.has_more,
        next_cursor=page.next_cursor,
    )


@router.get("/all", response_model=list[ClientSummary])
def get_all_clients(
    session: UserSession = Depends(require_roles(STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    """All client summaries (cached)."""
    return client_service.get_all_clients(db)


@router.get("/me", response_model=PortalClientResponse)
def get_my_client(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Client record linked to the current portal account."""
    client = client_service.get_client_by_portal_user(db, session.user_id)
    if not client:
        raise HTTPException(status_code=404, detail="No client record linked to this account")
    return PortalClientResponse(id=client.id)


@router.get("/{client_id}", response_model=ClientRead)
def get_client(
    client_id: UUID,
    request: Request,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Get client detail. Each view is recorded in the audit log."""
    _ensure_can_read(session, client_id, db)
    client = client_service.get_client(db, client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")

    audit_service.log_client_view(db, session.user_id, client_id, request=request)
    db.commit()
    db.refresh(client)
    return client


@router.get("/{client_id}/intake")
def get_client_intake(
    client_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Client and satellites in the intake-form shape."""
    _ensure_can_read(session, client_id, db)
    try:
        return client_service.get_client_full_data(db, client_id)
    except client_service.ClientNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


# =============================================================================
# History
# =============================================================================


@router.get("/{client_id}/history", response_model=list[ClientHistoryEntry])
def get_client_history(
    client_id: UUID,
    session: UserSession = Depends(require_roles(STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    """Interactions and record changes for a client, newest first."""
    if not client_service.get_client(db, client_id):
        raise HTTPException(status_code=404, detail="Client not found")
    return audit_service.get_client_history(db, client_id)


@router.post(
    "/{client_id}/history",
    response_model=ClientHistoryEntry,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def log_client_interaction(
    client_id: UUID,
    data: InteractionCreate,
    request: Request,
    session: UserSession = Depends(require_roles(STAFF_ROLES)),
    db: Session = Depends(get_db),
):
    """Log a call, meeting or note against a client."""
    if not client_service.get_client(db, client_id):
        raise HTTPException(status_code=404, detail="Client not found")

    entry = audit_service.log_client_interaction(
        db,
        session.user_id,
        client_id,
        data.interaction_type,
        data.title,
        description=data.description,
        metadata=data.metadata,
        request=request,
    )
    db.commit()
    db.refresh(entry)
    return audit_service.to_history_entry(entry, db.get(Profile, session.user_id))


# =============================================================================
# Deletion
# =============================================================================


@router.delete("/{client_id}", dependencies=[Depends(require_csrf_header)])
def delete_client(
    client_id: UUID,
    request: Request,
    session: UserSession = Depends(require_roles(ROLES_CAN_DELETE)),
    db: Session = Depends(get_db),
):
    """Permanently delete a client and all associated data (admin only)."""
    try:
        message = client_service.delete_client(db, session, client_id, request=request)
    except client_service.ClientNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except client_service.ForbiddenError as e:
        raise HTTPException(status_code=403, detail=str(e))
    return {"success": True, "message": message}
