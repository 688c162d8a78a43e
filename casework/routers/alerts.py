"""Alerts router - the current user's in-app alerts."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from casework.core.deps import get_current_session, get_db, require_csrf_header
from casework.schemas.alert import AlertRead
from casework.schemas.auth import UserSession
from casework.services import alert_service

router = APIRouter()


class UnreadCountResponse(BaseModel):
    count: int


@router.get("", response_model=list[AlertRead])
def list_alerts(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Latest undismissed alerts."""
    return alert_service.list_alerts(db, session.user_id)


@router.get("/count", response_model=UnreadCountResponse)
def get_unread_count(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Unread alert count (for polling)."""
    return UnreadCountResponse(count=alert_service.get_unread_count(db, session.user_id))


@router.patch(
    "/{alert_id}/read",
    response_model=AlertRead,
    dependencies=[Depends(require_csrf_header)],
)
def mark_alert_read(
    alert_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    alert = alert_service.mark_read(db, alert_id, session.user_id)
    if not alert:
        raise HTTPException(status_code=404, detail="Alert not found")
    return alert


@router.patch(
    "/{alert_id}/dismiss",
    response_model=AlertRead,
    dependencies=[Depends(require_csrf_header)],
)
def dismiss_alert(
    alert_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    alert = alert_service.dismiss(db, alert_id, session.user_id)
    if not alert:
        raise HTTPException(status_code=404, detail="Alert not found")
    return alert
