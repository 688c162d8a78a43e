"""Alert service - a profile's in-app alerts: list, mark read, dismiss."""

from uuid import UUID

from sqlalchemy.orm import Session

from casework.db.models import Alert


DEFAULT_ALERT_LIMIT = 10


def list_alerts(
    db: Session,
    user_id: UUID,
    limit: int = DEFAULT_ALERT_LIMIT,
) -> list[Alert]:
    """Undismissed alerts for the user, newest first."""
    return (
        db.query(Alert)
        .filter(Alert.user_id == user_id, Alert.is_dismissed.is_(False))
        .order_by(Alert.created_at.desc())
        .limit(limit)
        .all()
    )


def get_unread_count(db: Session, user_id: UUID) -> int:
    return db.query(Alert).filter(
        Alert.user_id == user_id,
        Alert.is_read.is_(False),
        Alert.is_dismissed.is_(False),
    ).count()


def _get_own_alert(db: Session, alert_id: UUID, user_id: UUID) -> Alert | None:
    # Scoped to the owner: another user's alert id behaves as missing
    return db.query(Alert).filter(Alert.id == alert_id, Alert.user_id == user_id).first()


def mark_read(db: Session, alert_id: UUID, user_id: UUID) -> Alert | None:
    """Mark one of the user's alerts as read. None if it is not theirs."""
    alert = _get_own_alert(db, alert_id, user_id)
    if alert and not alert.is_read:
        alert.is_read = True
        db.commit()
        db.refresh(alert)
    return alert


def dismiss(db: Session, alert_id: UUID, user_id: UUID) -> Alert | None:
    """Hide one of the user's alerts from the list. None if it is not theirs."""
    alert = _get_own_alert(db, alert_id, user_id)
    if alert and not alert.is_dismissed:
        alert.is_dismissed = True
        db.commit()
        db.refresh(alert)
    return alert
