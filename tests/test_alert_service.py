"""Tests for the alert service."""

import uuid
from datetime import datetime, timedelta

from casework.db.enums import AlertType
from casework.db.models import Alert
from casework.services import alert_service


def _alert(db, user_id, title="Reminder", created_at=None, **kwargs) -> Alert:
    alert = Alert(
        user_id=user_id,
        title=title,
        alert_type=AlertType.CUSTOM.value,
        created_at=created_at or datetime(2026, 3, 1),
        **kwargs,
    )
    db.add(alert)
    db.commit()
    return alert


def test_list_alerts_newest_first_without_dismissed(db, client_profile, staff_profile):
    start = datetime(2026, 3, 1)
    _alert(db, client_profile.id, "Older", created_at=start)
    _alert(db, client_profile.id, "Newer", created_at=start + timedelta(hours=1))
    _alert(db, client_profile.id, "Gone", created_at=start + timedelta(hours=2), is_dismissed=True)
    _alert(db, staff_profile.id, "Someone else")

    titles = [a.title for a in alert_service.list_alerts(db, client_profile.id)]

    assert titles == ["Newer", "Older"]


def test_list_alerts_is_limited(db, client_profile):
    start = datetime(2026, 3, 1)
    for i in range(alert_service.DEFAULT_ALERT_LIMIT + 2):
        _alert(db, client_profile.id, f"Alert {i}", created_at=start + timedelta(minutes=i))

    alerts = alert_service.list_alerts(db, client_profile.id)

    assert len(alerts) == alert_service.DEFAULT_ALERT_LIMIT
    assert alerts[0].title == f"Alert {alert_service.DEFAULT_ALERT_LIMIT + 1}"


def test_mark_read_updates_unread_count(db, client_profile):
    alert = _alert(db, client_profile.id)
    _alert(db, client_profile.id)
    assert alert_service.get_unread_count(db, client_profile.id) == 2

    result = alert_service.mark_read(db, alert.id, client_profile.id)

    assert result.is_read is True
    assert alert_service.get_unread_count(db, client_profile.id) == 1


def test_dismissed_alert_leaves_list_and_count(db, client_profile):
    alert = _alert(db, client_profile.id)

    result = alert_service.dismiss(db, alert.id, client_profile.id)

    assert result.is_dismissed is True
    assert alert_service.list_alerts(db, client_profile.id) == []
    assert alert_service.get_unread_count(db, client_profile.id) == 0
    assert db.query(Alert).count() == 1


def test_cannot_touch_another_users_alert(db, client_profile, staff_profile):
    alert = _alert(db, client_profile.id)

    assert alert_service.mark_read(db, alert.id, staff_profile.id) is None
    assert alert_service.dismiss(db, alert.id, staff_profile.id) is None

    db.refresh(alert)
    assert alert.is_read is False
    assert alert.is_dismissed is False


def test_unknown_alert(db, client_profile):
    assert alert_service.mark_read(db, uuid.uuid4(), client_profile.id) is None
