"""Tests for profile listing and archiving."""

import uuid
from datetime import datetime, timedelta

import pytest

from casework.db.enums import AuditAction, Role
from casework.db.models import AuditLog, Client, Profile
from casework.services import user_service
from casework.services.intake_service import save_client_intake

from conftest import intake_payload, make_profile, session_for


def test_get_all_users_newest_first_including_archived(db):
    older = make_profile(db, Role.STAFF)
    newer = make_profile(db, Role.VOLUNTEER)
    older.created_at = datetime(2026, 1, 1)
    newer.created_at = datetime(2026, 1, 1) + timedelta(days=1)
    newer.is_active = False
    db.commit()

    users = user_service.get_all_users(db)

    assert [u.id for u in users] == [newer.id, older.id]


def test_archive_deactivates_and_revokes_sessions(db, admin_session, staff_profile):
    version = staff_profile.token_version

    archived = user_service.archive_user(db, admin_session, staff_profile.id)

    assert archived.is_active is False
    assert archived.token_version == version + 1


def test_archive_keeps_the_users_data(db, admin_session, staff_profile, staff_session):
    saved = save_client_intake(db, staff_session, intake_payload())

    user_service.archive_user(db, admin_session, staff_profile.id)

    assert db.query(Profile).filter_by(id=staff_profile.id).count() == 1
    client = db.query(Client).filter_by(id=saved.client_id).one()
    assert client.created_by == staff_profile.id


def test_archive_is_audited(db, admin_session, staff_profile):
    user_service.archive_user(db, admin_session, staff_profile.id)

    entry = db.query(AuditLog).filter_by(action=AuditAction.USER_ARCHIVED.value).one()
    assert entry.user_id == admin_session.user_id
    assert entry.record_id == staff_profile.id
    assert entry.new_values == {"email": staff_profile.email, "role": "staff"}


def test_only_admins_archive(db, staff_session, volunteer_profile):
    with pytest.raises(user_service.ForbiddenError):
        user_service.archive_user(db, staff_session, volunteer_profile.id)

    db.refresh(volunteer_profile)
    assert volunteer_profile.is_active is True


def test_admin_cannot_archive_self(db, admin_profile):
    with pytest.raises(user_service.ForbiddenError):
        user_service.archive_user(db, session_for(admin_profile), admin_profile.id)


def test_archive_missing_user(db, admin_session):
    with pytest.raises(user_service.UserNotFoundError):
        user_service.archive_user(db, admin_session, uuid.uuid4())
