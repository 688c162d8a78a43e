"""Tests for admin user deletion."""

import uuid

import pytest

from casework.db.enums import AuditAction, Role
from casework.db.models import AuditLog, CaseManagement, Client, Profile, Task
from casework.schemas.self_service import SelfServiceApplication
from casework.schemas.task import TaskCreate
from casework.services import task_service, user_deletion_service
from casework.services.intake_service import save_client_intake
from casework.services.self_service import submit_self_service_application

from conftest import intake_payload


def _register_portal_client(db):
    return submit_self_service_application(
        db,
        SelfServiceApplication(first_name="Dana", last_name="Gone", email="dana@example.com"),
    )


def test_deleting_client_user_purges_linked_client(db, admin_session):
    result = _register_portal_client(db)

    message = user_deletion_service.delete_user_and_data(db, admin_session, result.user_id)

    assert "Dana Gone (client)" in message
    assert db.query(Profile).filter_by(id=result.user_id).count() == 0
    assert db.query(Client).count() == 0
    assert db.query(CaseManagement).count() == 0
    assert db.query(Task).count() == 0


def test_deletion_is_audited_and_prior_entries_removed(db, admin_session):
    result = _register_portal_client(db)

    user_deletion_service.delete_user_and_data(db, admin_session, result.user_id)

    entries = db.query(AuditLog).all()
    assert [e.action for e in entries] == [AuditAction.USER_DELETED.value]
    assert entries[0].record_id == result.user_id
    assert entries[0].user_id == admin_session.user_id
    assert entries[0].new_values["email"] == "dana@example.com"


def test_deleting_staff_user_removes_their_tasks_and_detaches_clients(
    db, admin_session, staff_profile, staff_session
):
    saved = save_client_intake(db, staff_session, intake_payload())
    task_service.create_task(db, staff_profile.id, TaskCreate(title="Visit", client_id=saved.client_id))
    task_service.create_task(db, None, TaskCreate(title="Unrelated"))

    user_deletion_service.delete_user_and_data(db, admin_session, staff_profile.id)

    assert [t.title for t in db.query(Task).all()] == ["Unrelated"]
    client = db.query(Client).one()
    assert client.created_by is None
    # Client data survives; only the staff member's audit trail is gone
    assert db.query(CaseManagement).count() == 1
    assert db.query(AuditLog).filter(AuditLog.user_id == staff_profile.id).count() == 0


def test_admin_cannot_delete_self(db, admin_session):
    with pytest.raises(user_deletion_service.ForbiddenError):
        user_deletion_service.delete_user_and_data(db, admin_session, admin_session.user_id)


def test_non_admin_cannot_delete_users(db, staff_session, volunteer_profile):
    with pytest.raises(user_deletion_service.ForbiddenError):
        user_deletion_service.delete_user_and_data(db, staff_session, volunteer_profile.id)
    assert db.query(Profile).filter_by(role=Role.VOLUNTEER.value).count() == 1


def test_missing_user(db, admin_session):
    with pytest.raises(user_deletion_service.UserNotFoundError):
        user_deletion_service.delete_user_and_data(db, admin_session, uuid.uuid4())
