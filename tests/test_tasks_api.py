"""API tests for tasks, alerts, users, self-service registration and health."""

import uuid

import pytest

from casework.db.enums import Role
from casework.db.models import Alert, Client, Profile, Task
from casework.schemas.task import TaskCreate
from casework.services import task_service

from conftest import api_client, make_profile


# =============================================================================
# Tasks
# =============================================================================


@pytest.mark.asyncio
async def test_create_and_list_tasks(staff_client, staff_profile):
    created = await staff_client.post("/tasks", json={"title": "Call shelter", "priority": "high"})

    assert created.status_code == 201
    body = created.json()
    assert body["status"] == "pending"
    assert body["priority"] == "high"
    assert body["assigned_by"] == str(staff_profile.id)

    listed = await staff_client.get("/tasks")
    assert [t["title"] for t in listed.json()] == ["Call shelter"]


@pytest.mark.asyncio
async def test_complete_task(staff_client):
    task = (await staff_client.post("/tasks", json={"title": "Review"})).json()

    response = await staff_client.patch(f"/tasks/{task['id']}/status", json={"status": "completed"})

    assert response.status_code == 200
    assert response.json()["completed_at"] is not None


@pytest.mark.asyncio
async def test_unknown_task_is_404(staff_client):
    response = await staff_client.patch(f"/tasks/{uuid.uuid4()}/status", json={"status": "completed"})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_portal_client_cannot_use_tasks(db, client_profile):
    async with api_client(db, client_profile) as c:
        response = await c.get("/tasks")

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_claim_task(staff_client, staff_profile):
    task = (await staff_client.post("/tasks", json={"title": "Review"})).json()

    response = await staff_client.post(f"/tasks/{task['id']}/claim")

    assert response.status_code == 200
    assert response.json()["assigned_to"] == str(staff_profile.id)
    assert response.json()["status"] == "in_progress"


@pytest.mark.asyncio
async def test_assign_task(staff_client, case_manager_profile):
    task = (await staff_client.post("/tasks", json={"title": "Review"})).json()

    response = await staff_client.post(
        f"/tasks/{task['id']}/assign", json={"assigned_to": str(case_manager_profile.id)}
    )

    assert response.status_code == 200
    assert response.json()["assigned_to"] == str(case_manager_profile.id)


@pytest.mark.asyncio
async def test_assign_to_portal_user_is_422(staff_client, client_profile):
    task = (await staff_client.post("/tasks", json={"title": "Review"})).json()

    response = await staff_client.post(
        f"/tasks/{task['id']}/assign", json={"assigned_to": str(client_profile.id)}
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_claim_unknown_task_is_404(staff_client):
    response = await staff_client.post(f"/tasks/{uuid.uuid4()}/claim")

    assert response.status_code == 404


def _portal_task(db, staff_profile, client_profile) -> Task:
    """Task on a client linked to the portal login; alerts the portal user."""
    client = Client(
        first_name="Pat",
        last_name="Portal",
        portal_user_id=client_profile.id,
        has_portal_access=True,
    )
    db.add(client)
    db.commit()
    return task_service.create_task(
        db, staff_profile.id, TaskCreate(title="Upload ID", client_id=client.id)
    )


@pytest.mark.asyncio
async def test_portal_client_lists_own_open_tasks(db, staff_profile, client_profile):
    _portal_task(db, staff_profile, client_profile)

    async with api_client(db, client_profile) as c:
        response = await c.get("/tasks/mine")

    assert response.status_code == 200
    assert [t["title"] for t in response.json()] == ["Upload ID"]


# =============================================================================
# Alerts
# =============================================================================


@pytest.mark.asyncio
async def test_portal_user_reads_and_dismisses_alert(db, staff_profile, client_profile):
    _portal_task(db, staff_profile, client_profile)

    async with api_client(db, client_profile) as c:
        alerts = (await c.get("/alerts")).json()
        assert [a["title"] for a in alerts] == ["New Task Assigned"]
        alert_id = alerts[0]["id"]
        assert (await c.get("/alerts/count")).json() == {"count": 1}

        read = await c.patch(f"/alerts/{alert_id}/read")
        assert read.status_code == 200
        assert read.json()["is_read"] is True
        assert (await c.get("/alerts/count")).json() == {"count": 0}

        dismissed = await c.patch(f"/alerts/{alert_id}/dismiss")
        assert dismissed.status_code == 200
        assert (await c.get("/alerts")).json() == []


@pytest.mark.asyncio
async def test_other_users_alert_is_404(db, staff_client, staff_profile, client_profile):
    _portal_task(db, staff_profile, client_profile)
    alert = db.query(Alert).one()

    response = await staff_client.patch(f"/alerts/{alert.id}/dismiss")

    assert response.status_code == 404
    db.refresh(alert)
    assert alert.is_dismissed is False


# =============================================================================
# Users
# =============================================================================


@pytest.mark.asyncio
async def test_admin_deletes_user(admin_client, db):
    target = make_profile(db, Role.VOLUNTEER)

    response = await admin_client.delete(f"/users/{target.id}")

    assert response.status_code == 200
    assert db.query(Profile).filter(Profile.id == target.id).count() == 0


@pytest.mark.asyncio
async def test_admin_cannot_delete_self(admin_client, admin_profile):
    response = await admin_client.delete(f"/users/{admin_profile.id}")

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_staff_cannot_delete_users(staff_client, db):
    target = make_profile(db, Role.VOLUNTEER)

    response = await staff_client.delete(f"/users/{target.id}")

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_delete_unknown_user_is_404(admin_client):
    response = await admin_client.delete(f"/users/{uuid.uuid4()}")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_staff_lists_users(staff_client, staff_profile, admin_profile):
    response = await staff_client.get("/users")

    assert response.status_code == 200
    ids = {u["id"] for u in response.json()}
    assert ids == {str(staff_profile.id), str(admin_profile.id)}
    assert "token_version" not in response.json()[0]


@pytest.mark.asyncio
async def test_archived_user_session_is_revoked(db, admin_client, staff_profile):
    async with api_client(db, staff_profile) as staff:
        assert (await staff.get("/tasks")).status_code == 200

        response = await admin_client.post(f"/users/{staff_profile.id}/archive")
        assert response.status_code == 200
        assert response.json()["is_active"] is False

        assert (await staff.get("/tasks")).status_code == 401


@pytest.mark.asyncio
async def test_staff_cannot_archive_users(staff_client, db):
    target = make_profile(db, Role.VOLUNTEER)

    response = await staff_client.post(f"/users/{target.id}/archive")

    assert response.status_code == 403


# =============================================================================
# Self-service
# =============================================================================


APPLICATION = {
    "first_name": "Quinn",
    "last_name": "Walker",
    "email": "quinn@example.com",
    "phone": "555-010-2020",
}


@pytest.mark.asyncio
async def test_self_service_registration(client, db):
    response = await client.post("/self-service/applications", json=APPLICATION)

    assert response.status_code == 201
    client_id = uuid.UUID(response.json()["client_id"])
    assert db.query(Client).filter(Client.id == client_id).count() == 1
    assert db.query(Task).filter(Task.client_id == client_id).count() == 2


@pytest.mark.asyncio
async def test_self_service_duplicate_is_409(client):
    await client.post("/self-service/applications", json=APPLICATION)

    response = await client.post("/self-service/applications", json=APPLICATION)

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_self_service_staff_email_is_409(client, db):
    make_profile(db, Role.STAFF, email="quinn@example.com")

    response = await client.post("/self-service/applications", json=APPLICATION)

    assert response.status_code == 409
    assert "staff member" in response.json()["detail"]


@pytest.mark.asyncio
async def test_self_service_requires_csrf_header(client):
    response = await client.post(
        "/self-service/applications", json=APPLICATION, headers={"X-Requested-With": ""}
    )

    assert response.status_code == 403


# =============================================================================
# Health
# =============================================================================


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
