from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from synergysphere.main import app
from synergysphere.models.task import Task
from synergysphere.tests.utils import auth_headers


def test_manager_member_visibility_scenario(client: TestClient, manager, outsider):
    created = client.post("/projects", json={"name": "Launch", "tags": ["q3"]}, headers=auth_headers(manager))
    assert created.status_code == 201
    project = created.json()
    assert project["manager_id"] == manager.id
    assert [(m["user_id"], m["role"]) for m in project["members"]] == [(manager.id, "ADMIN")]
    assert project["tags"] == ["q3"]

    denied = client.get(f"/projects/{project['id']}", headers=auth_headers(outsider))
    assert denied.status_code == 403
    assert denied.json() == {"status": 403, "message": "Not authorized to access this project"}

    added = client.post(f"/projects/{project['id']}/members", json={"email": outsider.email, "role": "MEMBER"}, headers=auth_headers(manager))
    assert added.status_code == 201
    assert added.json()["role"] == "MEMBER"

    assert client.get(f"/projects/{project['id']}", headers=auth_headers(outsider)).status_code == 200

    protected = client.put(f"/projects/{project['id']}/members/{manager.id}", json={"role": "MEMBER"}, headers=auth_headers(manager))
    assert protected.status_code == 400
    assert protected.json()["message"] == "Cannot change the role of the project manager"


def test_list_projects_with_counts(client: TestClient, project, member, outsider):
    response = client.get("/projects", headers=auth_headers(member))
    assert response.status_code == 200
    rows = response.json()
    assert len(rows) == 1
    assert rows[0]["member_count"] == 3
    assert rows[0]["task_count"] == 0
    assert rows[0]["tags"] == ["design", "web"]

    assert client.get("/projects", headers=auth_headers(outsider)).json() == []
    assert client.get("/projects", params={"status": "archived"}, headers=auth_headers(member)).json() == []


def test_update_project_permissions(client: TestClient, project, admin_member, member):
    denied = client.put(f"/projects/{project.id}", json={"name": "Nope"}, headers=auth_headers(member))
    assert denied.status_code == 403
    assert denied.json()["message"] == "Not authorized to update this project"

    ok = client.put(f"/projects/{project.id}", json={"status": "archived"}, headers=auth_headers(admin_member))
    assert ok.status_code == 200
    assert ok.json()["status"] == "archived"
    assert ok.json()["name"] == "Website Redesign"


def test_delete_project_only_by_manager(client: TestClient, project, manager, admin_member):
    denied = client.delete(f"/projects/{project.id}", headers=auth_headers(admin_member))
    assert denied.status_code == 403
    assert denied.json()["message"] == "Not authorized to delete this project"

    assert client.delete(f"/projects/{project.id}", headers=auth_headers(manager)).status_code == 204
    missing = client.get(f"/projects/{project.id}", headers=auth_headers(manager))
    assert missing.status_code == 404
    assert missing.json() == {"status": 404, "message": "Project not found"}


def test_member_management_errors(client: TestClient, project, manager, admin_member, member, outsider):
    headers = auth_headers(manager)
    unknown = client.post(f"/projects/{project.id}/members", json={"email": "ghost@example.com"}, headers=headers)
    assert unknown.status_code == 404
    assert unknown.json()["message"] == "User not found"

    duplicate = client.post(f"/projects/{project.id}/members", json={"email": member.email}, headers=headers)
    assert duplicate.status_code == 400
    assert duplicate.json()["message"] == "User is already a member of this project"

    absent = client.put(f"/projects/{project.id}/members/{outsider.id}", json={"role": "ADMIN"}, headers=headers)
    assert absent.status_code == 404
    assert absent.json()["message"] == "Member not found in this project"

    by_member = client.post(f"/projects/{project.id}/members", json={"email": outsider.email}, headers=auth_headers(member))
    assert by_member.status_code == 403


def test_remove_member(client: TestClient, project, manager, admin_member, member, outsider):
    protected = client.delete(f"/projects/{project.id}/members/{manager.id}", headers=auth_headers(admin_member))
    assert protected.status_code == 400
    assert protected.json()["message"] == "Cannot remove the project manager"

    assert client.delete(f"/projects/{project.id}/members/{member.id}", headers=auth_headers(admin_member)).status_code == 204
    assert client.get(f"/projects/{project.id}", headers=auth_headers(member)).status_code == 403

    absent = client.delete(f"/projects/{project.id}/members/{outsider.id}", headers=auth_headers(manager))
    assert absent.status_code == 400
    assert absent.json()["message"] == "User is not a member of this project"


def test_members_and_summary(client: TestClient, project, manager, member):
    members = client.get(f"/projects/{project.id}/members", headers=auth_headers(member))
    assert members.status_code == 200
    assert {m["user"]["email"] for m in members.json()} == {manager.email, "admin@example.com", member.email}

    client.post("/tasks", json={"title": "Kickoff", "project_id": project.id, "status": "DONE"}, headers=auth_headers(member))
    summary = client.get(f"/projects/{project.id}/summary", headers=auth_headers(member)).json()
    assert summary["total_tasks"] == 1
    assert summary["by_status"]["DONE"] == 1

    tasks = client.get(f"/projects/{project.id}/tasks", headers=auth_headers(member))
    assert [t["title"] for t in tasks.json()] == ["Kickoff"]


def test_project_tasks_denied_for_outsider(client: TestClient, project, outsider):
    response = client.get(f"/projects/{project.id}/tasks", headers=auth_headers(outsider))
    assert response.status_code == 403
    assert response.json()["message"] == "Not authorized to access tasks in this project"


def test_database_failure_returns_error_payload(client: TestClient, db: Session, project, member):
    db.commit()
    Task.__table__.drop(bind=db.get_bind())
    with TestClient(app, raise_server_exceptions=False) as failing:
        response = failing.get(f"/projects/{project.id}/summary", headers=auth_headers(member))
    assert response.status_code == 500
    assert response.json() == {"status": 500, "message": "Internal server error"}
