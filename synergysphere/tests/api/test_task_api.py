import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from synergysphere.crud.project import add_member
from synergysphere.tests.utils import auth_headers, principal_of


@pytest.fixture
def assignee(db: Session, make_user, project, manager):
    """Обычный участник без прав ADMIN, на которого назначается задача."""
    user = make_user("Assignee")
    add_member(db, principal_of(manager), project.id, user.email)
    return user


@pytest.fixture
def task(client: TestClient, project, member, assignee):
    response = client.post("/tasks", json={
        "title": "Design hero section",
        "project_id": project.id,
        "assignee_id": assignee.id,
    }, headers=auth_headers(member))
    assert response.status_code == 201
    return response.json()


def test_create_task_response(task, member, assignee):
    assert task["created_by"]["id"] == member.id
    assert task["assignee"]["id"] == assignee.id
    assert task["status"] == "TODO"
    assert task["priority"] == "medium"
    assert task["project"]["name"] == "Website Redesign"


def test_assignee_scenario(client: TestClient, task, assignee, manager):
    done = client.patch(f"/tasks/{task['id']}/status", json={"status": "DONE"}, headers=auth_headers(assignee))
    assert done.status_code == 200
    assert done.json()["status"] == "DONE"

    reassign = client.put(f"/tasks/{task['id']}", json={"assignee_id": manager.id}, headers=auth_headers(assignee))
    assert reassign.status_code == 403
    assert reassign.json() == {"status": 403, "message": "Not authorized to change task assignee"}

    delete = client.delete(f"/tasks/{task['id']}", headers=auth_headers(assignee))
    assert delete.status_code == 403
    assert delete.json()["message"] == "Not authorized to delete this task"


def test_assign_to_non_member_rejected(client: TestClient, task, manager, outsider):
    response = client.put(f"/tasks/{task['id']}/assign", json={"assignee_id": outsider.id}, headers=auth_headers(manager))
    assert response.status_code == 400
    assert response.json()["message"] == "Cannot assign task to a non-member"

    unchanged = client.get(f"/tasks/{task['id']}", headers=auth_headers(manager)).json()
    assert unchanged["assignee_id"] == task["assignee_id"]


def test_assign_and_unassign(client: TestClient, task, admin_member, member):
    response = client.patch(f"/tasks/{task['id']}/assign", json={"assignee_id": member.id}, headers=auth_headers(admin_member))
    assert response.status_code == 200
    assert response.json()["assignee"]["id"] == member.id

    cleared = client.put(f"/tasks/{task['id']}/assign", json={"assignee_id": None}, headers=auth_headers(admin_member))
    assert cleared.status_code == 200
    assert cleared.json()["assignee"] is None


def test_create_task_outside_project(client: TestClient, project, outsider):
    response = client.post("/tasks", json={"title": "Sneaky", "project_id": project.id}, headers=auth_headers(outsider))
    assert response.status_code == 403
    assert response.json()["message"] == "Not authorized to create tasks in this project"


def test_create_task_with_non_member_assignee(client: TestClient, project, member, outsider):
    response = client.post("/tasks", json={"title": "Bad", "project_id": project.id, "assignee_id": outsider.id}, headers=auth_headers(member))
    assert response.status_code == 400


def test_view_task_permissions(client: TestClient, task, outsider):
    denied = client.get(f"/tasks/{task['id']}", headers=auth_headers(outsider))
    assert denied.status_code == 403
    assert denied.json()["message"] == "Not authorized to access this task"

    missing = client.get("/tasks/9999", headers=auth_headers(outsider))
    assert missing.status_code == 404
    assert missing.json() == {"status": 404, "message": "Task not found"}


def test_list_tasks_filters(client: TestClient, task, assignee, member, outsider, db: Session):
    mine = client.get("/tasks", params={"assignee_id": "me"}, headers=auth_headers(assignee))
    assert [t["id"] for t in mine.json()] == [task["id"]]

    none = client.get("/tasks", params={"assignee_id": "me"}, headers=auth_headers(member))
    assert none.json() == []

    by_status = client.get("/tasks", params={"status": "TODO", "search": "hero"}, headers=auth_headers(member))
    assert [t["id"] for t in by_status.json()] == [task["id"]]

    forbidden = client.get("/tasks", params={"project_id": task["project_id"]}, headers=auth_headers(outsider))
    assert forbidden.status_code == 403

    bad = client.get("/tasks", params={"assignee_id": "someone"}, headers=auth_headers(member))
    assert bad.status_code == 400


def test_my_tasks(client: TestClient, task, assignee, manager, member):
    assert [t["id"] for t in client.get("/tasks/me", headers=auth_headers(assignee)).json()] == [task["id"]]
    assert [t["id"] for t in client.get("/tasks/me", headers=auth_headers(manager)).json()] == [task["id"]]
    assert client.get("/tasks/me", params={"status": "DONE"}, headers=auth_headers(manager)).json() == []


def test_update_and_delete_by_creator(client: TestClient, task, member):
    updated = client.put(f"/tasks/{task['id']}", json={"title": "Hero v2", "priority": "high"}, headers=auth_headers(member))
    assert updated.status_code == 200
    assert updated.json()["title"] == "Hero v2"
    assert updated.json()["priority"] == "high"

    assert client.delete(f"/tasks/{task['id']}", headers=auth_headers(member)).status_code == 204
    assert client.get(f"/tasks/{task['id']}", headers=auth_headers(member)).status_code == 404


def test_comments(client: TestClient, task, member, assignee, outsider):
    posted = client.post(f"/tasks/{task['id']}/comments", json={"content": "Looks good"}, headers=auth_headers(assignee))
    assert posted.status_code == 201
    assert posted.json()["user"]["id"] == assignee.id

    listed = client.get(f"/tasks/{task['id']}/comments", headers=auth_headers(member))
    assert [c["content"] for c in listed.json()] == ["Looks good"]

    denied = client.post(f"/tasks/{task['id']}/comments", json={"content": "hi"}, headers=auth_headers(outsider))
    assert denied.status_code == 403
    assert denied.json()["message"] == "Not authorized to comment on this task"

    hidden = client.get(f"/tasks/{task['id']}/comments", headers=auth_headers(outsider))
    assert hidden.json()["message"] == "Not authorized to view comments for this task"
