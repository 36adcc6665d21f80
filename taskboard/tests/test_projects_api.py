"""Tests for Projects and Tasks API endpoints."""

import pytest

pytestmark = pytest.mark.integration


class TestProjectsAPI:
    def test_list_projects_empty(self, client, owner_headers):
        resp = client.get("/api/projects", headers=owner_headers)
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["ok"] is True
        assert data["items"] == []

    def test_create_project_with_statuses(self, client, owner_headers):
        resp = client.post(
            "/api/projects",
            json={"name": "Ops", "statuses": [{"name": "Open"}, {"name": "Closed", "color": "#000000"}]},
            headers=owner_headers,
        )
        assert resp.status_code == 201
        project = resp.get_json()["project"]
        assert [s["name"] for s in project["statuses"]] == ["Open", "Closed"]
        assert project["members"][0]["role"] == "owner"

    def test_create_project_validation(self, client, owner_headers):
        resp = client.post("/api/projects", json={"name": ""}, headers=owner_headers)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "validation_error"

    def test_duplicate_project(self, client, owner_headers):
        client.post("/api/projects", json={"name": "Ops"}, headers=owner_headers)
        resp = client.post("/api/projects", json={"name": "Ops"}, headers=owner_headers)
        assert resp.status_code == 409

    def test_get_project_hidden_from_outsiders(self, client, member_headers, project, user_factory, headers_factory):
        outsider_headers = headers_factory(user_factory("outsider@example.com"))

        assert client.get(f"/api/projects/{project.id}", headers=member_headers).status_code == 200
        assert client.get(f"/api/projects/{project.id}", headers=outsider_headers).status_code == 404

    def test_replace_statuses(self, client, owner_headers, member_headers, project):
        body = {"statuses": [{"name": "To Do"}, {"name": "Review"}, {"name": "Done"}]}

        resp = client.put(f"/api/projects/{project.id}/statuses", json=body, headers=member_headers)
        assert resp.status_code == 403

        resp = client.put(f"/api/projects/{project.id}/statuses", json=body, headers=owner_headers)
        assert resp.status_code == 200
        assert [s["name"] for s in resp.get_json()["project"]["statuses"]] == ["To Do", "Review", "Done"]

    def test_status_in_use_conflict(self, client, owner_headers, project):
        client.post(
            f"/api/projects/{project.id}/tasks", json={"title": "Busy", "status": "In Progress"}, headers=owner_headers
        )
        resp = client.put(
            f"/api/projects/{project.id}/statuses",
            json={"statuses": [{"name": "To Do"}, {"name": "Done"}]},
            headers=owner_headers,
        )
        assert resp.status_code == 409
        assert resp.get_json()["error"] == "status_in_use"

    def test_member_management(self, client, owner_headers, project, member, user_factory):
        newcomer = user_factory("newcomer@example.com")

        resp = client.post(
            f"/api/projects/{project.id}/members", json={"user_id": newcomer.id, "role": "admin"}, headers=owner_headers
        )
        assert resp.status_code == 201
        assert resp.get_json()["member"]["role"] == "admin"

        resp = client.delete(f"/api/projects/{project.id}/members/{member.id}", headers=owner_headers)
        assert resp.status_code == 200


class TestTasksAPI:
    def _create_task(self, client, headers, project, **fields):
        payload = {"title": "Fix bug", **fields}
        resp = client.post(f"/api/projects/{project.id}/tasks", json=payload, headers=headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["task"]

    def test_create_and_list_tasks(self, client, owner_headers, project, member):
        task = self._create_task(
            client, owner_headers, project, assignee_id=member.id, priority="High", due_date="2026-04-01T09:00:00"
        )
        assert task["status"] == "To Do"
        assert task["priority"] == "High"
        assert task["due_date"] == "2026-04-01T09:00:00"

        resp = client.get(f"/api/projects/{project.id}/tasks", query_string={"status": "To Do"}, headers=owner_headers)
        assert resp.get_json()["total"] == 1

    def test_create_task_invalid_status(self, client, owner_headers, project):
        resp = client.post(
            f"/api/projects/{project.id}/tasks", json={"title": "x", "status": "Nope"}, headers=owner_headers
        )
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "invalid_status"

    def test_update_task_and_history(self, client, owner_headers, project, member):
        task = self._create_task(client, owner_headers, project)

        resp = client.patch(
            f"/api/tasks/{task['id']}", json={"status": "In Progress", "assignee_id": member.id}, headers=owner_headers
        )
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["task"]["status"] == "In Progress"
        assert [a["trigger_kind"] for a in body["automations"]] == ["status_change", "assignee_change"]

        resp = client.get(f"/api/tasks/{task['id']}/history", headers=owner_headers)
        assert [h["field"] for h in resp.get_json()["items"]] == ["status", "assignee"]

    def test_clear_assignee_with_null(self, client, owner_headers, project, member):
        task = self._create_task(client, owner_headers, project, assignee_id=member.id)

        resp = client.patch(f"/api/tasks/{task['id']}", json={"assignee_id": None}, headers=owner_headers)

        assert resp.get_json()["task"]["assignee_id"] is None

    def test_comments(self, client, owner_headers, member_headers, project, member):
        task = self._create_task(client, owner_headers, project, assignee_id=member.id)

        resp = client.post(f"/api/tasks/{task['id']}/comments", json={"text": "On it"}, headers=member_headers)
        assert resp.status_code == 201

        resp = client.get(f"/api/tasks/{task['id']}/comments", headers=owner_headers)
        assert [c["text"] for c in resp.get_json()["items"]] == ["On it"]

    def test_missing_task(self, client, owner_headers):
        resp = client.patch("/api/tasks/9999", json={"title": "x"}, headers=owner_headers)
        assert resp.status_code == 404

    def test_delete_task(self, client, owner_headers, member_headers, project):
        task = self._create_task(client, owner_headers, project)

        assert client.delete(f"/api/tasks/{task['id']}", headers=member_headers).status_code == 403
        assert client.delete(f"/api/tasks/{task['id']}", headers=owner_headers).status_code == 200
        assert client.get(f"/api/tasks/{task['id']}", headers=owner_headers).status_code == 404

    def test_project_event_feed(self, client, owner_headers, member_headers, project, user_factory, headers_factory):
        self._create_task(client, owner_headers, project)

        resp = client.get(f"/api/projects/{project.id}/events", headers=member_headers)
        assert resp.status_code == 200
        types = {e["event_type"] for e in resp.get_json()["items"]}
        assert {"projects.project.created", "projects.member.added", "projects.task.created"} <= types

        resp = client.get(
            f"/api/projects/{project.id}/events",
            query_string={"event_type": "projects.task.created"},
            headers=owner_headers,
        )
        data = resp.get_json()
        assert data["total"] == 1
        assert data["items"][0]["payload"]["project_id"] == project.id

        outsider_headers = headers_factory(user_factory("feed-outsider@example.com"))
        resp = client.get(f"/api/projects/{project.id}/events", headers=outsider_headers)
        assert resp.status_code == 403
