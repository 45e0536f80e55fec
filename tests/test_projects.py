import pytest

from app.models.comment import Comment
from app.models.membership import Membership
from app.models.project import Project
from app.models.task import Task

from conftest import count_rows


def test_create_project_makes_creator_owner(owner):
    resp = owner.post("/projects", {"name": "  <i>Website</i> relaunch ", "description": "Q3 work"})
    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Project created successfully"
    project = body["data"]
    assert project["name"] == "Website relaunch"
    assert project["status"] == "active"
    assert project["userId"] == owner.id
    assert project["owner"]["username"] == owner.username
    assert project["tasks"] == []

    members = project["teamMembers"]
    assert len(members) == 1
    assert members[0]["userId"] == owner.id
    assert members[0]["role"] == "owner"


def test_create_project_validation(owner):
    resp = owner.post("/projects", {"name": ""})
    assert resp.status_code == 400
    assert resp.json()["errors"][0]["field"] == "name"

    resp = owner.post("/projects", {"name": "Ok", "status": "archived"})
    assert resp.status_code == 400
    assert resp.json()["errors"][0]["field"] == "status"


def test_requires_authentication(client):
    assert client.get("/api/projects").status_code == 401
    assert client.post("/api/projects", json={"name": "x"}).status_code == 401


def test_list_only_shows_accessible_projects(owner, outsider, make_user):
    mine = owner.create_project("Mine")
    theirs = outsider.create_project("Theirs")
    shared = outsider.create_project("Shared")
    outsider.add_member(shared["id"], owner)

    resp = owner.get("/projects")
    assert resp.status_code == 200
    names = {p["name"] for p in resp.json()["data"]}
    assert names == {"Mine", "Shared"}
    assert theirs["id"] not in {p["id"] for p in resp.json()["data"]}
    assert mine["id"] in {p["id"] for p in resp.json()["data"]}

    newcomer = make_user("zed")
    resp = newcomer.get("/projects")
    assert resp.json()["data"] == []
    assert resp.json()["pagination"]["totalItems"] == 0
    assert resp.json()["pagination"]["totalPages"] == 0


def test_list_includes_task_summaries(owner):
    project = owner.create_project()
    owner.create_task(project["id"], "First")

    data = owner.get("/projects").json()["data"]
    assert data[0]["tasks"][0]["title"] == "First"
    assert data[0]["tasks"][0]["status"] == "todo"


def test_list_search_and_pagination(owner):
    for name in ("Apollo", "Artemis", "Gemini", "Mercury", "Apollo 2"):
        owner.create_project(name)

    resp = owner.get("/projects", params={"search": "apollo"})
    assert sorted(p["name"] for p in resp.json()["data"]) == ["Apollo", "Apollo 2"]

    resp = owner.get("/projects", params={"search": "100%"})
    assert resp.json()["data"] == []

    resp = owner.get("/projects", params={"limit": 2, "page": 2, "sort": "name", "order": "asc"})
    body = resp.json()
    assert [p["name"] for p in body["data"]] == ["Artemis", "Gemini"]
    assert body["pagination"] == {
        "currentPage": 2,
        "totalPages": 3,
        "totalItems": 5,
        "itemsPerPage": 2,
        "hasNextPage": True,
        "hasPrevPage": True,
        "nextPage": 3,
        "prevPage": 1,
    }

    resp = owner.get("/projects", params={"limit": 2, "page": 3, "sort": "name", "order": "asc"})
    assert [p["name"] for p in resp.json()["data"]] == ["Mercury"]
    assert resp.json()["pagination"]["hasNextPage"] is False
    assert resp.json()["pagination"]["nextPage"] is None


def test_list_invalid_query_params(owner):
    for params in ({"page": 0}, {"limit": 101}, {"limit": 0}, {"order": "sideways"}):
        resp = owner.get("/projects", params=params)
        assert resp.status_code == 400, params
        assert resp.json()["message"] == "Validation failed"


def test_get_project_detail(owner, outsider):
    project = owner.create_project("Detail")
    owner.create_task(project["id"], "Task one")

    resp = owner.get(f"/projects/{project['id']}")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["tasks"][0]["title"] == "Task one"
    assert data["teamMembers"][0]["user"]["username"] == owner.username

    # Repeated reads return the same representation
    assert owner.get(f"/projects/{project['id']}").json() == resp.json()

    resp = outsider.get(f"/projects/{project['id']}")
    assert resp.status_code == 403
    assert resp.json()["message"] == "Access denied. You are not a member of this project."

    assert owner.get("/projects/9999").status_code == 404
    assert owner.get("/projects/0").status_code == 400


def test_update_project_roles(owner, make_user):
    project = owner.create_project("Before")
    admin = make_user("adam")
    member = make_user("mary")
    owner.add_member(project["id"], admin, "admin")
    owner.add_member(project["id"], member)

    resp = member.put(f"/projects/{project['id']}", {"name": "Nope"})
    assert resp.status_code == 403
    assert resp.json()["message"] == "Access denied. You need admin or owner access to update this project."

    resp = admin.put(f"/projects/{project['id']}", {"name": "After", "status": "on-hold"})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["name"] == "After"
    assert data["status"] == "on-hold"
    assert data["description"] is None

    resp = owner.put(f"/projects/{project['id']}", {"description": "Now described"})
    assert resp.json()["data"]["name"] == "After"
    assert resp.json()["data"]["description"] == "Now described"


def test_delete_project_cascades(owner, make_user):
    project = owner.create_project("Doomed")
    keeper = owner.create_project("Keeper")
    member = make_user("mia")
    owner.add_member(project["id"], member)
    task = owner.create_task(project["id"], "Gone soon", assignedTo=member.id)
    member.comment(task["id"])
    kept_task = owner.create_task(keeper["id"], "Stays")
    owner.comment(kept_task["id"])

    resp = owner.delete(f"/projects/{project['id']}")
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "Project deleted successfully"}

    assert count_rows(Project, Project.id == project["id"]) == 0
    assert count_rows(Task, Task.project_id == project["id"]) == 0
    assert count_rows(Membership, Membership.project_id == project["id"]) == 0
    assert count_rows(Comment, Comment.task_id == task["id"]) == 0

    assert count_rows(Task, Task.project_id == keeper["id"]) == 1
    assert count_rows(Comment, Comment.task_id == kept_task["id"]) == 1

    assert owner.get(f"/projects/{project['id']}").status_code == 404
    assert owner.get(f"/tasks/{task['id']}").status_code == 404


def test_only_owner_deletes_project(owner, make_user):
    project = owner.create_project()
    admin = make_user("ada")
    owner.add_member(project["id"], admin, "admin")

    resp = admin.delete(f"/projects/{project['id']}")
    assert resp.status_code == 403
    assert resp.json()["message"] == "Access denied. Only project owners can delete projects."
    assert count_rows(Project, Project.id == project["id"]) == 1


def test_owner_membership_alone_cannot_delete_project(owner, make_user):
    project = owner.create_project("Guarded")
    crony = make_user("crony")
    owner.add_member(project["id"], crony, "owner")

    # an owner membership still manages day-to-day work
    assert crony.put(f"/projects/{project['id']}", {"status": "on-hold"}).status_code == 200

    resp = crony.delete(f"/projects/{project['id']}")
    assert resp.status_code == 403
    assert resp.json()["message"] == "Access denied. Only project owners can delete projects."
    assert count_rows(Project, Project.id == project["id"]) == 1


def test_failed_delete_leaves_project_intact(owner, make_user, monkeypatch):
    from app.services import projects as project_service

    project = owner.create_project("Half gone?")
    member = make_user("milo")
    owner.add_member(project["id"], member)
    task = owner.create_task(project["id"], "Survivor")
    member.comment(task["id"])

    def fail(*args, **kwargs):
        raise RuntimeError("connection lost")

    # Fails after every delete statement has run, before the router commits
    monkeypatch.setattr(project_service.logger, "info", fail)
    with pytest.raises(RuntimeError):
        owner.delete(f"/projects/{project['id']}")
    monkeypatch.undo()

    assert count_rows(Project, Project.id == project["id"]) == 1
    assert count_rows(Task, Task.project_id == project["id"]) == 1
    assert count_rows(Comment, Comment.task_id == task["id"]) == 1
    assert count_rows(Membership, Membership.project_id == project["id"]) == 2
    assert owner.get(f"/projects/{project['id']}").status_code == 200
