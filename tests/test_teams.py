import pytest

from app.models.membership import Membership
from app.models.task import Task

from conftest import count_rows


@pytest.fixture
def project(owner):
    return owner.create_project("Team")


def test_add_member(owner, project, make_user):
    user = make_user("nina")
    resp = owner.post(f"/projects/{project['id']}/teams", {"userId": user.id, "role": "admin"})
    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Team member added successfully"
    data = body["data"]
    assert data["userId"] == user.id
    assert data["role"] == "admin"
    assert data["user"]["username"] == "nina"
    assert data["project"] == {"id": project["id"], "name": "Team"}


def test_add_member_defaults_to_member_role(owner, project, make_user):
    user = make_user("noel")
    data = owner.add_member(project["id"], user)
    assert data["role"] == "member"


def test_add_member_errors(owner, project, make_user):
    user = make_user("nora")
    owner.add_member(project["id"], user)

    resp = owner.post(f"/projects/{project['id']}/teams", {"userId": user.id})
    assert resp.status_code == 400
    assert resp.json()["message"] == "User is already a team member"

    resp = owner.post(f"/projects/{project['id']}/teams", {"userId": 9999})
    assert resp.status_code == 404
    assert resp.json()["message"] == "User not found"

    resp = owner.post(f"/projects/{project['id']}/teams", {"userId": user.id, "role": "guest"})
    assert resp.status_code == 400
    assert resp.json()["errors"][0]["field"] == "role"

    resp = owner.post("/projects/9999/teams", {"userId": user.id})
    assert resp.status_code == 404


def test_members_cannot_add_members(owner, project, make_user):
    member = make_user("ned")
    newcomer = make_user("nat")
    owner.add_member(project["id"], member)

    resp = member.post(f"/projects/{project['id']}/teams", {"userId": newcomer.id})
    assert resp.status_code == 403
    assert resp.json()["message"] == "Access denied. You need admin or owner access to add team members."
    assert count_rows(Membership, Membership.project_id == project["id"]) == 2


def test_list_members(owner, project, make_user, outsider):
    first = make_user("olga")
    second = make_user("omar")
    owner.add_member(project["id"], first, "admin")
    owner.add_member(project["id"], second)

    resp = first.get(f"/projects/{project['id']}/teams")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert [m["user"]["username"] for m in data] == [owner.username, "olga", "omar"]
    assert [m["role"] for m in data] == ["owner", "admin", "member"]

    assert outsider.get(f"/projects/{project['id']}/teams").status_code == 403


def test_remove_member(owner, project, make_user):
    admin = make_user("pam")
    member = make_user("pete")
    owner.add_member(project["id"], admin, "admin")
    membership = owner.add_member(project["id"], member)
    task = owner.create_task(project["id"], "Keep me", assignedTo=member.id)

    resp = member.delete(f"/teams/{membership['id']}")
    assert resp.status_code == 403

    resp = admin.delete(f"/teams/{membership['id']}")
    assert resp.status_code == 200
    assert resp.json()["message"] == "Team member removed successfully"
    assert count_rows(Membership, Membership.id == membership["id"]) == 0

    # The former member's tasks stay
    assert count_rows(Task, Task.id == task["id"]) == 1
    assert member.get(f"/projects/{project['id']}").status_code == 403

    assert admin.delete(f"/teams/{membership['id']}").status_code == 404


def test_owner_membership_cannot_be_removed(owner, project, make_user):
    admin = make_user("quinn")
    owner.add_member(project["id"], admin, "admin")
    members = owner.get(f"/projects/{project['id']}/teams").json()["data"]
    owner_membership = next(m for m in members if m["role"] == "owner")

    for actor in (admin, owner):
        resp = actor.delete(f"/teams/{owner_membership['id']}")
        assert resp.status_code == 403
        assert resp.json()["message"] == "Access denied. The project owner cannot be removed from the project."
    assert count_rows(Membership, Membership.id == owner_membership["id"]) == 1


def test_only_project_owner_grants_owner_role(owner, project, make_user):
    admin = make_user("rhea")
    crony = make_user("crony")
    owner.add_member(project["id"], admin, "admin")

    resp = admin.post(f"/projects/{project['id']}/teams", {"userId": crony.id, "role": "owner"})
    assert resp.status_code == 403
    assert resp.json()["message"] == "Access denied. Only the project owner can grant or revoke owner access."
    assert count_rows(Membership, Membership.user_id == crony.id) == 0

    # admins still add admins and members
    assert admin.add_member(project["id"], crony, "admin")["role"] == "admin"


def test_project_owner_revokes_co_owner(owner, project, make_user):
    admin = make_user("remy")
    co_owner = make_user("cora")
    owner.add_member(project["id"], admin, "admin")
    membership = owner.add_member(project["id"], co_owner, "owner")

    resp = admin.delete(f"/teams/{membership['id']}")
    assert resp.status_code == 403
    assert resp.json()["message"] == "Access denied. Only the project owner can grant or revoke owner access."

    assert owner.delete(f"/teams/{membership['id']}").status_code == 200
    assert count_rows(Membership, Membership.id == membership["id"]) == 0
