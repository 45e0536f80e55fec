from sqlalchemy import select

from app.models.comment import Comment
from app.models.membership import Membership
from app.models.project import Project
from app.models.task import Task
from app.models.user import User
from app.scripts.seed_demo_data import DEMO_PASSWORD, seed

from conftest import count_rows, run_with_session


def test_seed_builds_consistent_data(client):
    summary = run_with_session(lambda db: seed(db, users=5, projects=3, tasks_per_project=4, seed_value=7))

    assert summary["users"] == count_rows(User) == 5
    assert summary["projects"] == count_rows(Project) == 3
    assert summary["tasks"] == count_rows(Task) == 12
    assert summary["memberships"] == count_rows(Membership)
    assert summary["comments"] == count_rows(Comment)
    assert count_rows(Membership, Membership.role == "owner") == 3

    async def first_email(db):
        return await db.scalar(select(User.email).order_by(User.id).limit(1))

    email = run_with_session(first_email)
    resp = client.post("/api/login", json={"email": email, "password": DEMO_PASSWORD})
    assert resp.status_code == 200

    token = resp.json()["data"]["token"]
    projects = client.get("/api/projects", headers={"Authorization": f"Bearer {token}"}).json()["data"]
    for project in projects:
        detail = client.get(
            f"/api/projects/{project['id']}", headers={"Authorization": f"Bearer {token}"}
        ).json()["data"]
        member_ids = {m["userId"] for m in detail["teamMembers"]}
        assert all(t["assignedTo"] in member_ids for t in detail["tasks"] if t["assignedTo"])
