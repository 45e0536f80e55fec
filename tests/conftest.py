import asyncio
import os
import tempfile
from pathlib import Path

import pytest

_TMP = Path(tempfile.mkdtemp(prefix="pm_api_tests_"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP / 'test.db'}"
os.environ["ERROR_LOG_FILE"] = str(_TMP / "error.log")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["SECRET_KEY"] = "test-secret"

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import func, select  # noqa: E402

from app.database import AsyncSessionLocal, drop_db, init_db  # noqa: E402
from app.main import app  # noqa: E402

PASSWORD = "Passw0rd1"


async def _reset_schema():
    await drop_db()
    await init_db()


def count_rows(model, *criteria) -> int:
    """Row count straight from the database, bypassing the API."""
    async def _count():
        async with AsyncSessionLocal() as db:
            return await db.scalar(select(func.count()).select_from(model).filter(*criteria))
    return asyncio.run(_count())


def run_with_session(fn):
    """Run ``await fn(db)`` in a fresh session and return its result."""
    async def _run():
        async with AsyncSessionLocal() as db:
            return await fn(db)
    return asyncio.run(_run())


@pytest.fixture
def client():
    asyncio.run(_reset_schema())
    with TestClient(app) as c:
        yield c


class ApiUser:
    def __init__(self, client, data, token):
        self.client = client
        self.id = data["id"]
        self.username = data["username"]
        self.email = data["email"]
        self.token = token
        self.headers = {"Authorization": f"Bearer {token}"}

    def get(self, url, **kwargs):
        return self.client.get(f"/api{url}", headers=self.headers, **kwargs)

    def post(self, url, json=None, **kwargs):
        return self.client.post(f"/api{url}", json=json, headers=self.headers, **kwargs)

    def put(self, url, json=None, **kwargs):
        return self.client.put(f"/api{url}", json=json, headers=self.headers, **kwargs)

    def delete(self, url, **kwargs):
        return self.client.delete(f"/api{url}", headers=self.headers, **kwargs)

    # Shortcuts used across the resource tests
    def create_project(self, name="Alpha", **fields):
        resp = self.post("/projects", {"name": name, **fields})
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    def create_task(self, project_id, title="Write docs", **fields):
        resp = self.post(f"/projects/{project_id}/tasks", {"title": title, **fields})
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    def comment(self, task_id, content="Looks good"):
        resp = self.post(f"/tasks/{task_id}/comments", {"content": content})
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    def add_member(self, project_id, user, role="member"):
        resp = self.post(f"/projects/{project_id}/teams", {"userId": user.id, "role": role})
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]


def register(client, username, password=PASSWORD, **fields) -> ApiUser:
    payload = {"username": username, "email": f"{username}@example.com", "password": password, **fields}
    resp = client.post("/api/register", json=payload)
    assert resp.status_code == 201, resp.text
    data = resp.json()["data"]
    return ApiUser(client, data["user"], data["token"])


@pytest.fixture
def make_user(client):
    def _make(username, **fields):
        return register(client, username, **fields)
    return _make


@pytest.fixture
def owner(make_user):
    return make_user("xavier")


@pytest.fixture
def outsider(make_user):
    return make_user("yolanda")
