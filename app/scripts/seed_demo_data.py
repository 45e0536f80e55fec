"""
Demo data for local development.

Recreates the schema, then registers users and builds projects, teams, tasks
and comments through the service layer so every membership and assignment
rule holds for the generated rows.

    python -m app.scripts.seed_demo_data
"""
import asyncio
import random
import re

from faker import Faker

from app.database import AsyncSessionLocal, drop_db, init_db
from app.schemas.comment import CommentCreate
from app.schemas.project import ProjectCreate
from app.schemas.task import TaskCreate
from app.schemas.team import MemberAdd
from app.schemas.user import RegisterRequest
from app.services import comments as comment_service
from app.services import projects as project_service
from app.services import tasks as task_service
from app.services import teams as team_service
from app.services import users as user_service

DEMO_PASSWORD = "Password123"

PROJECT_NAMES = [
    "Website Redesign",
    "Mobile App Launch",
    "Data Warehouse Migration",
    "Customer Support Portal",
    "Q3 Marketing Campaign",
    "Security Audit",
]


def _username(fake: Faker) -> str:
    name = re.sub(r"[^a-zA-Z0-9_]", "_", fake.unique.user_name())[:50]
    return name if len(name) >= 3 else f"{name}_user"


async def seed(db, users: int = 8, projects: int = 4, tasks_per_project: int = 6, seed_value=None) -> dict:
    fake = Faker()
    rng = random.Random(seed_value)
    if seed_value is not None:
        Faker.seed(seed_value)

    created_users = []
    for _ in range(users):
        user = await user_service.register_user(db, RegisterRequest(
            username=_username(fake),
            email=fake.unique.email(),
            password=DEMO_PASSWORD,
            first_name=fake.first_name(),
            last_name=fake.last_name(),
        ))
        created_users.append(user)

    summary = {"users": len(created_users), "projects": 0, "memberships": 0, "tasks": 0, "comments": 0}

    for i in range(projects):
        owner = rng.choice(created_users)
        project = await project_service.create_project(db, owner.id, ProjectCreate(
            name=PROJECT_NAMES[i % len(PROJECT_NAMES)],
            description=fake.sentence(nb_words=12),
            status=rng.choice(["active", "active", "on-hold", "completed"]),
        ))
        summary["projects"] += 1
        summary["memberships"] += 1

        team = [owner]
        others = [u for u in created_users if u.id != owner.id]
        for member in rng.sample(others, k=min(len(others), rng.randint(1, 4))):
            await team_service.add_member(db, owner.id, project.id, MemberAdd(
                user_id=member.id, role=rng.choice(["admin", "member", "member"]),
            ))
            team.append(member)
            summary["memberships"] += 1

        for _ in range(tasks_per_project):
            author = rng.choice(team)
            assignee = rng.choice(team + [None])
            task = await task_service.create_task(db, author.id, project.id, TaskCreate(
                title=fake.catch_phrase()[:200],
                description=fake.paragraph(nb_sentences=2)[:1000],
                status=rng.choice(["todo", "in-progress", "completed"]),
                priority=rng.choice(["low", "medium", "high"]),
                assigned_to=assignee.id if assignee else None,
            ))
            summary["tasks"] += 1

            for _ in range(rng.randint(0, 3)):
                commenter = rng.choice(team)
                await comment_service.create_comment(db, commenter.id, task.id, CommentCreate(
                    content=fake.sentence(nb_words=15),
                ))
                summary["comments"] += 1

    await db.commit()
    return summary


async def main():
    print("\n" + "=" * 60)
    print("DEMO DATA GENERATION")
    print("=" * 60 + "\n")

    await drop_db()
    await init_db()

    async with AsyncSessionLocal() as db:
        try:
            summary = await seed(db)
        except Exception:
            await db.rollback()
            raise

    print("Summary:")
    for key, value in summary.items():
        print(f"   - {key.capitalize()}: {value}")
    print(f"\nEvery demo user logs in with password '{DEMO_PASSWORD}'.\n")


if __name__ == "__main__":
    asyncio.run(main())
