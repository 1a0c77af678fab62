"""
Demo data for a local SynergySphere database.

Creates a handful of users (password ``password123``), projects with members,
tasks with assignees and deadlines, calendar events, and the notifications an
assignment would have produced.

    python -m synergysphere.scripts.populate_demo_data
"""
import asyncio
import random
from datetime import datetime, timedelta, timezone

from faker import Faker

from synergysphere.database import AsyncSessionLocal, create_tables
from synergysphere.models.event import Event, EVENT_COLORS
from synergysphere.models.notification import Notification
from synergysphere.models.project import Project, ProjectMember, PROJECT_PRIORITIES
from synergysphere.models.tasks import Task, TASK_STATUSES, TASK_PRIORITIES
from synergysphere.models.user import User
from synergysphere.utils.security import get_password_hash

fake = Faker()

PROJECT_IDEAS = [
    ("Mobile App Redesign", ["design", "mobile"]),
    ("Q3 Marketing Campaign", ["marketing"]),
    ("Data Warehouse Migration", ["data", "infrastructure"]),
    ("Customer Support Portal", ["support", "web"]),
    ("Security Audit", ["security", "compliance"]),
]

TASK_VERBS = ["Draft", "Review", "Implement", "Test", "Deploy", "Document", "Plan"]


async def populate(num_users: int = 8):
    await create_tables()
    password_hash = get_password_hash("password123")
    now = datetime.now(timezone.utc)

    async with AsyncSessionLocal() as db:
        users = []
        for _ in range(num_users):
            profile = fake.simple_profile()
            user = User(
                username=f"{profile['username']}{random.randint(10, 99)}",
                email=fake.unique.email(),
                full_name=profile["name"],
                hashed_password=password_hash,
            )
            db.add(user)
            users.append(user)
        await db.flush()

        for name, tags in PROJECT_IDEAS:
            owner = random.choice(users)
            project = Project(
                name=name,
                description=fake.paragraph(nb_sentences=2),
                priority=random.choice(PROJECT_PRIORITIES),
                deadline=now + timedelta(days=random.randint(14, 120)),
                tags=tags,
                manager_id=owner.user_id,
            )
            db.add(project)
            await db.flush()

            team = random.sample([u for u in users if u is not owner], k=min(3, len(users) - 1))
            db.add(ProjectMember(project_id=project.project_id, user_id=owner.user_id, role="owner"))
            for user in team:
                db.add(ProjectMember(project_id=project.project_id, user_id=user.user_id, role="member"))

            for _ in range(random.randint(3, 6)):
                assignee = random.choice(team + [None])
                task = Task(
                    title=f"{random.choice(TASK_VERBS)} {fake.bs()}",
                    description=fake.sentence(),
                    status=random.choice(TASK_STATUSES),
                    priority=random.choice(TASK_PRIORITIES),
                    deadline=now + timedelta(days=random.randint(-5, 60)),
                    tags=tags[:1],
                    project_id=project.project_id,
                    assignee_id=assignee.user_id if assignee else None,
                    created_by_id=owner.user_id,
                )
                db.add(task)
                await db.flush()

                if assignee:
                    db.add(Notification(
                        user_id=assignee.user_id,
                        type="task-assigned",
                        title="New Task Assigned",
                        message=f'You have been assigned to "{task.title}" in {project.name}',
                        data={"task_id": task.task_id, "project_id": project.project_id},
                    ))

            start = now + timedelta(days=random.randint(1, 30), hours=random.randint(8, 16))
            db.add(Event(
                title=f"{name} sync",
                description=fake.sentence(),
                start=start,
                end=start + timedelta(hours=1),
                color=random.choice(EVENT_COLORS),
                location=fake.city(),
                project_id=project.project_id,
                created_by_id=owner.user_id,
            ))

        await db.commit()
        print(f"[SEED] Created {len(users)} users and {len(PROJECT_IDEAS)} projects.")


if __name__ == "__main__":
    asyncio.run(populate())
