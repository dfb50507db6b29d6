"""Database seeder: built-in roles, an administrator and sample blog content."""
import asyncio
import argparse
import random
import time
from datetime import datetime, timezone, timedelta

from webblog.config import settings
from webblog.database import engine, async_session, Base
from webblog.models import User, Article, Comment, Tag
from webblog.repositories import RoleRepository
from webblog.security import hash_password
from webblog.services import role_service

TAGS = ["python", "fastapi", "postgresql", "docker", "kubernetes",
        "react", "typescript", "aws", "devops", "testing", "performance",
        "security", "microservices", "graphql", "rest-api"]


async def seed(small: bool = False, reset: bool = False, admin_password: str = "admin"):
    num_users = 5 if small else 25
    num_articles = 20 if small else 500
    max_comments_per_article = 2 if small else 5

    print(f"Seeding: {num_users} users, {num_articles} articles, up to "
          f"{num_articles * max_comments_per_article} comments")
    start = time.perf_counter()

    async with engine.begin() as conn:
        if reset:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        await role_service.ensure_default_roles(session)
        roles = RoleRepository(session)
        admin_role = await roles.get_by_name(settings.ADMIN_ROLE)
        user_role = await roles.get_by_name(settings.DEFAULT_ROLE)

        admin = User(
            username="admin",
            email="admin@example.com",
            password_hash=hash_password(admin_password),
            roles=[admin_role],
        )
        session.add(admin)

        # One hash for every sample account; bcrypt is deliberately slow.
        sample_hash = hash_password("password")
        users = []
        for i in range(num_users):
            user = User(
                username=f"user_{i:04d}",
                email=f"user_{i:04d}@example.com",
                password_hash=sample_hash,
                custom_field=f"I am test user number {i}. I write about technology.",
                roles=[user_role],
            )
            session.add(user)
            users.append(user)
        await session.flush()
        print(f"  Created {len(users) + 1} users (admin password: {admin_password!r})")

        tags = []
        for name in TAGS:
            tag = Tag(name=name)
            session.add(tag)
            tags.append(tag)
        await session.flush()
        print(f"  Created {len(tags)} tags")

        total_comments = 0
        for i in range(num_articles):
            created = datetime.now(timezone.utc) - timedelta(days=random.randint(0, 365))
            article = Article(
                title=f"Article {i}: How to optimize {random.choice(TAGS)} applications",
                content=f"This is the full content of article {i}. " * 10,
                view_count=random.randint(0, 1000),
                created_at=created,
                author_id=random.choice(users).id,
                tags=random.sample(tags, k=random.randint(1, 4)),
                comments=[
                    Comment(
                        title=None if random.random() > 0.5 else "Thanks",
                        content="Great article! Very helpful for understanding the topic.",
                        author_id=random.choice(users).id,
                    )
                    for _ in range(random.randint(0, max_comments_per_article))
                ],
            )
            total_comments += len(article.comments)
            session.add(article)
        await session.flush()
        print(f"  Created {num_articles} articles")

        await session.commit()

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")
    print(f"  Comments: {total_comments}")


def main():
    parser = argparse.ArgumentParser(description="Seed the blog database")
    parser.add_argument("--small", action="store_true", help="Use a small dataset (20 articles)")
    parser.add_argument("--reset", action="store_true", help="Drop all tables before seeding")
    parser.add_argument("--admin-password", default="admin", help="Password for the admin account")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small, reset=args.reset, admin_password=args.admin_password))


if __name__ == "__main__":
    main()
