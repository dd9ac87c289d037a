"""Database seeder for local development and manual API testing."""
import argparse
import asyncio
import logging
import random
import time
from datetime import timedelta

from sqlalchemy import insert

from app.database import Base, async_session, engine
from app.models import Comment, Like, Publication, Share, Topic, User, users_friends, utcnow
from app.security import hash_password

logger = logging.getLogger("seed")

TOPICS = ["python", "fastapi", "postgresql", "redis", "docker", "ai",
          "travel", "music", "books", "photography", "football", "cooking"]

DEFAULT_PASSWORD = "password123"


async def seed(small: bool = False) -> None:
    num_users = 10 if small else 50
    num_publications = 100 if small else 5000
    max_comments = 2 if small else 5

    logger.info("Seeding %d users, %d publications", num_users, num_publications)
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    # One hash for everyone; bcrypt is deliberately slow.
    hashed = hash_password(DEFAULT_PASSWORD)

    async with async_session() as session:
        users = [
            User(
                email=f"user_{i:04d}@example.com",
                first_name=f"User{i}",
                last_name="Example",
                hashed_password=hashed,
                bio=f"I am test user number {i}.",
            )
            for i in range(num_users)
        ]
        session.add_all(users)
        await session.flush()

        topics = [Topic(title=title, creator_id=random.choice(users).id) for title in TOPICS]
        session.add_all(topics)
        await session.flush()

        friendships = set()
        for user in users:
            for friend in random.sample(users, k=min(3, num_users)):
                if friend.id != user.id:
                    friendships.add((user.id, friend.id))
                    friendships.add((friend.id, user.id))
        await session.execute(
            insert(users_friends),
            [{"user_id": u, "friend_id": f} for u, f in friendships],
        )

        total_comments = 0
        for i in range(num_publications):
            created = utcnow() - timedelta(days=random.randint(0, 365))
            topic = random.choice(topics) if random.random() > 0.3 else None
            publication = Publication(
                content=f"Publication {i}: thoughts on {topic.title if topic else 'life'}.",
                author_id=random.choice(users).id,
                topic_id=topic.id if topic else None,
                created_at=created,
                latest_activity=created,
            )
            session.add(publication)
            await session.flush()

            for _ in range(random.randint(0, max_comments)):
                session.add(Comment(
                    content="Great post!",
                    publication_id=publication.id,
                    user_id=random.choice(users).id,
                ))
                total_comments += 1
            for reactor in random.sample(users, k=random.randint(0, min(5, num_users))):
                session.add(Like(publication_id=publication.id, user_id=reactor.id))
            if random.random() > 0.8:
                session.add(Share(publication_id=publication.id, user_id=random.choice(users).id))

            if i % 500 == 499:
                await session.flush()
                logger.info("  %d publications created", i + 1)

        await session.commit()

    logger.info(
        "Seeding complete in %.1fs: %d users, %d publications, %d comments, %d topics "
        "(password for every user: %s)",
        time.perf_counter() - start,
        num_users,
        num_publications,
        total_comments,
        len(TOPICS),
        DEFAULT_PASSWORD,
    )


def main():
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    parser = argparse.ArgumentParser(description="Seed the social platform database")
    parser.add_argument("--small", action="store_true", help="Use a small dataset (100 publications)")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small))


if __name__ == "__main__":
    main()
