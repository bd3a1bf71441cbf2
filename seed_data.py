import random
import uuid
from datetime import datetime, timedelta, timezone
from sqlmodel import Session, SQLModel, select

from models import User, Topic, Post
from dependencies import engine
from auth.security import get_password_hash
from services.associations import sync

# Data pools
USERS = [
    ("juan", "Juan Domínguez"),
    ("lucia", "Lucía García"),
    ("emma", "Emma Smith"),
]

TOPIC_NAMES = [
    "Technology", "Sports", "Entertainment", "Science", "Politics", "Travel"
]

POST_TITLES = [
    "Just finished my first project with Vue.js",
    "Loving the new TypeScript features",
    "Beautiful day for a coffee and some coding",
    "Finally solved that bug that was driving me crazy",
    "Learning FastAPI has been an amazing journey",
    "Just deployed my first full-stack application",
    "Good resources for learning Docker",
    "The new VS Code update is amazing",
]


def slugify(value: str) -> str:
    return "-".join("".join(c if c.isalnum() else " " for c in value.lower()).split())

def random_date(start_date, end_date):
    time_between = end_date - start_date
    random_number_of_days = random.randrange(max(time_between.days, 1))
    random_time = timedelta(
        hours=random.randint(0, 23),
        minutes=random.randint(0, 59),
        seconds=random.randint(0, 59)
    )
    return start_date + timedelta(days=random_number_of_days) + random_time

def create_test_data():
    SQLModel.metadata.create_all(engine)

    with Session(engine) as session:
        if session.exec(select(User)).first():
            return

        users = []
        for username, full_name in USERS:
            user = User(
                username=username,
                full_name=full_name,
                email=f"{username}@example.com",
                password=get_password_hash("password123"),
            )
            users.append(user)
        session.add_all(users)
        session.commit()

        now = datetime.now(timezone.utc)
        for user in users:
            topics = [
                Topic(id=uuid.uuid4(), name=name, slug=slugify(name), user_id=user.id)
                for name in random.sample(TOPIC_NAMES, 3)
            ]
            posts = []
            for title in random.sample(POST_TITLES, 4):
                published = random_date(now - timedelta(days=30), now)
                posts.append(Post(
                    id=uuid.uuid4(),
                    title=title,
                    slug=slugify(title),
                    summary=title,
                    body=f"{title}. More to come soon.",
                    published_at=published if random.random() > 0.25 else None,
                    user_id=user.id,
                ))
            session.add_all(topics + posts)
            session.commit()

            for topic in topics:
                sync(session, topic.id, [post.id for post in random.sample(posts, 2)])


if __name__ == "__main__":
    create_test_data()
