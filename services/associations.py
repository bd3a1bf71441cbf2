"""Maintenance of the posts_topics link table.

Both directions of the relationship funnel through ``_sync_links`` so that a
topic's post set and a post's topic set are replaced the same way: links only
in the current set are removed, links only in the target set are inserted,
links in both are left alone.
"""
import logging
import uuid
from typing import Iterable

from sqlalchemy import func, select as sa_select
from sqlmodel import Session, select

from models import Post, PostsTopics, Topic

logger = logging.getLogger(__name__)


def _sync_links(session: Session, owner_column, owner_id: uuid.UUID, other_column, target_ids: Iterable[uuid.UUID]) -> dict:
    links = session.exec(select(PostsTopics).where(owner_column == owner_id)).all()
    current = {getattr(link, other_column.key): link for link in links}
    target = set(target_ids)

    detached = [other_id for other_id in current if other_id not in target]
    attached = [other_id for other_id in target if other_id not in current]

    for other_id in detached:
        session.delete(current[other_id])
    for other_id in attached:
        session.add(PostsTopics(**{owner_column.key: owner_id, other_column.key: other_id}))

    return {"attached": attached, "detached": detached}


def sync(session: Session, topic_id: uuid.UUID, post_ids: Iterable[uuid.UUID], commit: bool = True) -> dict:
    """Replace the posts linked to a topic with exactly ``post_ids``"""
    changes = _sync_links(session, PostsTopics.topic_id, topic_id, PostsTopics.post_id, post_ids)
    if commit:
        session.commit()
    logger.info(
        f"Synced posts for topic {topic_id}: "
        f"{len(changes['attached'])} attached, {len(changes['detached'])} detached"
    )
    return changes


def sync_post_topics(session: Session, post_id: uuid.UUID, topic_ids: Iterable[uuid.UUID], commit: bool = True) -> dict:
    """Replace the topics linked to a post with exactly ``topic_ids``"""
    changes = _sync_links(session, PostsTopics.post_id, post_id, PostsTopics.topic_id, topic_ids)
    if commit:
        session.commit()
    return changes


def detach_post(session: Session, post_id: uuid.UUID) -> int:
    """Remove every link to a post. The caller owns the commit."""
    links = session.exec(select(PostsTopics).where(PostsTopics.post_id == post_id)).all()
    for link in links:
        session.delete(link)
    return len(links)


def topic_posts(session: Session, topic_id: uuid.UUID) -> list[Post]:
    statement = (
        select(Post)
        .join(PostsTopics, PostsTopics.post_id == Post.id)
        .where(PostsTopics.topic_id == topic_id, Post.deleted_at == None)
        .order_by(Post.created_at)
    )
    return list(session.exec(statement).all())


def post_topics(session: Session, post_id: uuid.UUID) -> list[Topic]:
    statement = (
        select(Topic)
        .join(PostsTopics, PostsTopics.topic_id == Topic.id)
        .where(PostsTopics.post_id == post_id, Topic.deleted_at == None)
        .order_by(Topic.name)
    )
    return list(session.exec(statement).all())


def posts_count():
    """Correlated count of live posts linked to the enclosing query's topic"""
    return (
        sa_select(func.count(PostsTopics.post_id))
        .join(Post, Post.id == PostsTopics.post_id)
        .where(PostsTopics.topic_id == Topic.id, Post.deleted_at == None)
        .correlate(Topic)
        .scalar_subquery()
    )
