import uuid
import logging

from fastapi import APIRouter, HTTPException, Query, Response, status
from sqlalchemy import func
from sqlmodel import select

from models import Topic, TopicPublic, TopicWithPostsCount, TopicWrite, BlankResource, Paginated
from dependencies import SessionDep, CurrentUser, ValidationFailed
from core.config import get_settings
from core.metrics import resource_writes_total
from services.associations import posts_count
from services.resources import SLUG_TAKEN, get_owned_or_404, last_page, now, parse_id, slug_taken, unique_write

router = APIRouter()
settings = get_settings()
logger = logging.getLogger(__name__)

NOT_FOUND = "Topic not found"


@router.get("", response_model=Paginated[TopicWithPostsCount])
async def list_topics(
    session: SessionDep,
    current_user: CurrentUser,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
):
    """List every live topic, newest first, with its live post count"""
    total = session.exec(
        select(func.count()).select_from(Topic).where(Topic.deleted_at == None)
    ).one()

    statement = (
        select(Topic, posts_count().label("posts_count"))
        .where(Topic.deleted_at == None)
        .order_by(Topic.created_at.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
    )
    rows = session.exec(statement).all()

    return {
        "data": [
            TopicWithPostsCount(**topic.model_dump(), posts_count=count)
            for topic, count in rows
        ],
        "total": total,
        "current_page": page,
        "per_page": per_page,
        "last_page": last_page(total, per_page),
    }


@router.get("/create", response_model=BlankResource)
async def new_topic(current_user: CurrentUser):
    """Blank topic carrying a fresh id for the creation form"""
    return BlankResource(id=uuid.uuid4())


@router.get("/{topic_id}", response_model=TopicPublic)
async def get_topic(topic_id: str, session: SessionDep, current_user: CurrentUser):
    """Get one of the current user's topics"""
    return get_owned_or_404(session, Topic, topic_id, current_user, NOT_FOUND)


@router.post("/{topic_id}", response_model=TopicPublic)
async def save_topic(
    topic_id: str,
    data: TopicWrite,
    session: SessionDep,
    current_user: CurrentUser,
):
    """Create the topic with this id, or update it if it already exists"""
    key = parse_id(topic_id, NOT_FOUND)
    topic = session.get(Topic, key)
    if topic is not None and (topic.deleted_at is not None or topic.user_id != current_user.id):
        raise HTTPException(status_code=404, detail=NOT_FOUND)

    if slug_taken(session, Topic, data.slug, current_user.id, exclude_id=key):
        raise ValidationFailed({"slug": [SLUG_TAKEN]})

    if topic is None:
        topic = Topic(id=key, name=data.name, slug=data.slug, user_id=current_user.id)
        operation = "create"
    else:
        topic.sqlmodel_update(data.model_dump(include={"name", "slug"}))
        topic.updated_at = now()
        operation = "update"

    session.add(topic)
    with unique_write(session):
        session.commit()
    session.refresh(topic)

    resource_writes_total.labels(resource="topic", operation=operation).inc()
    logger.info(f"Topic {topic.id} {operation}d by user {current_user.username}")
    return topic


@router.delete("/{topic_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_topic(topic_id: str, session: SessionDep, current_user: CurrentUser):
    """Soft delete one of the current user's topics"""
    topic = get_owned_or_404(session, Topic, topic_id, current_user, NOT_FOUND)
    topic.deleted_at = now()
    session.add(topic)
    session.commit()

    resource_writes_total.labels(resource="topic", operation="delete").inc()
    logger.info(f"Topic {topic.id} deleted by user {current_user.username}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
