import uuid
import logging

from fastapi import APIRouter, HTTPException, Query, Response, status
from sqlalchemy import func
from sqlmodel import Session, select

from models import Post, PostPublic, PostWrite, Topic, TopicPublic, BlankResource, Paginated, User
from dependencies import SessionDep, CurrentUser, ValidationFailed
from core.config import get_settings
from core.metrics import resource_writes_total
from services.associations import detach_post, post_topics, sync_post_topics
from services.resources import SLUG_TAKEN, get_owned_or_404, last_page, now, parse_id, slug_taken, unique_write

router = APIRouter()
settings = get_settings()
logger = logging.getLogger(__name__)

NOT_FOUND = "Post not found"


def with_topics(post: Post, session: Session) -> PostPublic:
    """Convert Post to PostPublic with its live topics attached"""
    post_dict = post.model_dump()
    post_dict["topics"] = [TopicPublic.model_validate(topic) for topic in post_topics(session, post.id)]
    return PostPublic(**post_dict)


def check_topics(topic_ids: list[uuid.UUID], session: Session, current_user: User) -> set[uuid.UUID]:
    requested = set(topic_ids)
    if not requested:
        return requested
    owned = set(session.exec(
        select(Topic.id).where(
            Topic.id.in_(requested),
            Topic.user_id == current_user.id,
            Topic.deleted_at == None,
        )
    ).all())
    unknown = requested - owned
    if unknown:
        raise ValidationFailed({
            "topics": [f"The selected topic {topic_id} is invalid." for topic_id in sorted(map(str, unknown))]
        })
    return requested


@router.get("", response_model=Paginated[PostPublic])
async def list_posts(
    session: SessionDep,
    current_user: CurrentUser,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
):
    """List the current user's live posts, newest first"""
    live = (Post.user_id == current_user.id, Post.deleted_at == None)
    total = session.exec(select(func.count()).select_from(Post).where(*live)).one()
    posts = session.exec(
        select(Post)
        .where(*live)
        .order_by(Post.created_at.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
    ).all()

    return {
        "data": [with_topics(post, session) for post in posts],
        "total": total,
        "current_page": page,
        "per_page": per_page,
        "last_page": last_page(total, per_page),
    }


@router.get("/create", response_model=BlankResource)
async def new_post(current_user: CurrentUser):
    """Blank post carrying a fresh id for the editor"""
    return BlankResource(id=uuid.uuid4())


@router.get("/{post_id}", response_model=PostPublic)
async def get_post(post_id: str, session: SessionDep, current_user: CurrentUser):
    """Get one of the current user's posts with its topics"""
    post = get_owned_or_404(session, Post, post_id, current_user, NOT_FOUND)
    return with_topics(post, session)


@router.post("/{post_id}", response_model=PostPublic)
async def save_post(
    post_id: str,
    data: PostWrite,
    session: SessionDep,
    current_user: CurrentUser,
):
    """Create the post with this id, or update it, syncing its topics when given"""
    key = parse_id(post_id, NOT_FOUND)
    post = session.get(Post, key)
    if post is not None and (post.deleted_at is not None or post.user_id != current_user.id):
        raise HTTPException(status_code=404, detail=NOT_FOUND)

    if slug_taken(session, Post, data.slug, current_user.id, exclude_id=key):
        raise ValidationFailed({"slug": [SLUG_TAKEN]})
    topic_ids = check_topics(data.topics, session, current_user) if data.topics is not None else None

    if post is None:
        post = Post(id=key, user_id=current_user.id, **data.model_dump(exclude={"id", "topics"}))
        operation = "create"
    else:
        # Fields left out of the body keep their stored values
        post.sqlmodel_update(data.model_dump(exclude={"id", "topics"}, exclude_unset=True))
        post.updated_at = now()
        operation = "update"

    session.add(post)
    with unique_write(session):
        session.flush()
        if topic_ids is not None:
            sync_post_topics(session, post.id, topic_ids, commit=False)
        session.commit()
    session.refresh(post)

    resource_writes_total.labels(resource="post", operation=operation).inc()
    logger.info(f"Post {post.id} {operation}d by user {current_user.username}")
    return with_topics(post, session)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(post_id: str, session: SessionDep, current_user: CurrentUser):
    """Soft delete a post and drop its topic links in the same transaction"""
    post = get_owned_or_404(session, Post, post_id, current_user, NOT_FOUND)
    post.deleted_at = now()
    session.add(post)
    detached = detach_post(session, post.id)
    session.commit()

    resource_writes_total.labels(resource="post", operation="delete").inc()
    logger.info(f"Post {post.id} deleted by user {current_user.username}, {detached} topic links removed")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
