import math
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from models import User
from dependencies import ValidationFailed

SLUG_TAKEN = "The slug has already been taken."


def now() -> datetime:
    return datetime.now(timezone.utc)


def parse_id(value: str, detail: str) -> uuid.UUID:
    # A malformed id is reported like a missing one
    try:
        return uuid.UUID(value)
    except ValueError:
        raise HTTPException(status_code=404, detail=detail)


def get_owned_or_404(session: Session, model, resource_id: str, user: User, detail: str):
    """Load a live row owned by ``user``; anything else is a 404"""
    instance = session.get(model, parse_id(resource_id, detail))
    if not instance or instance.deleted_at is not None or instance.user_id != user.id:
        raise HTTPException(status_code=404, detail=detail)
    return instance


def slug_taken(session: Session, model, slug: str, user_id: int, exclude_id: uuid.UUID) -> bool:
    statement = select(model.id).where(
        model.slug == slug,
        model.user_id == user_id,
        model.id != exclude_id,
    )
    return session.exec(statement).first() is not None


@contextmanager
def unique_write(session: Session):
    """Turn a unique constraint hit from a concurrent write into a slug error"""
    try:
        yield
    except IntegrityError:
        session.rollback()
        raise ValidationFailed({"slug": [SLUG_TAKEN]})


def last_page(total: int, per_page: int) -> int:
    return max(1, math.ceil(total / per_page))
