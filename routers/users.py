from fastapi import APIRouter, HTTPException, status
import logging
import re

from models import User, UserCreate, UserPublic
from dependencies import SessionDep, CurrentUser, get_user
from auth.security import get_password_hash

router = APIRouter()
logger = logging.getLogger(__name__)

def is_valid_email(email: str) -> bool:
    """Validate email format using regex"""
    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(pattern, email))

@router.post("", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
async def create_user(user: UserCreate, session: SessionDep) -> User:
    """Create a new user account"""
    if not user.username.strip():
        raise HTTPException(status_code=400, detail="User is not valid")

    if not user.password.strip():
        raise HTTPException(status_code=400, detail="Password is not valid")

    if not is_valid_email(user.email):
        raise HTTPException(status_code=400, detail="Invalid email format")

    if get_user(user.username, session):
        raise HTTPException(status_code=409, detail="User already exists")

    db_user = User(
        username=user.username,
        full_name=user.full_name,
        email=user.email,
        password=get_password_hash(user.password),
    )
    session.add(db_user)
    session.commit()
    session.refresh(db_user)

    logger.info(f"Registered user {db_user.username}")
    return db_user

@router.get("/me", response_model=UserPublic)
async def get_users_me(current_user: CurrentUser) -> User:
    """Get current user's profile information"""
    return current_user
