import uuid
from typing import Generic, List, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class BasicResponse(BaseModel):
    message: str


class BlankResource(BaseModel):
    """Template handed to clients before they create a resource"""
    id: uuid.UUID


class Paginated(BaseModel, Generic[T]):
    data: List[T]
    total: int
    current_page: int
    per_page: int
    last_page: int
