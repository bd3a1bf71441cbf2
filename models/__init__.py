from .user import User, UserCreate, UserPublic
from .topic import Topic, TopicPublic, TopicWithPostsCount, TopicWrite, PostsTopics
from .post import Post, PostPublic, PostWrite
from .response import BasicResponse, BlankResource, Paginated
from .auth import TokenData

__all__ = [
    "User", "UserCreate", "UserPublic",
    "Topic", "TopicPublic", "TopicWithPostsCount", "TopicWrite", "PostsTopics",
    "Post", "PostPublic", "PostWrite",
    "BasicResponse", "BlankResource", "Paginated",
    "TokenData",
]
