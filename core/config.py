from pydantic_settings import BaseSettings
from functools import lru_cache
from pathlib import Path


class Settings(BaseSettings):
    # App
    APP_NAME: str = "Canvas Topics API"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = """
    Admin API for a blog publishing backend.

    ## Features
    * Cookie based JWT authentication
    * Topic management (create, update, soft delete)
    * Post management with topic assignment
    * Paginated listings with post counts per topic
    """
    API_PREFIX: str = "/api"
    DOCS_URL: str = "/docs"
    REDOC_URL: str = "/redoc"
    OPENAPI_URL: str = "/openapi.json"
    OPENAPI_TAGS: list[dict] = [
        {
            "name": "auth",
            "description": "Login and logout"
        },
        {
            "name": "users",
            "description": "Registration and current user profile"
        },
        {
            "name": "topics",
            "description": "Topic listing, creation, update and deletion"
        },
        {
            "name": "posts",
            "description": "Post management and topic assignment"
        },
    ]
    CONTACT: dict = {"name": "Canvas maintainers"}
    LICENSE_INFO: dict = {
        "name": "MIT",
        "url": "https://opensource.org/licenses/MIT",
        "identifier": "MIT",
    }

    # CORS
    CORS_ALLOWED_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost"]

    # Database
    DATABASE_URL: str = "sqlite:///./canvas.db"
    DATABASE_ECHO: bool = False
    TEST_DATABASE_URL: str = "sqlite://"

    # JWT
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    COOKIE_SECURE: bool = True

    # Pagination
    DEFAULT_PAGE_SIZE: int = 25
    MAX_PAGE_SIZE: int = 100

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Metrics
    ENABLE_METRICS: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    # Project root holds the .env file
    root_dir = Path(__file__).resolve().parent.parent
    return Settings(_env_file=root_dir / ".env")
