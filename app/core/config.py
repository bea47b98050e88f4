from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "SkillSync"
    API_V1_STR: str = "/api/v1"

    MONGODB_URL: str
    DATABASE_NAME: str = "skillsync"

    # Redis Cache Settings
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_PREFIX: str = "ss:"
    CACHE_DEFAULT_TTL_SECONDS: int = 3600
    CACHE_RETRY_SECONDS: int = 30

    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    LOG_LEVEL: str = "INFO"

    # Matching
    MATCH_SUGGESTIONS_LIMIT: int = 10
    MATCH_CACHE_TTL_SECONDS: int = 300

    # Team settings applied to new projects
    DEFAULT_MAX_TEAM_SIZE: int = 5
    MAX_TEAM_SIZE_LIMIT: int = 10

    # Frontend
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:5173"]

    class Config:
        case_sensitive = True
        env_file = ".env"


settings = Settings()
