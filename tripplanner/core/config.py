from pydantic_settings import BaseSettings
from dotenv import load_dotenv
from typing import Optional

load_dotenv()  # make sure the local .env is loaded before Settings reads the environment

class Settings(BaseSettings):
    DATABASE_URL: str
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Redis settings
    REDIS_URL: str = "redis://localhost:6379/0"
    TRIP_CACHE_SECONDS: int = 1800
    GEOCODE_CACHE_SECONDS: int = 60 * 60 * 24 * 30

    # LLM (OpenAI compatible endpoint, OpenRouter by default)
    OPENROUTER_API_KEY: str = ""
    BASE_URL: str = "https://openrouter.ai/api/v1"
    LLM_MODEL: str = "anthropic/claude-sonnet-4"
    LLM_MAX_TOKENS: int = 4096
    LLM_TEMPERATURE: float = 0.7

    # Mapping upstreams
    GOOGLE_MAPS_API_KEY: Optional[str] = None
    ORS_API_KEY: Optional[str] = None
    HTTP_TIMEOUT_SECONDS: float = 30.0

    CORS_ORIGIN_REGEX: str = r".*"

    PROJECT_NAME: str = "TripPlanner API"
    PROJECT_VERSION: str = "1.0.0"
    PROJECT_DESCRIPTION: str = "Collaborative family trip planning API with an AI assistant"

    ACTIVITY_PAGE_SIZE: int = 50
    RECENT_ACTIVITY_LIMIT: int = 20
    INVITE_TOKEN_BYTES: int = 16
    PASSWORD_MIN_LENGTH: int = 8
    CREATE_TABLES_ON_STARTUP: bool = False

    class Config:
        env_file = ".env"


settings = Settings()
