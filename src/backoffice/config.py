"""Configuration settings for the application."""
from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field
from dotenv import load_dotenv

# Ensure .env values are loaded into os.environ before settings are read.
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    database_url: str = Field(..., alias="DATABASE_URL")
    project_name: str = Field(default="Backoffice", alias="PROJECT_NAME")
    api_version: str = Field(default="v1", alias="API_VERSION")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    # Bearer token lifetime in hours
    session_ttl_hours: int = Field(default=24, alias="SESSION_TTL_HOURS")
    # Upper bound for a single stock-mutating transaction, in seconds
    transaction_timeout_seconds: float = Field(default=5.0, alias="TRANSACTION_TIMEOUT_SECONDS")
    # Products at or below this stock level count as low stock on the dashboard
    low_stock_threshold: int = Field(default=10, alias="LOW_STOCK_THRESHOLD")
    # passlib schemes, first one is used for new hashes
    password_schemes: List[str] = Field(default=["pbkdf2_sha256"], alias="PASSWORD_SCHEMES")
    cors_origins: List[str] = Field(default=["*"], alias="CORS_ORIGINS")

    class Config:
        env_file = ".env"
        case_sensitive = False
        populate_by_name = True


settings = Settings()
