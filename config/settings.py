"""
Configuration settings for the application
"""
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


ITEMS_PER_PAGE = 10
SUBSCRIPTION_DAYS = 30


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,  # Allow both field name and alias
        extra="ignore",
    )

    # Identity provider (Clerk) configuration
    webhook_secret: Optional[str] = Field(default=None, alias="WEBHOOK_SECRET")
    clerk_secret_key: Optional[str] = Field(default=None, alias="CLERK_SECRET_KEY")
    clerk_api_url: str = Field(default="https://api.clerk.com/v1", alias="CLERK_API_URL")
    clerk_jwt_key: Optional[str] = Field(default=None, alias="CLERK_JWT_KEY")
    clerk_jwks_url: Optional[str] = Field(default=None, alias="CLERK_JWKS_URL")
    # Comma-separated origins, e.g. "http://localhost:3000,https://app.example.com"
    clerk_authorized_parties: Annotated[List[str], NoDecode] = Field(
        default_factory=list, alias="CLERK_AUTHORIZED_PARTIES"
    )

    # Infrastructure configuration
    database_url: Optional[str] = Field(default="sqlite+aiosqlite:///./todo_master.db", alias="DATABASE_URL")

    # Frontend configuration
    frontend_url: Optional[str] = Field(default="http://localhost:3000", alias="FRONTEND_URL")
    sign_in_url: str = Field(default="/sign-in", alias="SIGN_IN_URL")

    # Deployment configuration
    render: Optional[str] = Field(default=None, alias="RENDER")
    env: Optional[str] = Field(default=None, alias="ENV")

    @field_validator("clerk_authorized_parties", mode="before")
    @classmethod
    def split_authorized_parties(cls, value):
        if isinstance(value, str):
            return [party.strip() for party in value.split(",") if party.strip()]
        return value


# Instantiate settings object
settings = Settings()

# Determine if we're in production mode
IS_PRODUCTION = bool(settings.render) or bool(settings.env and settings.env.lower() == "production")
