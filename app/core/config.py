from decimal import Decimal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Read env from container + optionally from files
    model_config = SettingsConfigDict(
        env_file=(".env", ".env.docker"),
        extra="ignore",
        case_sensitive=False,
    )

    # App
    ENVIRONMENT: str = Field(default="dev", validation_alias=AliasChoices("ENVIRONMENT", "environment"))
    APP_NAME: str = Field(default="gst_billing_core", validation_alias=AliasChoices("APP_NAME", "app_name"))
    LOG_LEVEL: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))
    DEBUG: bool = Field(default=False, validation_alias=AliasChoices("DEBUG", "debug"))

    # Infrastructure
    DATABASE_URL: str = Field(
        default="postgresql+asyncpg://postgres:postgres@db:5432/gst_billing_db",
        validation_alias=AliasChoices("DATABASE_URL", "database_url"),
    )
    REDIS_URL: str = Field(
        default="redis://redis:6379/0",
        validation_alias=AliasChoices("REDIS_URL", "redis_url"),
    )
    BUSINESS_CONTEXT_TTL_SECONDS: int = Field(
        default=24 * 60 * 60,
        validation_alias=AliasChoices("BUSINESS_CONTEXT_TTL_SECONDS", "business_context_ttl_seconds"),
    )

    # Resend (transactional e-mail for rental reminders)
    RESEND_API_KEY: str = Field(default="", validation_alias=AliasChoices("RESEND_API_KEY", "resend_api_key"))
    RESEND_BASE_URL: str = Field(default="https://api.resend.com", validation_alias=AliasChoices("RESEND_BASE_URL", "resend_base_url"))
    NOTIFICATION_FROM_EMAIL: str = Field(
        default="notifications@resend.dev",
        validation_alias=AliasChoices("NOTIFICATION_FROM_EMAIL", "notification_from_email"),
    )
    DEFAULT_BUSINESS_NAME: str = Field(
        default="HybridERP",
        validation_alias=AliasChoices("DEFAULT_BUSINESS_NAME", "default_business_name"),
    )

    # Bill-wise profit: cost basis assumed when an item has no purchase price.
    # Business assumption, pending confirmation from product.
    ASSUMED_COST_RATIO: Decimal = Field(
        default=Decimal("0.70"),
        ge=0,
        le=1,
        validation_alias=AliasChoices("ASSUMED_COST_RATIO", "assumed_cost_ratio"),
    )


settings = Settings()
