from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="",
        extra="ignore",
    )

    app_name: str = "campaign-studio"
    environment: str = Field(default="local", validation_alias=AliasChoices("ENVIRONMENT", "CAMPAIGN_STUDIO_ENVIRONMENT"))
    log_level: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "CAMPAIGN_STUDIO_LOG_LEVEL"))
    database_url: str = Field(
        default="postgresql+asyncpg://postgres:postgres@db:5432/campaign_studio",
        validation_alias=AliasChoices("DATABASE_URL", "CAMPAIGN_STUDIO_DATABASE_URL"),
    )
    auto_create_tables: bool = Field(default=False, validation_alias=AliasChoices("AUTO_CREATE_TABLES", "CAMPAIGN_STUDIO_AUTO_CREATE_TABLES"))
    admin_password: str | None = Field(default=None, validation_alias=AliasChoices("ADMIN_PASSWORD", "CAMPAIGN_STUDIO_ADMIN_PASSWORD"))
    login_url: str = Field(default="/brand/login", validation_alias=AliasChoices("LOGIN_URL", "CAMPAIGN_STUDIO_LOGIN_URL"))
    telegram_bot_token: str | None = Field(default=None, validation_alias=AliasChoices("TELEGRAM_BOT_TOKEN", "CAMPAIGN_STUDIO_TELEGRAM_BOT_TOKEN"))
    telegram_chat_id: str | None = Field(default=None, validation_alias=AliasChoices("TELEGRAM_CHAT_ID", "CAMPAIGN_STUDIO_TELEGRAM_CHAT_ID"))
    asset_dir: str = Field(default="/data/assets", validation_alias=AliasChoices("ASSET_DIR", "CAMPAIGN_STUDIO_ASSET_DIR"))
    store_latency_sec: float = Field(default=0.0, validation_alias=AliasChoices("STORE_LATENCY_SEC", "CAMPAIGN_STUDIO_STORE_LATENCY_SEC"))
    payment_methods_source: str = Field(default="static", validation_alias=AliasChoices("PAYMENT_METHODS_SOURCE", "CAMPAIGN_STUDIO_PAYMENT_METHODS_SOURCE"))

    # Wizard rules and defaults
    min_budget: float = Field(default=1000, validation_alias=AliasChoices("MIN_BUDGET", "CAMPAIGN_STUDIO_MIN_BUDGET"))
    min_views_floor: int = Field(default=1000, validation_alias=AliasChoices("MIN_VIEWS_FLOOR", "CAMPAIGN_STUDIO_MIN_VIEWS_FLOOR"))
    default_min_views: str = Field(default="10000", validation_alias=AliasChoices("DEFAULT_MIN_VIEWS", "CAMPAIGN_STUDIO_DEFAULT_MIN_VIEWS"))
    default_campaign_days: int = Field(default=30, validation_alias=AliasChoices("DEFAULT_CAMPAIGN_DAYS", "CAMPAIGN_STUDIO_DEFAULT_CAMPAIGN_DAYS"))
    default_rate_original: str = Field(default="500", validation_alias=AliasChoices("DEFAULT_RATE_ORIGINAL", "CAMPAIGN_STUDIO_DEFAULT_RATE_ORIGINAL"))
    default_rate_repurposed: str = Field(default="250", validation_alias=AliasChoices("DEFAULT_RATE_REPURPOSED", "CAMPAIGN_STUDIO_DEFAULT_RATE_REPURPOSED"))
    default_allocation_original: int = Field(default=70, ge=0, le=100, validation_alias=AliasChoices("DEFAULT_ALLOCATION_ORIGINAL", "CAMPAIGN_STUDIO_DEFAULT_ALLOCATION_ORIGINAL"))
    default_hashtag: str = Field(default="#YourBrand #ad", validation_alias=AliasChoices("DEFAULT_HASHTAG", "CAMPAIGN_STUDIO_DEFAULT_HASHTAG"))
    min_campaign_days: int = Field(default=30, validation_alias=AliasChoices("MIN_CAMPAIGN_DAYS", "CAMPAIGN_STUDIO_MIN_CAMPAIGN_DAYS"))
    enforce_min_campaign_days: bool = Field(default=False, validation_alias=AliasChoices("ENFORCE_MIN_CAMPAIGN_DAYS", "CAMPAIGN_STUDIO_ENFORCE_MIN_CAMPAIGN_DAYS"))

    @property
    def async_database_url(self) -> str:
        if self.database_url.startswith("postgresql+"):
            return self.database_url
        if self.database_url.startswith("postgresql://"):
            return self.database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if self.database_url.startswith("sqlite://"):
            return self.database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return self.database_url


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
