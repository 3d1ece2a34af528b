from functools import lru_cache

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from projectdesk.domain.profile import ProfileSyncPolicy

PLACEHOLDER_JWT_SECRET = "dev_secret"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "ProjectDesk"
    environment: str = "development"
    debug: bool = False

    # WeChat mini-program credentials (APPID / APPSECRET kept for existing deployments)
    wechat_app_id: str = Field(default="", validation_alias=AliasChoices("wechat_app_id", "appid"))
    wechat_app_secret: str = Field(default="", validation_alias=AliasChoices("wechat_app_secret", "appsecret"))
    wechat_api_base: str = "https://api.weixin.qq.com"
    identity_timeout_seconds: float = 5.0

    # Session tokens
    jwt_secret: str = PLACEHOLDER_JWT_SECRET
    jwt_algorithm: str = "HS256"
    token_ttl_days: int = 7

    # Store. Empty URL = store unavailable, login runs degraded.
    database_url: str = ""
    database_name: str = "miniprogram"
    store_timeout_seconds: float = 10.0
    store_retry_after_seconds: float = 5.0

    # Whether returning users get profile fields refreshed on login
    profile_sync_policy: ProfileSyncPolicy = ProfileSyncPolicy.FREEZE

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @model_validator(mode="after")
    def _require_real_secret_in_production(self) -> "Settings":
        if self.is_production and self.jwt_secret == PLACEHOLDER_JWT_SECRET:
            raise ValueError("JWT_SECRET must be set to a non-placeholder value in production")
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
