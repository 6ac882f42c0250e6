from functools import lru_cache
from typing import Dict, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    # ─────────── APP ───────────
    app_name: str = "Quoteflow"
    environment: str = "dev"
    log_level: str = "INFO"

    # ─────────── API ───────────
    api_prefix: str = "/api/v1"
    request_id_header: str = "X-Request-Id"
    frontend_url: str = "http://localhost:3000"

    # ─────────── DATABASE ───────────
    database_url: str
    transaction_retries: int = 3

    # ─────────── JWT / AUTH ───────────
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    jwt_access_token_minutes: int = 1440  # 24 hours

    # ─────────── LOCK / SESSION STORE ───────────
    redis_url: Optional[str] = None
    stats_cache_ttl_seconds: int = 300

    # ─────────── MESSAGING ───────────
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_whatsapp_from: str = ""
    twilio_api_base: str = "https://api.twilio.com/2010-04-01"
    messaging_webhook_token: Optional[str] = None

    notification_debounce_seconds: int = 20
    notification_retries: int = 3
    notification_backoff_base_seconds: float = 1.0
    notification_max_backoff_seconds: float = 10.0
    notification_timeout_seconds: float = 10.0
    notification_session_window_hours: int = 24
    default_phone_region: str = "IN"
    # action -> provider template id (e.g. Twilio ContentSid)
    notification_templates: Dict[str, str] = {}

    # ─────────── OBJECT STORE ───────────
    s3_bucket: str = "quoteflow-images"
    s3_endpoint_url: Optional[str] = None
    s3_region: str = "ap-south-1"
    s3_access_key: Optional[str] = None
    s3_secret_key: Optional[str] = None
    s3_public_base_url: Optional[str] = None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
