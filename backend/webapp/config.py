"""Application configuration using Pydantic settings."""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    environment: str = "development"

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None  # e.g. /var/log/webapp/app.log

    # Supabase Storage (product image bytes)
    supabase_url: Optional[str] = None
    supabase_secret_key: Optional[str] = None  # Secret key (sb_secret_...) for server-side operations
    storage_bucket: str = "product-images"

    # Redis (notification queue for the ARQ worker)
    redis_url: str = "redis://127.0.0.1:6379"
    notification_topic: str = "user-registration"

    # Email verification
    verification_token_ttl_seconds: int = 60
    verification_base_url: str = "http://localhost:8080"
    mail_api_url: Optional[str] = None
    mail_api_key: Optional[str] = None
    mail_from: str = "noreply@webapp.local"

    # Uploads
    max_image_size_bytes: int = 5 * 1024 * 1024  # 5MB

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
