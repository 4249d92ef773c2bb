from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    database_url: str = "sqlite:///./coaching_marketplace.db"
    aws_access_key_id: str = "placeholder"
    aws_secret_access_key: str = "placeholder"
    aws_region: str = "us-east-1"
    s3_bucket_name: str = "placeholder-bucket"
    s3_endpoint_url: Optional[str] = None  # S3-compatible stores (Supabase, MinIO)
    environment: str = "development"

    # Auth
    jwt_secret_key: str = "your-secret-key-here"
    jwt_algorithm: str = "HS256"

    cors_origins: List[str] = ["*"]

    # Video tooling
    ffmpeg_binary: str = "ffmpeg"
    ffprobe_binary: str = "ffprobe"

    # Quota accounting
    quota_window_days: int = 30

    upload_url_expiry_seconds: int = 86400
    access_url_expiry_seconds: int = 604800

    class Config:
        env_file = ".env"


settings = Settings()
