from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./tubely.db"

    # JWT
    secret_key: str = "your-secret-key-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days

    # Frontend URL for CORS
    frontend_url: str = "http://localhost:3000"

    # Address this API is reachable at; thumbnail URLs are built from it
    public_base_url: str = "http://localhost:8091"

    # Thumbnails: absolute path to public asset folder (empty = backend/assets)
    assets_root: str = ""

    # Raw uploads and remux output live here for one request only (empty = system temp dir)
    staging_dir: str = ""

    # Durable storage for processed videos: "local" or "s3"
    storage_backend: str = "local"
    local_media_dir: str = ""  # empty = backend/uploads/media
    media_base_url: str = "http://localhost:8091/media/"  # CloudFront distribution when using S3
    s3_bucket: str = ""
    s3_region: str = "us-east-1"
    s3_endpoint_url: str = ""  # e.g. MinIO; empty = AWS
    presign_expire_seconds: int = 60 * 60

    # Upload limits
    max_video_upload_bytes: int = 1 << 30  # 1 GiB
    max_thumbnail_upload_bytes: int = 10 << 20  # 10 MiB

    # FFmpeg
    ffprobe_path: str = "ffprobe"
    ffmpeg_path: str = "ffmpeg"
    probe_timeout_seconds: float = 60
    remux_timeout_seconds: float = 60 * 30

    # Logging
    log_level: str = "INFO"
    log_file: str = ""  # empty = console only

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()
