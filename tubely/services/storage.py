"""
Durable storage for processed videos: S3 (CloudFront in front) or a local media folder.
Object stores are synchronous; async callers run them in an executor.
"""
import logging
import secrets
import shutil
from abc import ABC, abstractmethod
from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from tubely.config import Settings
from tubely.errors import StorageFailure

logger = logging.getLogger(__name__)


def build_key(orientation: str, extension: str) -> str:
    """<orientation>/<256-bit url-safe token>.<extension>"""
    token = secrets.token_urlsafe(32)
    return f"{orientation}/{token}.{extension.lstrip('.')}"


class ObjectStore(ABC):
    """Write-once blob storage addressed by key."""

    def __init__(self, base_url: str):
        self.base_url = base_url

    def public_url(self, key: str) -> str:
        return f"{self.base_url.rstrip('/')}/{key}"

    @abstractmethod
    def put_file(self, key: str, path: Path, content_type: str) -> None:
        """Upload the file at path under key. Raises StorageFailure."""

    @abstractmethod
    def presign(self, key: str, expires_in: int) -> str:
        """Time-limited read URL for key."""


class S3ObjectStore(ObjectStore):
    def __init__(self, bucket: str, base_url: str, region: str = "us-east-1", endpoint_url: str | None = None, client=None):
        super().__init__(base_url)
        self.bucket = bucket
        self.s3 = client or boto3.client("s3", region_name=region, endpoint_url=endpoint_url or None)

    def put_file(self, key: str, path: Path, content_type: str) -> None:
        try:
            self.s3.upload_file(str(path), self.bucket, key, ExtraArgs={"ContentType": content_type})
        except (BotoCoreError, ClientError, OSError) as e:
            logger.error("S3 upload failed for %s: %s", key, e)
            raise StorageFailure(f"Upload to object storage failed: {e}")
        logger.info("Uploaded %s to s3://%s", key, self.bucket)

    def presign(self, key: str, expires_in: int) -> str:
        try:
            return self.s3.generate_presigned_url(
                ClientMethod="get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageFailure(f"Could not presign {key}: {e}")


class LocalObjectStore(ObjectStore):
    def __init__(self, root: Path, base_url: str):
        super().__init__(base_url)
        self.root = Path(root)

    def _path_for(self, key: str) -> Path:
        root = self.root.resolve()
        full = (root / key).resolve()
        full.relative_to(root)  # raises ValueError if key escapes the root
        return full

    def put_file(self, key: str, path: Path, content_type: str) -> None:
        try:
            dest = self._path_for(key)
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(path, dest)
        except (OSError, ValueError) as e:
            logger.error("Local store write failed for %s: %s", key, e)
            raise StorageFailure(f"Write to media storage failed: {e}")
        logger.info("Stored %s (%s) under %s", key, content_type, self.root)

    def presign(self, key: str, expires_in: int) -> str:
        # Served as public static files; nothing to sign.
        return self.public_url(key)


def local_media_dir(settings: Settings) -> Path:
    if settings.local_media_dir:
        return Path(settings.local_media_dir)
    return Path(__file__).resolve().parent.parent.parent / "uploads" / "media"


def build_object_store(settings: Settings) -> ObjectStore:
    backend = settings.storage_backend.strip().lower()
    if backend == "s3":
        if not settings.s3_bucket:
            raise RuntimeError("S3_BUCKET is not configured")
        return S3ObjectStore(
            bucket=settings.s3_bucket,
            base_url=settings.media_base_url,
            region=settings.s3_region,
            endpoint_url=settings.s3_endpoint_url,
        )
    if backend == "local":
        return LocalObjectStore(local_media_dir(settings), settings.media_base_url)
    raise RuntimeError(f"Unknown STORAGE_BACKEND: {settings.storage_backend}")
