"""Thumbnail upload: validate, write to the public assets folder, record the URL. No processing."""
import asyncio
import logging
import secrets
from pathlib import Path

from sqlalchemy.orm import Session

from tubely.config import Settings
from tubely.errors import IngestError, StorageFailure
from tubely.models.video import Video
from tubely.repositories.video_repository import VideoRepository
from tubely.services.staging import remove_file
from tubely.services.uploads import UploadArtifact, validate_artifact
from tubely.services.video_ingest import write_upload

logger = logging.getLogger(__name__)

THUMBNAIL_CONTENT_TYPES = {"image/jpeg", "image/png"}


def assets_dir(settings: Settings) -> Path:
    if settings.assets_root:
        return Path(settings.assets_root)
    return Path(__file__).resolve().parent.parent.parent / "assets"


async def save_thumbnail(
    db: Session,
    video: Video,
    artifact: UploadArtifact,
    settings: Settings,
    repository: VideoRepository | None = None,
) -> Video:
    """Caller must have passed the ownership gate for video already."""
    validate_artifact(artifact, THUMBNAIL_CONTENT_TYPES, settings.max_thumbnail_upload_bytes)
    repo = repository or VideoRepository()

    extension = artifact.content_type.split("/")[1]
    filename = f"{secrets.token_urlsafe(32)}.{extension}"
    path = assets_dir(settings) / filename

    loop = asyncio.get_event_loop()
    try:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            await loop.run_in_executor(None, write_upload, artifact, path)
        except OSError as e:
            raise StorageFailure(f"Could not write thumbnail: {e}") from e
        video.thumbnail_url = f"{settings.public_base_url.rstrip('/')}/assets/{filename}"
        await loop.run_in_executor(None, repo.update, db, video)
    except IngestError as e:
        logger.warning("Thumbnail upload failed for %s (%s): %s", video.id, e.kind, e.message)
        remove_file(path)
        raise
    except asyncio.CancelledError:
        remove_file(path)
        raise
    logger.info("Thumbnail for video %s saved as %s", video.id, filename)
    return video
