"""
Video ingest pipeline for one upload request:

  validate -> stage -> probe -> remux (fast start) -> upload -> record -> clean up

Staged and processed files are deleted on every exit path. The record's video URL is
only committed after the upload succeeded, so a failed run never leaves a partial URL.
"""
import asyncio
import functools
import logging
import secrets
import shutil
from pathlib import Path

from sqlalchemy.orm import Session

from tubely.config import Settings, get_settings
from tubely.errors import IngestError, StorageFailure
from tubely.models.video import Video
from tubely.repositories.video_repository import VideoRepository
from tubely.services.faststart import remux_faststart, remux_output_path
from tubely.services.media_probe import classify, probe_geometry
from tubely.services.process_runner import ProcessRunner
from tubely.services.staging import StagedFiles, staging_dir
from tubely.services.storage import ObjectStore, build_key
from tubely.services.uploads import CHUNK_SIZE, UploadArtifact, validate_artifact

logger = logging.getLogger(__name__)

VIDEO_CONTENT_TYPES = {"video/mp4"}
VIDEO_EXTENSION = "mp4"


def write_upload(artifact: UploadArtifact, dest: Path) -> None:
    artifact.file.seek(0)
    with dest.open("wb") as f:
        shutil.copyfileobj(artifact.file, f, CHUNK_SIZE)


class VideoIngestService:
    def __init__(
        self,
        db: Session,
        store: ObjectStore,
        runner: ProcessRunner,
        settings: Settings | None = None,
        repository: VideoRepository | None = None,
    ):
        self._db = db
        self._store = store
        self._runner = runner
        self._settings = settings or get_settings()
        self._repo = repository or VideoRepository()

    async def _in_executor(self, fn, *args):
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, functools.partial(fn, *args))

    async def ingest(self, video: Video, artifact: UploadArtifact) -> Video:
        """
        Run the pipeline for a video the caller already owns (see ownership.load_owned_video).
        Raises an IngestError subclass; the stored record is unchanged on any failure.
        """
        settings = self._settings
        validate_artifact(artifact, VIDEO_CONTENT_TYPES, settings.max_video_upload_bytes)

        try:
            with StagedFiles() as staged:
                try:
                    source = staged.track(staging_dir(settings) / f"{secrets.token_hex(32)}.{VIDEO_EXTENSION}")
                    await self._in_executor(write_upload, artifact, source)
                except OSError as e:
                    raise StorageFailure(f"Could not stage upload: {e}") from e
                logger.info("Staged upload for video %s (%d bytes)", video.id, artifact.size)

                geometry = await probe_geometry(
                    source, self._runner, settings.ffprobe_path, settings.probe_timeout_seconds
                )
                orientation = classify(geometry.width, geometry.height)

                processed = staged.track(remux_output_path(source))
                await remux_faststart(
                    source,
                    self._runner,
                    settings.ffmpeg_path,
                    settings.remux_timeout_seconds,
                    output_path=processed,
                )

                key = build_key(orientation.value, VIDEO_EXTENSION)
                await self._in_executor(self._store.put_file, key, processed, artifact.content_type)

                video.video_key = key
                video.video_url = self._store.public_url(key)
                await self._in_executor(self._repo.update, self._db, video)
        except IngestError as e:
            logger.warning("Video ingest failed for %s (%s): %s", video.id, e.kind, e.message)
            raise

        logger.info("Video %s ingested as %s", video.id, video.video_key)
        return video
