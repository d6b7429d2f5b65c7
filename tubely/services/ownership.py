"""Ownership gate: a caller may only mutate video records they own."""
import asyncio
import re

from sqlalchemy.orm import Session

from tubely.errors import BadRequestError, ForbiddenError
from tubely.models.video import Video
from tubely.repositories.video_repository import VideoRepository

UUID_RE = re.compile(r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$")


def is_valid_video_id(value: str | None) -> bool:
    return bool(value) and UUID_RE.match(value) is not None


def authorize(video: Video | None, user_id: str) -> Video:
    """A missing record is reported the same as someone else's: Forbidden."""
    if video is None or video.user_id != user_id:
        raise ForbiddenError("Provided user is not owner of video")
    return video


async def load_owned_video(
    db: Session,
    video_id: str | None,
    user_id: str,
    repository: VideoRepository | None = None,
) -> Video:
    if not is_valid_video_id(video_id):
        raise BadRequestError("Invalid or missing video ID")
    repo = repository or VideoRepository()
    loop = asyncio.get_event_loop()
    video = await loop.run_in_executor(None, lambda: repo.get(db, video_id))
    return authorize(video, user_id)
