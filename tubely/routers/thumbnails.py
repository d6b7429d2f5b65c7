from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from tubely.auth import get_current_user
from tubely.config import Settings, get_settings
from tubely.database import get_db
from tubely.dependencies import require_video_id
from tubely.models.user import User
from tubely.repositories.video_repository import VideoRepository
from tubely.schemas.video import VideoResponse
from tubely.services.ownership import load_owned_video
from tubely.services.thumbnail_upload import save_thumbnail
from tubely.services.uploads import artifact_from_form, check_declared_length

router = APIRouter(prefix="/api/thumbnails", tags=["thumbnails"])
repository = VideoRepository()


@router.post("/{video_id}", response_model=VideoResponse)
async def upload_thumbnail(
    request: Request,
    video_id: str = Depends(require_video_id),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Multipart form with a single `thumbnail` field (image/jpeg or image/png, up to 10 MiB)."""
    video = await load_owned_video(db, video_id, user.id, repository)
    check_declared_length(request.headers.get("content-length"), settings.max_thumbnail_upload_bytes)

    form = await request.form()
    try:
        artifact = artifact_from_form(form, "thumbnail")
        return await save_thumbnail(db, video, artifact, settings, repository)
    finally:
        await form.close()
