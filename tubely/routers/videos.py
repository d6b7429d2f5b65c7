"""
Video records and video upload.
Upload runs the ingest pipeline (probe, fast-start remux, store) and is bound to the
request: if the client disconnects, child processes are killed and local files removed.
"""
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from tubely.auth import get_current_user
from tubely.config import Settings, get_settings
from tubely.database import get_db
from tubely.dependencies import get_object_store, get_process_runner, require_video_id
from tubely.models.user import User
from tubely.repositories.video_repository import VideoRepository
from tubely.schemas.video import SignedUrlResponse, VideoCreate, VideoResponse
from tubely.services.ownership import load_owned_video
from tubely.services.process_runner import ProcessRunner
from tubely.services.request_scope import run_while_connected
from tubely.services.storage import ObjectStore
from tubely.services.uploads import artifact_from_form, check_declared_length
from tubely.services.video_ingest import VideoIngestService

router = APIRouter(prefix="/api/videos", tags=["videos"])
repository = VideoRepository()


@router.post("", response_model=VideoResponse, status_code=status.HTTP_201_CREATED)
def create_video(
    body: VideoCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create an empty video record; the file is attached later via POST /api/videos/{id}."""
    title = body.title.strip()
    if not title:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title is required")
    return repository.create(db, user.id, title, (body.description or "").strip() or None)


@router.get("", response_model=list[VideoResponse])
def list_videos(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return repository.list_for_user(db, user.id)


@router.get("/{video_id}", response_model=VideoResponse)
async def get_video(
    video_id: str = Depends(require_video_id),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return await load_owned_video(db, video_id, user.id, repository)


@router.delete("/{video_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_video(
    video_id: str = Depends(require_video_id),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Deletes the record only; stored objects are left in place."""
    video = await load_owned_video(db, video_id, user.id, repository)
    repository.delete(db, video)


@router.get("/{video_id}/signed-url", response_model=SignedUrlResponse)
async def get_signed_url(
    video_id: str = Depends(require_video_id),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
    settings: Settings = Depends(get_settings),
):
    """Time-limited read URL for the uploaded video (S3 presign; plain URL for local storage)."""
    video = await load_owned_video(db, video_id, user.id, repository)
    if not video.video_key:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Video has not been uploaded yet.")
    expires_in = settings.presign_expire_seconds
    return SignedUrlResponse(url=store.presign(video.video_key, expires_in), expires_in=expires_in)


@router.post("/{video_id}", response_model=VideoResponse)
async def upload_video(
    request: Request,
    video_id: str = Depends(require_video_id),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
    runner: ProcessRunner = Depends(get_process_runner),
    settings: Settings = Depends(get_settings),
):
    """Multipart form with a single `video` field (video/mp4, up to 1 GiB)."""
    video = await load_owned_video(db, video_id, user.id, repository)
    check_declared_length(request.headers.get("content-length"), settings.max_video_upload_bytes)

    form = await request.form()
    try:
        artifact = artifact_from_form(form, "video")
        service = VideoIngestService(db, store, runner, settings, repository)
        return await run_while_connected(request, service.ingest(video, artifact))
    finally:
        await form.close()
