"""
Video record store. All operations are sync (used from sync endpoints or run_in_executor from async).
"""
import logging

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tubely.errors import RecordUpdateFailure
from tubely.models.video import Video

logger = logging.getLogger(__name__)


class VideoRepository:
    def get(self, db: Session, video_id: str) -> Video | None:
        return db.query(Video).filter(Video.id == video_id).first()

    def list_for_user(self, db: Session, user_id: str) -> list[Video]:
        return (
            db.query(Video)
            .filter(Video.user_id == user_id)
            .order_by(desc(Video.created_at))
            .all()
        )

    def create(self, db: Session, user_id: str, title: str, description: str | None = None) -> Video:
        video = Video(user_id=user_id, title=title, description=description)
        db.add(video)
        db.commit()
        db.refresh(video)
        return video

    def update(self, db: Session, video: Video) -> Video:
        """Commit pending changes on video. On failure the transaction is rolled back and nothing is persisted."""
        try:
            db.add(video)
            db.commit()
            db.refresh(video)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Video %s update failed: %s", video.id, e)
            raise RecordUpdateFailure("Could not update video record")
        return video

    def delete(self, db: Session, video: Video) -> None:
        db.delete(video)
        db.commit()
