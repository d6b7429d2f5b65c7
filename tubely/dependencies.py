"""Injectable collaborators for the upload routes; tests replace them via app.dependency_overrides."""
from functools import lru_cache

from tubely.config import get_settings
from tubely.errors import BadRequestError
from tubely.services.ownership import is_valid_video_id
from tubely.services.process_runner import ProcessRunner, run_process
from tubely.services.storage import ObjectStore, build_object_store


@lru_cache
def _default_object_store() -> ObjectStore:
    return build_object_store(get_settings())


def get_object_store() -> ObjectStore:
    return _default_object_store()


def get_process_runner() -> ProcessRunner:
    return run_process


def require_video_id(video_id: str) -> str:
    """Path id check. Declared ahead of get_current_user so a malformed id is a 400 even without a token."""
    if not is_valid_video_id(video_id):
        raise BadRequestError("Invalid or missing video ID")
    return video_id
