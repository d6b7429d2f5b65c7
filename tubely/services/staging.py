"""
Request-scoped local files (raw upload, remux output).
Everything tracked by StagedFiles is deleted when the block exits, however it exits.
"""
import logging
import tempfile
from pathlib import Path

from tubely.config import Settings

logger = logging.getLogger(__name__)


def staging_dir(settings: Settings) -> Path:
    if settings.staging_dir:
        path = Path(settings.staging_dir)
    else:
        path = Path(tempfile.gettempdir()) / "tubely-staging"
    path.mkdir(parents=True, exist_ok=True)
    return path


def remove_file(path: Path) -> bool:
    """Delete path if present. Returns True if a file was removed; errors are logged, not raised."""
    try:
        path.unlink()
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.error("Could not remove staged file %s: %s", path, e)
        return False


class StagedFiles:
    def __init__(self):
        self.paths: list[Path] = []

    def track(self, path: Path) -> Path:
        self.paths.append(path)
        return path

    def cleanup(self) -> None:
        for path in self.paths:
            if remove_file(path):
                logger.debug("Removed staged file %s", path)

    def __enter__(self) -> "StagedFiles":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.cleanup()
        return False
