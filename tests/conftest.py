"""
Shared fixtures.

Every test gets its own SQLite database, staging/asset/media folders under
tmp_path, a local object store, and a fake process runner standing in for
ffprobe/ffmpeg so no real binaries are spawned.
"""

from __future__ import annotations

import io
import json
import os
import tempfile
from pathlib import Path

# Module-level settings (auth, static mounts) are read at import time.
_IMPORT_ROOT = Path(tempfile.mkdtemp(prefix="tubely-tests-"))
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_IMPORT_ROOT / 'unused.db'}")
os.environ.setdefault("STORAGE_BACKEND", "local")
os.environ.setdefault("ASSETS_ROOT", str(_IMPORT_ROOT / "assets"))
os.environ.setdefault("LOCAL_MEDIA_DIR", str(_IMPORT_ROOT / "media"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from tubely.auth import create_access_token
from tubely.config import Settings, get_settings
from tubely.database import Base, get_db
from tubely.dependencies import get_object_store, get_process_runner
from tubely.models.user import User
from tubely.models.video import Video
from tubely.services.process_runner import ProcessResult
from tubely.services.storage import LocalObjectStore
from tubely.services.uploads import UploadArtifact


class FakeRunner:
    """Stands in for run_process. ffprobe reports the configured geometry; ffmpeg copies input to output."""

    def __init__(
        self,
        width: int = 1920,
        height: int = 1080,
        probe_exit: int = 0,
        probe_stdout: bytes | None = None,
        remux_exit: int = 0,
        write_output: bool = True,
    ):
        self.width = width
        self.height = height
        self.probe_exit = probe_exit
        self.probe_stdout = probe_stdout
        self.remux_exit = remux_exit
        self.write_output = write_output
        self.calls: list[list[str]] = []

    async def __call__(self, argv, timeout=None):
        argv = list(argv)
        self.calls.append(argv)
        if argv[0] == "ffprobe":
            stdout = self.probe_stdout
            if stdout is None:
                stdout = json.dumps({"streams": [{"width": self.width, "height": self.height}]}).encode()
            stderr = b"" if self.probe_exit == 0 else b"Invalid data found when processing input"
            return ProcessResult(self.probe_exit, stdout, stderr)
        if argv[0] == "ffmpeg":
            source, output = Path(argv[argv.index("-i") + 1]), Path(argv[-1])
            if self.write_output:
                output.write_bytes(source.read_bytes())
            return ProcessResult(self.remux_exit, b"", b"")
        raise AssertionError(f"unexpected command {argv}")

    @property
    def programs(self) -> list[str]:
        return [call[0] for call in self.calls]


def make_artifact(data: bytes = b"\x00\x00\x00\x18ftypmp42fake-video", content_type: str = "video/mp4", filename: str = "clip.mp4") -> UploadArtifact:
    return UploadArtifact(filename=filename, content_type=content_type, size=len(data), file=io.BytesIO(data))


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        staging_dir=str(tmp_path / "staging"),
        assets_root=str(tmp_path / "assets"),
        local_media_dir=str(tmp_path / "media"),
        media_base_url="https://cdn.example.com/",
        public_base_url="http://testserver",
        max_video_upload_bytes=64 * 1024,  # keep oversize uploads cheap
        max_thumbnail_upload_bytes=16 * 1024,
    )


@pytest.fixture
def staging(settings) -> Path:
    """Staging folder; tests assert it is empty after every run."""
    path = Path(settings.staging_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path


@pytest.fixture
def engine(tmp_path: Path):
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def owner(db) -> User:
    user = User(email="owner@example.com")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def stranger(db) -> User:
    user = User(email="stranger@example.com")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def video(db, owner) -> Video:
    video = Video(user_id=owner.id, title="Boots on the ground", video_url="https://cdn.example.com/old.mp4")
    db.add(video)
    db.commit()
    db.refresh(video)
    return video


@pytest.fixture
def store(settings) -> LocalObjectStore:
    return LocalObjectStore(Path(settings.local_media_dir), settings.media_base_url)


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def client(db, settings, store, runner):
    from tubely.main import app

    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_object_store] = lambda: store
    app.dependency_overrides[get_process_runner] = lambda: runner
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}


@pytest.fixture
def owner_headers(owner) -> dict:
    return auth_headers(owner)


@pytest.fixture
def stranger_headers(stranger) -> dict:
    return auth_headers(stranger)
