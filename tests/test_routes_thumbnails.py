"""Tests for POST /api/thumbnails/{id}."""

import errno
from pathlib import Path

from sqlalchemy.exc import OperationalError

import tubely.services.thumbnail_upload as thumbnail_upload

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def _post_thumbnail(client, video_id, headers, data=PNG, content_type="image/png"):
    return client.post(
        f"/api/thumbnails/{video_id}",
        files={"thumbnail": ("thumb", data, content_type)},
        headers=headers,
    )


class TestUploadThumbnail:
    def test_png(self, client, db, video, owner_headers, settings):
        resp = _post_thumbnail(client, video.id, owner_headers)
        assert resp.status_code == 200
        url = resp.json()["thumbnail_url"]
        assert url.startswith("http://testserver/assets/")
        assert url.endswith(".png")
        saved = Path(settings.assets_root) / url.rsplit("/", 1)[1]
        assert saved.read_bytes() == PNG
        db.refresh(video)
        assert video.thumbnail_url == url

    def test_jpeg(self, client, video, owner_headers):
        resp = _post_thumbnail(client, video.id, owner_headers, data=b"\xff\xd8\xff", content_type="image/jpeg")
        assert resp.status_code == 200
        assert resp.json()["thumbnail_url"].endswith(".jpeg")

    def test_gif_rejected(self, client, video, owner_headers, settings):
        resp = _post_thumbnail(client, video.id, owner_headers, content_type="image/gif")
        assert resp.status_code == 400
        assert not Path(settings.assets_root).exists()

    def test_oversized(self, client, video, owner_headers, settings):
        resp = _post_thumbnail(client, video.id, owner_headers, data=b"x" * (settings.max_thumbnail_upload_bytes + 1))
        assert resp.status_code == 400

    def test_stranger_writes_nothing(self, client, db, video, stranger_headers, settings):
        resp = _post_thumbnail(client, video.id, stranger_headers)
        assert resp.status_code == 403
        assert not Path(settings.assets_root).exists()
        db.refresh(video)
        assert video.thumbnail_url is None

    def test_record_failure_removes_asset(self, client, db, video, owner_headers, settings, monkeypatch):
        def broken_commit():
            raise OperationalError("UPDATE videos", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db, "commit", broken_commit)
        resp = _post_thumbnail(client, video.id, owner_headers)
        assert resp.status_code == 500
        assert resp.json()["kind"] == "record_update_error"
        assert list(Path(settings.assets_root).iterdir()) == []

    def test_unauthenticated(self, client, video):
        assert _post_thumbnail(client, video.id, {}).status_code == 401

    def test_malformed_id_is_checked_before_auth(self, client):
        resp = _post_thumbnail(client, "not-a-uuid", {})
        assert resp.status_code == 400
        assert resp.json()["kind"] == "bad_request"

    def test_partial_write_is_removed(self, client, db, video, owner_headers, settings, monkeypatch):
        def write_fails(artifact, dest):
            dest.write_bytes(PNG[:4])
            raise OSError(errno.ENOSPC, "No space left on device")

        monkeypatch.setattr(thumbnail_upload, "write_upload", write_fails)
        resp = _post_thumbnail(client, video.id, owner_headers)
        assert resp.status_code == 502
        assert resp.json()["kind"] == "storage_error"
        assert list(Path(settings.assets_root).iterdir()) == []
        db.refresh(video)
        assert video.thumbnail_url is None

    def test_unusable_assets_folder(self, client, db, video, owner_headers, settings, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_bytes(b"")
        settings.assets_root = str(blocker / "assets")
        resp = _post_thumbnail(client, video.id, owner_headers)
        assert resp.status_code == 502
        assert resp.json()["kind"] == "storage_error"
        db.refresh(video)
        assert video.thumbnail_url is None
