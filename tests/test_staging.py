"""Tests for request-scoped local file cleanup."""

import asyncio
import logging
from pathlib import Path

import pytest

from tubely.config import Settings
from tubely.services.staging import StagedFiles, remove_file, staging_dir


class TestRemoveFile:
    def test_removes_existing(self, tmp_path):
        path = tmp_path / "a"
        path.write_bytes(b"x")
        assert remove_file(path) is True
        assert not path.exists()

    def test_twice_is_noop(self, tmp_path):
        path = tmp_path / "a"
        path.write_bytes(b"x")
        remove_file(path)
        assert remove_file(path) is False

    def test_never_existed(self, tmp_path):
        assert remove_file(tmp_path / "ghost") is False

    def test_os_error_is_logged_not_raised(self, tmp_path, caplog):
        directory = tmp_path / "dir"
        directory.mkdir()
        with caplog.at_level(logging.ERROR, logger="tubely.services.staging"):
            assert remove_file(directory) is False
        assert "Could not remove" in caplog.text


class TestStagedFiles:
    def test_cleans_up_on_success(self, tmp_path):
        with StagedFiles() as staged:
            a = staged.track(tmp_path / "a")
            a.write_bytes(b"1")
        assert not a.exists()

    def test_cleans_up_on_error_and_keeps_original_exception(self, tmp_path):
        with pytest.raises(KeyError):
            with StagedFiles() as staged:
                a = staged.track(tmp_path / "a")
                a.write_bytes(b"1")
                staged.track(tmp_path / "never-created")
                raise KeyError("boom")
        assert not a.exists()

    def test_cleanup_error_does_not_mask_original(self, tmp_path):
        blocker = tmp_path / "dir"
        blocker.mkdir()
        with pytest.raises(ValueError, match="original"):
            with StagedFiles() as staged:
                staged.track(blocker)
                raise ValueError("original")

    def test_cleans_up_on_cancellation(self, tmp_path):
        path = tmp_path / "a"

        async def work():
            with StagedFiles() as staged:
                staged.track(path).write_bytes(b"1")
                await asyncio.sleep(10)

        async def main():
            task = asyncio.ensure_future(work())
            await asyncio.sleep(0.01)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(main())
        assert not path.exists()

    def test_double_cleanup_is_noop(self, tmp_path):
        staged = StagedFiles()
        staged.track(tmp_path / "a").write_bytes(b"1")
        staged.cleanup()
        staged.cleanup()


class TestStagingDir:
    def test_configured_dir_is_created(self, tmp_path):
        settings = Settings(_env_file=None, staging_dir=str(tmp_path / "s" / "t"))
        assert staging_dir(settings) == tmp_path / "s" / "t"
        assert (tmp_path / "s" / "t").is_dir()

    def test_default_under_tmp(self):
        path = staging_dir(Settings(_env_file=None, staging_dir=""))
        assert path.name == "tubely-staging"
        assert path.is_dir()
