"""
Move the MP4 index (moov atom) to the front of the file so playback can start
before the download finishes. Streams are copied, never re-encoded.
"""
import logging
from pathlib import Path

from tubely.errors import RemuxFailure
from tubely.services.process_runner import ProcessRunner, ProcessTimeoutError

logger = logging.getLogger(__name__)

PROCESSED_SUFFIX = ".processed"


def remux_output_path(input_path: Path) -> Path:
    return input_path.with_name(input_path.name + PROCESSED_SUFFIX)


async def remux_faststart(
    input_path: Path,
    runner: ProcessRunner,
    ffmpeg_path: str = "ffmpeg",
    timeout: float | None = None,
    output_path: Path | None = None,
) -> Path:
    """Returns the output path. Raises RemuxFailure unless ffmpeg exits 0 and leaves a non-empty file."""
    output_path = output_path or remux_output_path(input_path)
    cmd = [
        ffmpeg_path,
        "-i", str(input_path),
        "-movflags", "faststart",
        "-map_metadata", "0",
        "-codec", "copy",
        "-f", "mp4",
        str(output_path),
    ]
    try:
        result = await runner(cmd, timeout)
    except FileNotFoundError:
        raise RemuxFailure("ffmpeg not found; install FFmpeg to enable video uploads")
    except ProcessTimeoutError as e:
        raise RemuxFailure(str(e))

    if result.exit_code != 0:
        logger.error("Fast-start remux failed for %s: %s", input_path, result.stderr.decode(errors="replace").strip())
        raise RemuxFailure(f"ffmpeg exited with code {result.exit_code}")
    if not output_path.is_file() or output_path.stat().st_size == 0:
        raise RemuxFailure("ffmpeg produced no output file")

    logger.info("Fast-start remux completed for %s", input_path)
    return output_path
