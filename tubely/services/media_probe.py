"""
Read video geometry with ffprobe and bucket it into an orientation.
"""
import enum
import json
import logging
from dataclasses import dataclass
from pathlib import Path

from tubely.errors import ProbeDataError, ProbeProcessError
from tubely.services.process_runner import ProcessRunner, ProcessTimeoutError

logger = logging.getLogger(__name__)


class Orientation(str, enum.Enum):
    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"
    OTHER = "other"


@dataclass(frozen=True)
class Geometry:
    width: int
    height: int


def classify(width: int, height: int) -> Orientation:
    """
    Coarse 16:9 / 9:16 bucketing on floored quotients, so near-16:9 sizes
    such as 1930x1080 still land in landscape.
    """
    if width // 16 == height // 9:
        return Orientation.LANDSCAPE
    if width // 9 == height // 16:
        return Orientation.PORTRAIT
    return Orientation.OTHER


def _dimension(stream: dict, name: str) -> int:
    value = stream.get(name)
    # bool is an int subclass; ffprobe never emits it for dimensions
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise ProbeDataError(f"Error extracting video dimensions, missing or invalid {name}")
    return value


def parse_geometry(stdout: bytes | str) -> Geometry:
    """Pull width/height of the first stream out of ffprobe's JSON output."""
    try:
        metadata = json.loads(stdout)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ProbeDataError("ffprobe output is not valid JSON")
    streams = metadata.get("streams") if isinstance(metadata, dict) else None
    if not isinstance(streams, list) or not streams or not isinstance(streams[0], dict):
        raise ProbeDataError("ffprobe reported no streams")
    first = streams[0]
    return Geometry(width=_dimension(first, "width"), height=_dimension(first, "height"))


async def probe_geometry(
    path: Path,
    runner: ProcessRunner,
    ffprobe_path: str = "ffprobe",
    timeout: float | None = None,
) -> Geometry:
    cmd = [
        ffprobe_path,
        "-v", "error",
        "-select_streams", "v:0",
        "-print_format", "json",
        "-show_streams",
        str(path),
    ]
    try:
        result = await runner(cmd, timeout)
    except FileNotFoundError:
        raise ProbeProcessError("ffprobe not found; install FFmpeg to enable video uploads")
    except ProcessTimeoutError as e:
        raise ProbeProcessError(str(e))

    if result.exit_code != 0:
        logger.error("ffprobe failed for %s: %s", path, result.stderr.decode(errors="replace").strip())
        raise ProbeProcessError(f"ffprobe exited with code {result.exit_code}")

    geometry = parse_geometry(result.stdout)
    logger.info("Probed %s: %dx%d", path, geometry.width, geometry.height)
    return geometry
