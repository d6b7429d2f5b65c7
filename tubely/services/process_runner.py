"""
Child-process capability for ffprobe/ffmpeg.
Services take the runner as a parameter so tests can stub it without spawning binaries.
"""
import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    exit_code: int
    stdout: bytes
    stderr: bytes


class ProcessTimeoutError(Exception):
    pass


ProcessRunner = Callable[[Sequence[str], float | None], Awaitable[ProcessResult]]


def _kill(process: asyncio.subprocess.Process) -> None:
    try:
        process.kill()
    except ProcessLookupError:
        pass


async def run_process(argv: Sequence[str], timeout: float | None = None) -> ProcessResult:
    """
    Run argv to completion and capture its output.
    The child is killed if the timeout expires or the calling task is cancelled.
    Raises FileNotFoundError if the executable does not exist.
    """
    process = await asyncio.create_subprocess_exec(
        *argv, stdout=asyncio.subprocess.PIPE, stderr=asyncio.subprocess.PIPE
    )
    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        _kill(process)
        await process.wait()
        raise ProcessTimeoutError(f"{argv[0]} timed out after {timeout}s")
    except asyncio.CancelledError:
        logger.warning("Cancelled; killing %s (pid %s)", argv[0], process.pid)
        _kill(process)
        await process.wait()
        raise
    return ProcessResult(exit_code=process.returncode, stdout=stdout, stderr=stderr)
