"""
Bind long-running upload work to the HTTP request that started it.
Starlette does not cancel a handler when the client goes away, so poll for the
disconnect and cancel the work task ourselves (which kills ffprobe/ffmpeg and
runs the local-file cleanup).
"""
import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from starlette.requests import Request

from tubely.errors import RequestCancelledError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _cancel_and_wait(task: asyncio.Task) -> None:
    task.cancel()
    await asyncio.gather(task, return_exceptions=True)


async def run_while_connected(request: Request, work: Awaitable[T], poll_interval: float = 0.5) -> T:
    task = asyncio.ensure_future(work)
    try:
        while not task.done():
            await asyncio.wait({task}, timeout=poll_interval)
            if not task.done() and await request.is_disconnected():
                logger.warning("Client disconnected during %s; cancelling", request.url.path)
                await _cancel_and_wait(task)
                raise RequestCancelledError("Client disconnected before the upload finished")
    except asyncio.CancelledError:
        await _cancel_and_wait(task)
        raise
    return task.result()
