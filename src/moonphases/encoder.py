"""Animated GIF encoder bridge on a Pillow worker pool."""

from __future__ import annotations

import asyncio
import io
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Protocol

from PIL import Image

logger = logging.getLogger(__name__)


class EncoderUnavailableError(Exception):
    """The encoding engine cannot be reached."""


class EncodingError(Exception):
    """The encoding engine failed or was driven out of order."""


class EncoderBridge(Protocol):
    """Async task interface to an image-sequence encoding engine.

    ``append`` is called once per frame in capture order and returns the
    frame's acknowledgment index; ``finalize`` is called exactly once after
    the last append and returns the encoded binary.
    """

    def available(self) -> bool: ...

    async def append(self, frame: Image.Image, delay_ms: int) -> int: ...

    async def finalize(self) -> bytes: ...

    def close(self) -> None: ...


def _quantize(frame: Image.Image, colors: int) -> Image.Image:
    return frame.convert("RGB").quantize(colors=colors, method=Image.Quantize.MEDIANCUT)


def _assemble(frames: list[Image.Image], durations: list[int], loop: int) -> bytes:
    buffer = io.BytesIO()
    frames[0].save(
        buffer,
        format="GIF",
        save_all=True,
        append_images=frames[1:],
        duration=durations,
        loop=loop,
        disposal=1,
        optimize=False,
    )
    return buffer.getvalue()


class GifEncoder:
    """Animated GIF engine with a small worker pool.

    Frames are palette-quantized on the pool as soon as they are appended;
    ``finalize`` waits for every worker, in append order, then writes the
    GIF on the pool too.

    Args:
        width: Expected frame width in px.
        height: Expected frame height in px.
        workers: Worker thread count.
        quality: 1 (best) to 30 (fastest). Lower keeps more palette colors.
        loop: GIF loop count (0 = forever).
    """

    def __init__(
        self,
        width: int = 800,
        height: int = 400,
        workers: int = 2,
        quality: int = 10,
        loop: int = 0,
    ) -> None:
        self.width = width
        self.height = height
        self.loop = loop
        self._colors = max(16, 256 - (quality - 1) * 8)
        self._workers = workers
        self._executor: ThreadPoolExecutor | None = None
        self._pending: list[Future[Image.Image]] = []
        self._durations: list[int] = []
        self._finalized = False

    def available(self) -> bool:
        """True when Pillow can write GIFs."""
        Image.init()
        return "GIF" in Image.SAVE

    def _pool(self) -> ThreadPoolExecutor:
        if self._executor is None:
            if not self.available():
                raise EncoderUnavailableError("Pillow has no GIF writer")
            self._executor = ThreadPoolExecutor(
                max_workers=self._workers, thread_name_prefix="gif-worker"
            )
        return self._executor

    async def append(self, frame: Image.Image, delay_ms: int) -> int:
        if self._finalized:
            raise EncodingError("append after finalize")
        if frame.size != (self.width, self.height):
            raise EncodingError(
                f"frame is {frame.size[0]}x{frame.size[1]},"
                f" expected {self.width}x{self.height}"
            )
        future = self._pool().submit(_quantize, frame.copy(), self._colors)
        self._pending.append(future)
        self._durations.append(delay_ms)
        return len(self._pending) - 1

    async def finalize(self) -> bytes:
        if self._finalized:
            raise EncodingError("finalize called twice")
        self._finalized = True
        if not self._pending:
            raise EncodingError("no frames to encode")
        try:
            frames = [await asyncio.wrap_future(f) for f in self._pending]
            data = await asyncio.wrap_future(
                self._pool().submit(_assemble, frames, self._durations, self.loop)
            )
        except (OSError, ValueError) as e:
            raise EncodingError(f"GIF encoding failed: {e}") from e
        logger.info("Encoded %d frames, %d bytes", len(frames), len(data))
        return data

    def close(self) -> None:
        """Shut the worker pool down, dropping queued work and joining the workers."""
        for future in self._pending:
            future.cancel()
        self._pending = []
        if self._executor is not None:
            self._executor.shutdown(wait=True, cancel_futures=True)
            self._executor = None
