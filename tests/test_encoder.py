"""Tests for the Pillow GIF encoder bridge."""

import asyncio
import io
import threading

import pytest
from PIL import Image, ImageSequence

from moonphases.encoder import EncodingError, GifEncoder


def _frames(n, size=(80, 40)):
    return [Image.new("RGB", size, (i * 40 % 256, 100, 200)) for i in range(n)]


def test_available():
    assert GifEncoder().available()


def test_encodes_looping_gif():
    async def scenario():
        encoder = GifEncoder(80, 40)
        try:
            acks = [await encoder.append(f, 100) for f in _frames(4)]
            data = await encoder.finalize()
        finally:
            encoder.close()
        return acks, data

    acks, data = asyncio.run(scenario())
    assert acks == [0, 1, 2, 3]
    assert data[:6] in (b"GIF87a", b"GIF89a")

    with Image.open(io.BytesIO(data)) as gif:
        assert gif.size == (80, 40)
        assert gif.n_frames == 4
        assert gif.info.get("loop") == 0
        durations = [frame.info["duration"] for frame in ImageSequence.Iterator(gif)]
    assert durations == [100] * 4


def test_wrong_frame_size_rejected():
    async def scenario():
        encoder = GifEncoder(80, 40)
        try:
            await encoder.append(Image.new("RGB", (40, 40)), 100)
        finally:
            encoder.close()

    with pytest.raises(EncodingError):
        asyncio.run(scenario())


def test_finalize_without_frames_fails():
    async def scenario():
        encoder = GifEncoder(80, 40)
        try:
            await encoder.finalize()
        finally:
            encoder.close()

    with pytest.raises(EncodingError):
        asyncio.run(scenario())


def test_finalize_is_one_shot():
    async def scenario():
        encoder = GifEncoder(80, 40)
        try:
            await encoder.append(_frames(1)[0], 100)
            await encoder.finalize()
            with pytest.raises(EncodingError):
                await encoder.finalize()
            with pytest.raises(EncodingError):
                await encoder.append(_frames(1)[0], 100)
        finally:
            encoder.close()

    asyncio.run(scenario())


def test_close_without_finalize_joins_workers():
    async def scenario():
        encoder = GifEncoder(80, 40)
        for frame in _frames(6):
            await encoder.append(frame, 100)
        encoder.close()
        return encoder

    encoder = asyncio.run(scenario())
    workers = [t for t in threading.enumerate() if t.name.startswith("gif-worker")]
    assert workers == []
    with pytest.raises(EncodingError):
        asyncio.run(encoder.finalize())
