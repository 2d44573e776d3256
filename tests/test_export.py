"""Tests for the frame-sequenced GIF export."""

import asyncio
import io

import pytest
from PIL import Image

from moonphases.encoder import EncoderUnavailableError, EncodingError, GifEncoder
from moonphases.export import FrameSequencer
from moonphases.renderers.static import ViewRenderer
from moonphases.state import AngleState, ExportInProgressError

ORIGINAL_ANGLE = 123.456789


class FakeViews:
    """Renderer double: acknowledges every angle and records captures."""

    def __init__(self, state, fail_at=None, size=(400, 400)):
        self.state = state
        self.fail_at = fail_at
        self.size = size
        self.captured = []
        self.sets = []
        state.subscribe(self._on_angle)

    def _on_angle(self, angle):
        self.sets.append(angle)
        asyncio.get_running_loop().call_soon(self.state.mark_drawn, angle)

    async def render(self):
        if len(self.captured) == self.fail_at:
            raise RuntimeError("render failed")
        self.captured.append(self.state.get())
        return Image.new("RGB", self.size, "navy"), Image.new("RGB", self.size, "gray")


class RecordingEncoder:
    """Encoder double recording append/finalize calls.

    With ``auto_complete`` off, ``finalize`` waits on ``completion`` until the
    test resolves it.
    """

    def __init__(self, state, available=True, auto_complete=True, fail_finalize=False):
        self.state = state
        self._available = available
        self.auto_complete = auto_complete
        self.fail_finalize = fail_finalize
        self.appends = []
        self.finalize_calls = 0
        self.angle_at_finalize = None
        self.completion = None
        self.closed = False

    def available(self):
        return self._available

    async def append(self, frame, delay_ms):
        self.appends.append((self.state.get(), frame.size, delay_ms))
        return len(self.appends) - 1

    async def finalize(self):
        self.finalize_calls += 1
        self.angle_at_finalize = self.state.get()
        if self.fail_finalize:
            raise EncodingError("engine crashed")
        if self.auto_complete:
            return b"GIF89a-fake"
        self.completion = asyncio.get_running_loop().create_future()
        return await self.completion

    def close(self):
        self.closed = True


def _setup(**encoder_kwargs):
    state = AngleState(ORIGINAL_ANGLE)
    views = FakeViews(state, fail_at=encoder_kwargs.pop("fail_at", None))
    encoder = RecordingEncoder(state, **encoder_kwargs)
    delivered = []
    sequencer = FrameSequencer(
        state, views, encoder, deliver=lambda data, name: delivered.append((data, name))
    )
    return state, views, encoder, delivered, sequencer


class TestFrameSequencer:
    def test_appends_every_angle_in_order(self):
        state, views, encoder, delivered, sequencer = _setup()
        data = asyncio.run(sequencer.export(total_frames=8))

        angles = [a for a, _, _ in encoder.appends]
        assert angles == [i * 45.0 for i in range(8)]
        assert all(b > a for a, b in zip(angles, angles[1:]))
        assert views.captured == angles
        assert encoder.finalize_calls == 1
        assert data == b"GIF89a-fake"
        assert delivered == [(b"GIF89a-fake", "moon-phases.gif")]
        assert state.get() == ORIGINAL_ANGLE
        assert not state.export_in_progress
        assert encoder.closed

    def test_frames_carry_size_and_delay(self):
        _, _, encoder, _, sequencer = _setup()
        asyncio.run(sequencer.export(total_frames=3, frame_delay_ms=70))
        assert [(size, delay) for _, size, delay in encoder.appends] == [((800, 400), 70)] * 3

    def test_angle_restored_before_finalize(self):
        _, _, encoder, _, sequencer = _setup()
        asyncio.run(sequencer.export(total_frames=2))
        assert encoder.angle_at_finalize == ORIGINAL_ANGLE

    def test_result_resolves_only_after_engine_completes(self):
        state, views, encoder, delivered, sequencer = _setup(auto_complete=False)

        async def scenario():
            task = asyncio.create_task(sequencer.export(total_frames=4))
            while encoder.completion is None:
                await asyncio.sleep(0)
            for _ in range(5):
                await asyncio.sleep(0)
            assert not task.done()
            assert delivered == []
            encoder.completion.set_result(b"done")
            return await task

        result = asyncio.run(scenario())
        assert result == b"done"
        assert views.captured == [0.0, 90.0, 180.0, 270.0]
        assert len(encoder.appends) == 4
        assert encoder.finalize_calls == 1
        assert delivered == [(b"done", "moon-phases.gif")]
        assert state.get() == ORIGINAL_ANGLE

    def test_unavailable_encoder_fails_without_side_effects(self):
        state, views, encoder, delivered, sequencer = _setup(available=False)
        with pytest.raises(EncoderUnavailableError):
            asyncio.run(sequencer.export(total_frames=4))
        assert encoder.appends == []
        assert encoder.finalize_calls == 0
        assert views.sets == []
        assert state.get() == ORIGINAL_ANGLE
        assert not state.export_in_progress
        assert delivered == []

    def test_render_failure_aborts_and_restores(self):
        state, views, encoder, delivered, sequencer = _setup(fail_at=2)
        with pytest.raises(RuntimeError, match="render failed"):
            asyncio.run(sequencer.export(total_frames=6))
        assert len(encoder.appends) == 2
        assert encoder.finalize_calls == 0
        assert delivered == []
        assert state.get() == ORIGINAL_ANGLE
        assert not state.export_in_progress
        assert encoder.closed

    def test_encoding_failure_still_restores_and_releases(self):
        state, _, encoder, delivered, sequencer = _setup(fail_finalize=True)
        with pytest.raises(EncodingError):
            asyncio.run(sequencer.export(total_frames=4))
        assert len(encoder.appends) == 4
        assert delivered == []
        assert state.get() == ORIGINAL_ANGLE
        assert not state.export_in_progress
        assert encoder.closed

    def test_failing_listener_on_restore_keeps_error_and_releases(self):
        state, _, encoder, delivered, sequencer = _setup(fail_at=2)

        def broken_listener(angle):
            if angle == ORIGINAL_ANGLE:
                raise OSError("listener broke")

        state.subscribe(broken_listener)
        with pytest.raises(RuntimeError, match="render failed"):
            asyncio.run(sequencer.export(total_frames=6))
        assert state.get() == ORIGINAL_ANGLE
        assert not state.export_in_progress
        assert encoder.closed
        assert delivered == []

    def test_failing_listener_after_sweep_still_releases(self):
        state, _, encoder, delivered, sequencer = _setup()

        def broken_listener(angle):
            if angle == ORIGINAL_ANGLE:
                raise OSError("listener broke")

        state.subscribe(broken_listener)
        with pytest.raises(OSError, match="listener broke"):
            asyncio.run(sequencer.export(total_frames=4))
        assert encoder.finalize_calls == 0
        assert not state.export_in_progress
        assert encoder.closed
        assert delivered == []

    def test_overlapping_export_rejected(self):
        state, _, encoder, _, sequencer = _setup()
        state.begin_export()
        with pytest.raises(ExportInProgressError):
            asyncio.run(sequencer.export(total_frames=2))
        assert encoder.appends == []
        assert state.get() == ORIGINAL_ANGLE

    def test_small_views_are_scaled_to_output_size(self):
        state = AngleState(0.0)
        views = FakeViews(state, size=(200, 200))
        encoder = RecordingEncoder(state)
        asyncio.run(FrameSequencer(state, views, encoder).export(total_frames=2))
        assert [size for _, size, _ in encoder.appends] == [(800, 400)] * 2

    @pytest.mark.parametrize("frames", [0, -3])
    def test_non_positive_frame_count_rejected(self, frames):
        _, _, encoder, _, sequencer = _setup()
        with pytest.raises(ValueError):
            asyncio.run(sequencer.export(total_frames=frames))
        assert encoder.appends == []

    def test_negative_frame_delay_rejected(self):
        state, views, encoder, _, sequencer = _setup()
        with pytest.raises(ValueError, match="frame_delay_ms"):
            asyncio.run(sequencer.export(total_frames=2, frame_delay_ms=-1))
        assert encoder.appends == []
        assert views.sets == []
        assert not state.export_in_progress


def test_end_to_end_with_real_renderer_and_gif_encoder():
    state = AngleState(42.0)
    delivered = []

    async def scenario():
        renderer = ViewRenderer(state)
        try:
            sequencer = FrameSequencer(
                state,
                renderer,
                GifEncoder(800, 400),
                deliver=lambda data, name: delivered.append((data, name)),
            )
            return await sequencer.export(total_frames=4)
        finally:
            renderer.close()

    data = asyncio.run(scenario())
    assert state.get() == 42.0
    assert delivered == [(data, "moon-phases.gif")]
    with Image.open(io.BytesIO(data)) as gif:
        assert gif.size == (800, 400)
        assert gif.n_frames == 4
